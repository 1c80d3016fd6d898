"""
Tree validator

Checks a finished Document against the SchemaRegistry and reports every
violation (batch, not fail-fast). The tree is never modified; an empty result
means it is renderable.

Rules:
    unknown-directive   kind has no schema (unless allowed by settings)
    inline-mismatch     inline use of a block-only kind, or vice versa
    missing-slot        required slot absent or empty
    unknown-slot        slot not declared by the schema
    missing-attribute   required attribute absent
    unknown-attribute   attribute key not declared by the schema
    attribute-type      value does not match the declared type / choices
    nested-directive    block directive in the default slot of a kind that
                        does not accept nesting
"""

from dataclasses import dataclass
from typing import List, Optional

from ..config import AppSettings, appsettings
from ..models.directives import AttributeType, DirectiveSchema
from ..models.errors import ErrorKind, ParseIssue
from ..models.nodes import DEFAULT_SLOT, DirectiveNode, Document
from .log import LOG
from .registry import SchemaRegistry
from .visitor import node_walk


@dataclass(frozen=True)
class Violation:
    """
    One schema violation

    Attributes:
        path: Tree path of the offending directive
        rule: Rule identifier (see module docstring)
        name: Offending slot/attribute/kind name
        line: Source line of the directive
        message: Human-readable description
    """
    path: str
    rule: str
    name: str
    line: int
    message: str

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.SCHEMA_VIOLATION

    def issue_make(self) -> ParseIssue:
        """Convert to the shared error-channel record"""
        return ParseIssue(kind=self.kind, line=self.line, message=f"{self.path}: {self.message}")

    def __str__(self) -> str:
        return f"line {self.line}: {self.path}: [{self.rule}] {self.message}"


class TreeValidator:
    """
    Validates documents against directive schemas

    Stateless between calls; one instance may validate many documents.
    """

    def __init__(
        self,
        registry: Optional[SchemaRegistry] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self.registry = registry or SchemaRegistry()
        self.settings = settings or appsettings

    def document_validate(self, document: Document) -> List[Violation]:
        """
        Validate every directive in the document

        Args:
            document: Parsed tree

        Returns:
            All violations in pre-order; empty when the tree is renderable
        """
        violations: List[Violation] = []

        for path, node in node_walk(document):
            if isinstance(node, DirectiveNode):
                violations.extend(self.node_validate(node, path))

        LOG(f"Validation found {len(violations)} violation(s)", level=2)
        return violations

    def node_validate(self, node: DirectiveNode, path: str) -> List[Violation]:
        """Validate a single directive (children are not descended into)"""
        schema = self.registry.schema_get(node.kind)
        if schema is None:
            if self.settings.allow_unknown_directives:
                return []
            return [Violation(
                path=path,
                rule='unknown-directive',
                name=node.kind,
                line=node.line,
                message=f"Unknown directive '{node.kind}'",
            )]

        violations: List[Violation] = []
        violations.extend(self.inline_check(node, schema, path))
        violations.extend(self.slots_check(node, schema, path))
        violations.extend(self.attributes_check(node, schema, path))
        violations.extend(self.nesting_check(node, schema, path))
        return violations

    def inline_check(
        self, node: DirectiveNode, schema: DirectiveSchema, path: str
    ) -> List[Violation]:
        if schema.inline is None or schema.inline == node.inline:
            return []
        expected = "inline (:name{...})" if schema.inline else "a fenced block (::name)"
        return [Violation(
            path=path,
            rule='inline-mismatch',
            name=node.kind,
            line=node.line,
            message=f"'{node.kind}' must be used as {expected}",
        )]

    def slots_check(
        self, node: DirectiveNode, schema: DirectiveSchema, path: str
    ) -> List[Violation]:
        violations: List[Violation] = []

        for slot in schema.required_slots:
            if not node.slot_get(slot):
                violations.append(Violation(
                    path=path,
                    rule='missing-slot',
                    name=slot,
                    line=node.line,
                    message=f"'{node.kind}' requires slot '#{slot}'",
                ))

        if not schema.allow_any_slots:
            allowed = schema.slots_allowed()
            for slot in node.slots:
                if slot not in allowed:
                    violations.append(Violation(
                        path=path,
                        rule='unknown-slot',
                        name=slot,
                        line=node.line,
                        message=f"'{node.kind}' does not accept slot '#{slot}'",
                    ))

        return violations

    def attributes_check(
        self, node: DirectiveNode, schema: DirectiveSchema, path: str
    ) -> List[Violation]:
        violations: List[Violation] = []

        for key, spec in schema.attributes.items():
            if spec.required and key not in node.attributes:
                violations.append(Violation(
                    path=path,
                    rule='missing-attribute',
                    name=key,
                    line=node.line,
                    message=f"'{node.kind}' requires attribute '{key}'",
                ))

        for key, value in node.attributes.items():
            spec = schema.attributes.get(key)
            if spec is None:
                if not schema.allow_unknown_attributes:
                    violations.append(Violation(
                        path=path,
                        rule='unknown-attribute',
                        name=key,
                        line=node.line,
                        message=f"'{node.kind}' does not accept attribute '{key}'",
                    ))
                continue

            if not spec.accepts(value):
                if spec.type is AttributeType.ENUM:
                    expected = "one of " + ", ".join(spec.choices)
                else:
                    expected = f"a {spec.type.value}"
                violations.append(Violation(
                    path=path,
                    rule='attribute-type',
                    name=key,
                    line=node.line,
                    message=f"Attribute '{key}' of '{node.kind}' must be {expected}, got {value!r}",
                ))

        return violations

    def nesting_check(
        self, node: DirectiveNode, schema: DirectiveSchema, path: str
    ) -> List[Violation]:
        if schema.allows_nested:
            return []

        return [
            Violation(
                path=path,
                rule='nested-directive',
                name=child.kind,
                line=child.line,
                message=f"'{node.kind}' does not accept nested directive '{child.kind}'",
            )
            for child in node.slot_get(DEFAULT_SLOT)
            if isinstance(child, DirectiveNode) and not child.inline
        ]
