"""
Directive schema models

Per-kind schema records used by the SchemaRegistry and the TreeValidator,
plus the pydantic models describing an external YAML schema file.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class DirectiveCategory(Enum):
    """
    Categories of slotdown directives

    Used for organization and for documentation listings.
    """
    LAYOUT = "layout"        # ::block-hero, ::card
    CONTENT = "content"      # ::terminal, ::list
    DECORATION = "decoration"  # :ellipsis{}
    PROSE = "prose"          # ::prose-* overrides
    CUSTOM = "custom"        # loaded from a schema file


class AttributeType(Enum):
    """Declared value type of a directive attribute"""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"


@dataclass(frozen=True)
class AttributeSpec:
    """
    Declared contract for one attribute key

    Attributes:
        type: Expected value type
        required: Whether the attribute must be present
        choices: Allowed values for ENUM attributes
    """
    type: AttributeType = AttributeType.STRING
    required: bool = False
    choices: Tuple[str, ...] = ()

    def accepts(self, value: object) -> bool:
        """Check whether a resolved value satisfies this spec"""
        if self.type is AttributeType.STRING:
            return isinstance(value, str)
        if self.type is AttributeType.BOOLEAN:
            return isinstance(value, bool)
        if self.type is AttributeType.NUMBER:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        # ENUM: compare on the textual form so {level=2} matches choice "2"
        if isinstance(value, bool):
            return False
        return str(value) in self.choices


@dataclass
class DirectiveSchema:
    """
    Schema for one directive kind

    Attributes:
        kind: Directive name (without colons); "prose-*" style names are wildcards
        category: Category for organization
        description: Human-readable description
        required_slots: Slots that must be present and non-empty
        optional_slots: Slots that may be present ("default" included if allowed)
        attributes: Allowed attribute keys and their types
        allows_nested: Whether block directives may appear in the default slot
        inline: True for inline-only kinds, False for block-only, None for either
        allow_unknown_attributes: Skip the unknown-attribute check
        allow_any_slots: Skip the unknown-slot check
        examples: Example usage strings
    """
    kind: str
    category: DirectiveCategory
    description: str
    required_slots: List[str] = field(default_factory=list)
    optional_slots: List[str] = field(default_factory=list)
    attributes: Dict[str, AttributeSpec] = field(default_factory=dict)
    allows_nested: bool = True
    inline: Optional[bool] = False
    allow_unknown_attributes: bool = False
    allow_any_slots: bool = False
    examples: List[str] = field(default_factory=list)

    @property
    def is_wildcard(self) -> bool:
        return self.kind.endswith("*")

    def matches(self, kind: str) -> bool:
        """
        Check if this schema applies to a directive kind

        Handles wildcards (e.g., 'prose-*' matches 'prose-h1')
        """
        if self.kind == kind:
            return True
        if self.is_wildcard:
            return kind.startswith(self.kind[:-1])
        return False

    def slots_allowed(self) -> List[str]:
        return self.required_slots + self.optional_slots


class AttributeSpecFile(BaseModel):
    """One attribute entry in a YAML schema file"""
    type: AttributeType = AttributeType.STRING
    required: bool = False
    choices: List[str] = Field(default_factory=list)


class SlotsFile(BaseModel):
    """Slot declaration in a YAML schema file"""
    required: List[str] = Field(default_factory=list)
    optional: List[str] = Field(default_factory=lambda: ["default"])


class DirectiveSchemaFile(BaseModel):
    """One directive entry in a YAML schema file"""
    description: str = ""
    inline: Optional[bool] = False
    allows_nested: bool = True
    allow_unknown_attributes: bool = False
    allow_any_slots: bool = False
    slots: SlotsFile = Field(default_factory=SlotsFile)
    attributes: Dict[str, AttributeSpecFile] = Field(default_factory=dict)
    examples: List[str] = Field(default_factory=list)

    def schema_build(self, kind: str) -> DirectiveSchema:
        """Convert the validated file entry into a DirectiveSchema"""
        return DirectiveSchema(
            kind=kind,
            category=DirectiveCategory.CUSTOM,
            description=self.description,
            required_slots=list(self.slots.required),
            optional_slots=list(self.slots.optional),
            attributes={
                key: AttributeSpec(
                    type=spec.type, required=spec.required, choices=tuple(spec.choices)
                )
                for key, spec in self.attributes.items()
            },
            allows_nested=self.allows_nested,
            inline=self.inline,
            allow_unknown_attributes=self.allow_unknown_attributes,
            allow_any_slots=self.allow_any_slots,
            examples=list(self.examples),
        )


class SchemaFile(BaseModel):
    """
    Top-level YAML schema file

    Example:
        directives:
          callout:
            description: Highlighted note
            slots: {required: [title]}
            attributes:
              type: {type: enum, choices: [info, warning], required: true}
    """
    directives: Dict[str, DirectiveSchemaFile] = Field(default_factory=dict)
