"""
Schema registry for slotdown directive kinds

The registry is the single table of per-kind contracts (slots, attribute
types, nesting) that the TreeValidator checks and that renderers dispatch on.
Built-in schemas cover the dialect's standard components; more can be loaded
from a YAML schema file.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from ..models.directives import (
    AttributeSpec,
    AttributeType,
    DirectiveCategory,
    DirectiveSchema,
    SchemaFile,
)
from .log import LOG


class SchemaRegistryError(Exception):
    """Raised when a schema file cannot be loaded or validated"""
    pass


COLORS = ('primary', 'secondary', 'info', 'success', 'warning', 'danger', 'neutral')


class SchemaRegistry:
    """
    Registry of directive schemas

    Maps directive kinds to DirectiveSchema records. Wildcard schemas
    (e.g. 'prose-*') are consulted after exact matches.
    """

    def __init__(self, builtins: bool = True) -> None:
        """
        Args:
            builtins: Register the built-in component schemas
        """
        self.schemas: Dict[str, DirectiveSchema] = {}
        if builtins:
            self.layoutDirectives_register()
            self.contentDirectives_register()
            self.decorationDirectives_register()
            self.proseDirectives_register()

    def register(self, schema: DirectiveSchema) -> None:
        """Register (or replace) the schema for a kind"""
        if schema.kind in self.schemas:
            LOG(f"Replacing schema for '{schema.kind}'", level=2)
        self.schemas[schema.kind] = schema

    def schema_get(self, kind: str) -> Optional[DirectiveSchema]:
        """
        Look up the schema for a directive kind

        Args:
            kind: Directive name

        Returns:
            Exact match if registered, otherwise the first matching wildcard
            schema, otherwise None
        """
        if kind in self.schemas:
            return self.schemas[kind]

        for schema in self.schemas.values():
            if schema.is_wildcard and schema.matches(kind):
                return schema

        return None

    def kinds_list(self) -> List[str]:
        """All registered kinds (wildcards included), sorted"""
        return sorted(self.schemas)

    def directives_listByCategory(self, category: DirectiveCategory) -> list[DirectiveSchema]:
        """Get all schemas in a category"""
        return [schema for schema in self.schemas.values() if schema.category == category]

    def layoutDirectives_register(self) -> None:
        """Register page layout blocks"""
        self.register(DirectiveSchema(
            kind='block-hero',
            category=DirectiveCategory.LAYOUT,
            description='Landing page hero with title, description and call to action',
            required_slots=['title'],
            optional_slots=['description', 'headline', 'extra', 'actions', 'support', 'default'],
            attributes={
                'cta': AttributeSpec(),
                'secondary': AttributeSpec(),
                'snippet': AttributeSpec(),
                'align': AttributeSpec(type=AttributeType.ENUM, choices=('left', 'center')),
            },
            examples=['::block-hero\n#title\nBuild faster\n#description\nA short pitch\n::'],
        ))

        self.register(DirectiveSchema(
            kind='card',
            category=DirectiveCategory.LAYOUT,
            description='Bordered card with optional icon and link',
            optional_slots=['title', 'description', 'default'],
            attributes={
                'icon': AttributeSpec(),
                'to': AttributeSpec(),
                'target': AttributeSpec(type=AttributeType.ENUM, choices=('_blank', '_self')),
                'color': AttributeSpec(type=AttributeType.ENUM, choices=COLORS),
            },
            examples=['::card{icon=i-lucide-rocket}\n#title\nFast\n#description\nVery fast\n::'],
        ))

        self.register(DirectiveSchema(
            kind='card-group',
            category=DirectiveCategory.LAYOUT,
            description='Grid of cards',
            optional_slots=['default'],
            attributes={
                'cols': AttributeSpec(type=AttributeType.NUMBER),
            },
            examples=['::card-group\n  ::card\n  A\n  ::\n::'],
        ))

    def contentDirectives_register(self) -> None:
        """Register content components"""
        self.register(DirectiveSchema(
            kind='terminal',
            category=DirectiveCategory.CONTENT,
            description='Terminal window showing a command',
            optional_slots=['default'],
            attributes={
                'content': AttributeSpec(required=True),
                'copy': AttributeSpec(type=AttributeType.BOOLEAN),
            },
            allows_nested=False,
            examples=['::terminal{content="npx nuxi init"}\n::'],
        ))

        self.register(DirectiveSchema(
            kind='list',
            category=DirectiveCategory.CONTENT,
            description='Bulleted list with a custom icon',
            optional_slots=['default'],
            attributes={
                'icon': AttributeSpec(),
                'type': AttributeSpec(type=AttributeType.ENUM, choices=COLORS),
            },
            allows_nested=False,
            examples=['::list{type=success}\n- Fast\n- Simple\n::'],
        ))

    def decorationDirectives_register(self) -> None:
        """Register inline decorations"""
        self.register(DirectiveSchema(
            kind='ellipsis',
            category=DirectiveCategory.DECORATION,
            description='Blurred background ellipse',
            attributes={
                key: AttributeSpec() for key in ('left', 'right', 'top', 'width', 'blur')
            },
            allows_nested=False,
            inline=True,
            examples=[':ellipsis{right=0px width=75%}'],
        ))

    def proseDirectives_register(self) -> None:
        """Register the permissive prose-* override family"""
        self.register(DirectiveSchema(
            kind='prose-*',
            category=DirectiveCategory.PROSE,
            description='Prose component overrides (prose-h1, prose-code, ...)',
            inline=None,
            allow_unknown_attributes=True,
            allow_any_slots=True,
            examples=['::prose-note\nRemember this.\n::'],
        ))

    def schemas_loadDict(self, data: Any, source: str = "<dict>") -> int:
        """
        Register schemas from an already-loaded schema document

        Args:
            data: Mapping shaped like SchemaFile
            source: Origin used in error messages

        Returns:
            Number of schemas registered

        Raises:
            SchemaRegistryError: If the document does not match SchemaFile
        """
        try:
            schema_file = SchemaFile.model_validate(data or {})
        except ValidationError as e:
            raise SchemaRegistryError(f"Invalid schema file {source}: {e}")

        for kind, entry in schema_file.directives.items():
            self.register(entry.schema_build(kind))

        LOG(f"Loaded {len(schema_file.directives)} schema(s) from {source}", level=2)
        return len(schema_file.directives)

    def schemas_loadYaml(self, path: Union[str, Path]) -> int:
        """
        Register schemas from a YAML schema file

        Args:
            path: Path to the YAML file

        Returns:
            Number of schemas registered

        Raises:
            SchemaRegistryError: If the file is missing, unparsable or invalid
        """
        schema_path = Path(path)
        if not schema_path.exists():
            raise SchemaRegistryError(f"Schema file not found: {schema_path}")

        try:
            with open(schema_path, 'r', encoding='utf-8') as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SchemaRegistryError(f"Failed to parse {schema_path}: {e}")

        return self.schemas_loadDict(data, source=str(schema_path))
