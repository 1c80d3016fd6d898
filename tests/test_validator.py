"""
Tree validator tests

Tests each schema rule, violation paths and the registry/settings switches.
"""

from pathlib import Path

import pytest

from slotdown.config import AppSettings
from slotdown.lib.parser import Parser, document_parse
from slotdown.lib.registry import SchemaRegistry
from slotdown.lib.validator import TreeValidator
from slotdown.models.directives import DirectiveCategory, DirectiveSchema
from slotdown.models.errors import ErrorKind


FIXTURES = Path(__file__).parent / 'fixtures'


@pytest.fixture
def validator():
    return TreeValidator(SchemaRegistry(), settings=AppSettings())


def validate(validator, source):
    return validator.document_validate(Parser(source).parse())


def rules(violations):
    return [(v.rule, v.name) for v in violations]


class TestValidDocuments:

    def test_landing_page(self, validator):
        """The landing fixture uses every built-in correctly"""
        source = (FIXTURES / 'landing.md').read_text()
        assert validate(validator, source) == []

    def test_plain_text(self, validator):
        assert validate(validator, "Just words.") == []

    def test_validation_does_not_mutate(self, validator):
        document = Parser("::card{colour=red}\n#footer\nX\n::").parse()
        before = repr(document)
        validator.document_validate(document)
        assert repr(document) == before


class TestRules:
    """One test per rule"""

    def test_unknown_directive(self, validator):
        violations = validate(validator, "::mystery\n::")
        assert rules(violations) == [('unknown-directive', 'mystery')]
        assert violations[0].kind == ErrorKind.SCHEMA_VIOLATION

    def test_missing_slot(self, validator):
        violations = validate(validator, "::block-hero\n#description\nD\n::")
        assert rules(violations) == [('missing-slot', 'title')]

    def test_empty_required_slot(self, validator):
        """A declared but empty required slot counts as missing"""
        violations = validate(validator, "::block-hero\n#title\n#description\nD\n::")
        assert rules(violations) == [('missing-slot', 'title')]

    def test_unknown_slot(self, validator):
        violations = validate(validator, "::card\n#footer\nX\n::")
        assert rules(violations) == [('unknown-slot', 'footer')]

    def test_missing_attribute(self, validator):
        violations = validate(validator, "::terminal\n::")
        assert rules(violations) == [('missing-attribute', 'content')]

    def test_unknown_attribute(self, validator):
        violations = validate(validator, "::card{colour=red}\n::")
        assert rules(violations) == [('unknown-attribute', 'colour')]

    @pytest.mark.parametrize("source, name", [
        ("::card-group{cols=three}\n::", 'cols'),
        ("::card-group{cols}\n::", 'cols'),
        ("::terminal{content=x copy=1}\n::", 'copy'),
        ("::card{target=_top}\n::", 'target'),
        ('::card{icon="3" color=purple}\n::', 'color'),
    ])
    def test_attribute_type(self, validator, source, name):
        assert rules(validate(validator, source)) == [('attribute-type', name)]

    def test_attribute_types_accepted(self, validator):
        assert validate(validator, "::card-group{cols=2.5}\n::") == []
        assert validate(validator, "::terminal{content=x copy}\n::") == []

    def test_inline_block_mismatch(self, validator):
        assert rules(validate(validator, "::ellipsis\n::")) == [('inline-mismatch', 'ellipsis')]
        assert rules(validate(validator, "See :card{icon=x}")) == [('inline-mismatch', 'card')]

    def test_nested_directive(self, validator):
        violations = validate(validator, "::terminal{content=x}\n::card\n::\n::")
        assert rules(violations) == [('nested-directive', 'card')]
        assert violations[0].line == 2

    def test_inline_allowed_in_leaf(self, validator):
        """Inline decorations do not count as nesting"""
        assert validate(validator, "::list\n- a :ellipsis{blur=4px}\n::") == []

    def test_all_violations_reported(self, validator):
        """Validation is batch: every problem is reported"""
        violations = validate(validator, "::card{colour=red}\n#footer\nX\n::\n::mystery\n::")
        assert rules(violations) == [
            ('unknown-slot', 'footer'),
            ('unknown-attribute', 'colour'),
            ('unknown-directive', 'mystery'),
        ]


class TestPaths:

    def test_nested_path(self, validator):
        source = (
            "::block-hero\n#title\nT\n#extra\n  ::card\n  ::\n  ::card{bogus}\n  ::\n::"
        )
        violations = validate(validator, source)
        assert len(violations) == 1
        assert violations[0].path == '/block-hero[0]/extra/card[1]'
        assert violations[0].line == 7

    def test_top_level_index_counts_text(self, validator):
        violations = validate(validator, "Intro\n\n::mystery\n::")
        assert violations[0].path == '/mystery[1]'

    def test_violation_to_issue(self, validator):
        violation = validate(validator, "::mystery\n::")[0]
        issue = violation.issue_make()
        assert issue.kind == ErrorKind.SCHEMA_VIOLATION
        assert issue.line == 1
        assert '/mystery[0]' in issue.message


class TestConfiguration:

    def test_allow_unknown_directives(self):
        validator = TreeValidator(
            SchemaRegistry(), settings=AppSettings(allow_unknown_directives=True)
        )
        assert validate(validator, "::mystery{a=1}\n#anything\nX\n::") == []

    def test_prose_wildcard(self, validator):
        """prose-* accepts any attributes and slots, block or inline"""
        assert validate(validator, "::prose-note{tone=soft}\n#aside\nX\n::") == []
        assert validate(validator, "Hello :prose-code{lang=py}") == []

    def test_custom_schema(self):
        registry = SchemaRegistry(builtins=False)
        registry.register(DirectiveSchema(
            kind='callout',
            category=DirectiveCategory.CUSTOM,
            description='Note box',
            required_slots=['title'],
        ))
        validator = TreeValidator(registry, settings=AppSettings())

        assert validate(validator, "::callout\n#title\nHi\n::") == []
        assert rules(validate(validator, "::card\n::")) == [('unknown-directive', 'card')]


class TestDocumentParse:
    """document_parse with a validator"""

    def test_violations_keep_document(self, validator):
        result = document_parse("::mystery\n::", validator=validator)
        assert result.document is not None
        assert result.errors == []
        assert len(result.violations) == 1
        assert not result.ok

    def test_valid(self, validator):
        result = document_parse("::card\n#title\nA\n::", validator=validator)
        assert result.ok
