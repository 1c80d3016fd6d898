"""
Attribute resolver tests

Tests {key=value} parsing, value inference, duplicate detection and YAML
props blocks.
"""

import pytest

from slotdown.lib.attributes import AttributeResolver, value_infer
from slotdown.models.errors import ErrorKind, ParseError


@pytest.fixture
def resolver():
    return AttributeResolver()


class TestValueInference:
    """Test typing of unquoted values"""

    @pytest.mark.parametrize("raw, expected", [
        ("12", 12),
        ("-3", -3),
        ("0.5", 0.5),
        ("1e3", 1000.0),
        ("0px", "0px"),
        ("75%", "75%"),
        ("1.2.3", "1.2.3"),
        ("true", "true"),
        ("", ""),
    ])
    def test_infer(self, raw, expected):
        value = value_infer(raw)
        assert value == expected
        assert type(value) is type(expected)


class TestBraceLists:
    """Test the {key=value} micro-syntax"""

    def test_none_and_empty(self, resolver):
        """Absent or empty lists resolve to an empty mapping"""
        assert resolver.attributes_resolve(None, 1) == {}
        assert resolver.attributes_resolve("{}", 1) == {}
        assert resolver.attributes_resolve("{   }", 1) == {}

    def test_spec_example(self, resolver):
        """Inline ellipsis attributes stay strings"""
        attributes = resolver.attributes_resolve("{right=0px width=75%}", 1)
        assert attributes == {"right": "0px", "width": "75%"}

    def test_mixed_values(self, resolver):
        """Bare flags, numbers and quoted strings"""
        attributes = resolver.attributes_resolve('{icon=x wide cols=3 title="A B"}', 1)
        assert attributes == {"icon": "x", "wide": True, "cols": 3, "title": "A B"}

    def test_quoted_values_are_strings(self, resolver):
        """Quoting keeps numeric-looking values as strings"""
        attributes = resolver.attributes_resolve("{a=\"3\" b='4.5'}", 1)
        assert attributes == {"a": "3", "b": "4.5"}

    def test_escaped_quote(self, resolver):
        """Backslash escapes the quote character"""
        attributes = resolver.attributes_resolve(r'{t="say \"hi\"" p="C:\\dir"}', 1)
        assert attributes == {"t": 'say "hi"', "p": "C:\\dir"}

    def test_empty_value(self, resolver):
        """key= with nothing after it is an empty string"""
        assert resolver.attributes_resolve("{a= b}", 1) == {"a": "", "b": True}

    def test_source_order_preserved(self, resolver):
        attributes = resolver.attributes_resolve("{z=1 a=2 m=3}", 1)
        assert list(attributes) == ["z", "a", "m"]

    def test_duplicate_key(self, resolver):
        """Duplicate keys never overwrite"""
        with pytest.raises(ParseError) as excinfo:
            resolver.attributes_resolve("{a=1 b=2 a=3}", 7)
        assert excinfo.value.kind == ErrorKind.DUPLICATE_ATTRIBUTE
        assert excinfo.value.line == 7
        assert "'a'" in str(excinfo.value)

    def test_duplicate_flag(self, resolver):
        """A bare flag repeated is also a duplicate"""
        with pytest.raises(ParseError) as excinfo:
            resolver.attributes_resolve("{wide wide}", 1)
        assert excinfo.value.kind == ErrorKind.DUPLICATE_ATTRIBUTE

    def test_missing_key(self, resolver):
        """'=value' without a key is malformed"""
        with pytest.raises(ParseError) as excinfo:
            resolver.attributes_resolve("{=x}", 2)
        assert excinfo.value.kind == ErrorKind.INVALID_PROPS

    def test_unterminated_quote(self, resolver):
        with pytest.raises(ParseError) as excinfo:
            resolver.attributes_resolve('{a="open', 1)
        assert excinfo.value.kind == ErrorKind.UNTERMINATED_ATTRIBUTES


class TestPropsBlocks:
    """Test merging YAML props blocks"""

    def test_merge(self, resolver):
        """Props add typed scalars to the brace attributes"""
        merged = resolver.props_merge(
            {"icon": "x"}, "cta: Get started\nsecondary: false\nsize: 2", 3
        )
        assert merged == {"icon": "x", "cta": "Get started", "secondary": False, "size": 2}

    def test_empty_block(self, resolver):
        assert resolver.props_merge({"a": 1}, "", 1) == {"a": 1}

    def test_original_untouched(self, resolver):
        """props_merge returns a new mapping"""
        original = {"a": 1}
        resolver.props_merge(original, "b: 2", 1)
        assert original == {"a": 1}

    def test_duplicate_with_brace_list(self, resolver):
        """A key in both places is a DuplicateAttribute"""
        with pytest.raises(ParseError) as excinfo:
            resolver.props_merge({"icon": "x"}, "icon: y", 4)
        assert excinfo.value.kind == ErrorKind.DUPLICATE_ATTRIBUTE
        assert excinfo.value.line == 4

    @pytest.mark.parametrize("props", [
        "items: [1, 2]",
        "nested:\n  a: 1",
        "empty:",
        "- a\n- b",
        "a: [1,",
    ])
    def test_invalid_props(self, resolver, props):
        """Non-scalar values, non-mappings and bad YAML are rejected"""
        with pytest.raises(ParseError) as excinfo:
            resolver.props_merge({}, props, 5)
        assert excinfo.value.kind == ErrorKind.INVALID_PROPS
        assert excinfo.value.line == 5

    def test_repeated_key_in_block(self, resolver):
        """A key repeated inside one props block never overwrites"""
        with pytest.raises(ParseError) as excinfo:
            resolver.props_merge({}, "icon: a\nicon: b", 6)
        assert excinfo.value.kind == ErrorKind.DUPLICATE_ATTRIBUTE
        assert excinfo.value.line == 6
        assert "'icon'" in str(excinfo.value)

    def test_repeated_nested_key(self, resolver):
        """A repeat inside a nested mapping is still reported"""
        with pytest.raises(ParseError) as excinfo:
            resolver.props_merge({}, "links:\n  a: 1\n  a: 2", 2)
        assert excinfo.value.kind == ErrorKind.DUPLICATE_ATTRIBUTE
