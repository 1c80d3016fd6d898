"""
Tokenizer tests

Tests line classification, inline splitting, code-block protection, props
blocks and tokenizer errors.
"""

import pytest

from slotdown.lib.tokenizer import Tokenizer, attributes_scanEnd, tokens_scan
from slotdown.models.errors import ErrorKind, ParseError
from slotdown.models.tokens import TokenKind


def kinds(source):
    return [token.kind for token in tokens_scan(source)]


class TestLineClassification:
    """Test one-token-per-line classification"""

    def test_fence_open_with_attributes(self):
        """Fence-open carries its raw attribute list"""
        tokens = tokens_scan("::card{icon=x}\nHello\n::")

        assert [t.kind for t in tokens] == [
            TokenKind.FENCE_OPEN, TokenKind.TEXT, TokenKind.FENCE_CLOSE
        ]
        assert tokens[0].name == "card"
        assert tokens[0].attributes == "{icon=x}"
        assert tokens[0].fence == 2
        assert tokens[0].line == 1
        assert tokens[2].line == 3

    def test_fence_open_without_attributes(self):
        """Bare fence-open has no attribute list"""
        tokens = tokens_scan("::block-hero\n::")
        assert tokens[0].name == "block-hero"
        assert tokens[0].attributes is None

    def test_wide_fences(self):
        """Three-colon fences record their width"""
        tokens = tokens_scan(":::outer\n:::")
        assert tokens[0].fence == 3
        assert tokens[1].kind == TokenKind.FENCE_CLOSE
        assert tokens[1].fence == 3

    def test_slot_marker(self):
        """#name on its own line is a slot marker"""
        tokens = tokens_scan("#title")
        assert tokens[0].kind == TokenKind.SLOT_MARKER
        assert tokens[0].name == "title"

    def test_markdown_heading_is_text(self):
        """'# Heading' (with a space) stays plain text"""
        assert kinds("# Heading") == [TokenKind.TEXT]

    def test_blank_lines(self):
        """Whitespace-only lines are BLANK"""
        assert kinds("a\n   \nb") == [TokenKind.TEXT, TokenKind.BLANK, TokenKind.TEXT]

    def test_fence_with_trailing_text_is_text(self):
        """Junk after the directive name makes the line plain text"""
        assert kinds("::card hello") == [TokenKind.TEXT]
        assert kinds("::card{a=1} hello") == [TokenKind.TEXT]

    def test_indented_fences(self):
        """Indentation does not prevent fence classification"""
        assert kinds("::outer\n  ::inner\n  X\n  ::\n::") == [
            TokenKind.FENCE_OPEN,
            TokenKind.FENCE_OPEN,
            TokenKind.TEXT,
            TokenKind.FENCE_CLOSE,
            TokenKind.FENCE_CLOSE,
        ]

    def test_text_dedented_to_fence(self):
        """Text loses the indentation of its enclosing fence-open"""
        tokens = tokens_scan("::outer\n  ::inner\n    X\n  ::\n::")
        assert tokens[2].text == "  X"

    def test_text_preserved_verbatim(self):
        """Markdown syntax in text is untouched, trailing whitespace dropped"""
        tokens = tokens_scan("Some **bold** [link](https://x.io)   ")
        assert tokens[0].text == "Some **bold** [link](https://x.io)"


class TestInlineDirectives:
    """Test splitting text lines around inline directives"""

    def test_inline_only_line(self):
        """A line holding just an inline directive"""
        tokens = tokens_scan(":ellipsis{right=0px width=75%}")

        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.INLINE_DIRECTIVE
        assert tokens[0].name == "ellipsis"
        assert tokens[0].attributes == "{right=0px width=75%}"

    def test_inline_mid_line(self):
        """Text spans around an inline directive"""
        tokens = tokens_scan("Hi :badge{x} there")

        assert [t.kind for t in tokens] == [
            TokenKind.TEXT, TokenKind.INLINE_DIRECTIVE, TokenKind.TEXT
        ]
        assert tokens[0].text == "Hi "
        assert tokens[2].text == " there"
        assert [t.line_end for t in tokens] == [False, False, True]

    def test_adjacent_inline_directives(self):
        """Two inline directives back to back"""
        tokens = tokens_scan(":a{x}:b{y}")
        assert [t.name for t in tokens] == ["a", "b"]

    def test_colon_after_word_is_text(self):
        """'a:b{c}' is not an inline directive"""
        assert kinds("key:value{c}") == [TokenKind.TEXT]

    def test_colon_without_braces_is_text(self):
        """Inline directives require an attribute list"""
        assert kinds("Note :important stuff") == [TokenKind.TEXT]


class TestCodeBlocks:
    """Test that fenced code is opaque"""

    def test_directive_syntax_inside_code(self):
        """Fences and slot markers inside ``` are CODE"""
        assert kinds("```\n::card\n#title\n::\n```") == [TokenKind.CODE] * 5

    def test_tilde_code_block(self):
        """~~~ fences work too"""
        assert kinds("~~~\n::x\n~~~\n::y\n::") == [
            TokenKind.CODE, TokenKind.CODE, TokenKind.CODE,
            TokenKind.FENCE_OPEN, TokenKind.FENCE_CLOSE,
        ]

    def test_blank_line_inside_code(self):
        """Blank lines inside code stay CODE"""
        tokens = tokens_scan("```\na\n\nb\n```")
        assert [t.kind for t in tokens] == [TokenKind.CODE] * 5
        assert tokens[2].text == ""


class TestPropsBlock:
    """Test YAML props blocks after a fence-open"""

    def test_props_collected(self):
        """Lines between --- delimiters become one PROPS token"""
        tokens = tokens_scan("::card\n---\nicon: x\nsize: 3\n---\nBody\n::")

        assert [t.kind for t in tokens] == [
            TokenKind.FENCE_OPEN, TokenKind.PROPS, TokenKind.TEXT, TokenKind.FENCE_CLOSE
        ]
        assert tokens[1].text == "icon: x\nsize: 3"
        assert tokens[1].line == 2
        assert tokens[2].line == 6

    def test_empty_props(self):
        """Two delimiters with nothing between"""
        tokens = tokens_scan("::card\n---\n---\n::")
        assert tokens[1].kind == TokenKind.PROPS
        assert tokens[1].text == ""
        assert tokens[2].kind == TokenKind.FENCE_CLOSE

    def test_dash_line_elsewhere_is_text(self):
        """--- not directly after a fence-open is plain text"""
        assert kinds("::card\n\n---\n::")[2] == TokenKind.TEXT

    def test_unterminated_props(self):
        """Missing closing --- is UnterminatedAttributes"""
        with pytest.raises(ParseError) as excinfo:
            tokens_scan("::card\n---\nicon: x\n")
        assert excinfo.value.kind == ErrorKind.UNTERMINATED_ATTRIBUTES
        assert excinfo.value.line == 2


class TestAttributeScanning:
    """Test quote-aware attribute list scanning"""

    def test_scan_end(self):
        assert attributes_scanEnd('{a="}" b} tail', 0) == 9

    def test_scan_unterminated(self):
        assert attributes_scanEnd('{a=1', 0) == -1

    def test_quoted_brace_in_fence(self):
        """A '}' inside quotes does not end the list"""
        tokens = tokens_scan('::card{title="a}b"}\n::')
        assert tokens[0].attributes == '{title="a}b"}'

    def test_unterminated_fence_attributes(self):
        """Unclosed '{' on a fence-open"""
        with pytest.raises(ParseError) as excinfo:
            tokens_scan("text\n::card{icon=x\n::")
        assert excinfo.value.kind == ErrorKind.UNTERMINATED_ATTRIBUTES
        assert excinfo.value.line == 2

    def test_unterminated_inline_attributes(self):
        """Unclosed '{' on an inline directive"""
        with pytest.raises(ParseError) as excinfo:
            tokens_scan("See :badge{new")
        assert excinfo.value.kind == ErrorKind.UNTERMINATED_ATTRIBUTES
        assert excinfo.value.line == 1


class TestLaziness:
    """Test the token stream contract"""

    def test_restartable(self):
        """Iterating twice yields the same tokens"""
        tokenizer = Tokenizer("::card\n#title\nA\n::")
        assert list(tokenizer) == list(tokenizer)

    def test_lazy_until_error(self):
        """Tokens before an error are produced before it is raised"""
        stream = iter(Tokenizer("ok\n::card{broken\n"))
        first = next(stream)
        assert first.kind == TokenKind.TEXT
        with pytest.raises(ParseError):
            next(stream)

    def test_empty_source(self):
        assert tokens_scan("") == []
