"""
Custom Pygments lexer for slotdown syntax highlighting

Used by the CLI to show offending source lines in error reports, and
usable by any Pygments-based tool via the 'slotdown' alias.

Token types:
- Punctuation: Fence colons, braces, slot '#'
- Name.Tag: Fenced directive names (e.g., ::block-hero)
- Name.Function: Inline directive names (e.g., :ellipsis)
- Keyword.Declaration: Slot names (e.g., #title)
- Name.Attribute / Literal / String: Attribute keys and values
- Comment.Preproc: Props block delimiters
- String.Backtick: Markdown code blocks (opaque to the parser)
"""

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexer import RegexLexer, bygroups
from pygments.token import (
    Text,
    Whitespace,
    Punctuation,
    Name,
    String,
    Keyword,
    Literal,
    Operator,
    Comment,
)


class SlotdownLexer(RegexLexer):
    """
    Lexer for slotdown block-directive markup

    Example:
        ::card{icon=x}
        #title
        Hello :badge{new}
        ::

    Tokens:
        :: → Punctuation, card → Name.Tag, { icon = x } → attributes
        #title → Punctuation + Keyword.Declaration
        :badge → Punctuation + Name.Function
    """

    name = 'Slotdown'
    aliases = ['slotdown', 'mdc']
    filenames = ['*.mdc']

    tokens = {
        'root': [
            # Markdown code blocks are verbatim
            (r'^([ \t]*)(```|~~~)(.*\n)', bygroups(Whitespace, String.Backtick, String.Backtick), 'code'),

            # Fence-open: ::name
            (r'^([ \t]*)(:{2,})([A-Za-z][\w-]*)',
             bygroups(Whitespace, Punctuation, Name.Tag), 'fence'),

            # Fence-close: ::
            (r'^([ \t]*)(:{2,})([ \t]*)$', bygroups(Whitespace, Punctuation, Whitespace)),

            # Slot marker: #title
            (r'^([ \t]*)(#)([A-Za-z][\w-]*)([ \t]*)$',
             bygroups(Whitespace, Punctuation, Keyword.Declaration, Whitespace)),

            # Inline directive: :name{
            (r'(?<![\w:])(:)([A-Za-z][\w-]*)(\{)',
             bygroups(Punctuation, Name.Function, Punctuation), 'attributes'),

            (r'[^:\n]+', Text),
            (r'\n', Whitespace),
            (r':', Text),
        ],

        'fence': [
            (r'\{', Punctuation, 'attributes'),
            (r'\n[ \t]*---[ \t]*\n', Comment.Preproc, 'props'),
            (r'\n', Whitespace, '#pop'),
            (r'[^{\n]+', Text),
        ],

        'props': [
            (r'^[ \t]*---[ \t]*$', Comment.Preproc, '#pop:2'),
            (r'([^:\n]+)(:)', bygroups(Name.Attribute, Operator)),
            (r'[^\n]+', Literal),
            (r'\n', Whitespace),
        ],

        'attributes': [
            (r'\}', Punctuation, '#pop'),
            (r'"(\\.|[^"\\])*"', String.Double),
            (r"'(\\.|[^'\\])*'", String.Single),
            (r'([^\s=}"\']+)(=)', bygroups(Name.Attribute, Operator)),
            (r'[^\s=}"\']+', Literal),
            (r'\s+', Whitespace),
        ],

        'code': [
            (r'^([ \t]*)(```|~~~)([ \t]*)$', bygroups(Whitespace, String.Backtick, Whitespace), '#pop'),
            (r'[^\n]*\n', String),
            (r'[^\n]+', String),
        ],
    }


def get_lexer() -> SlotdownLexer:
    """
    Get the SlotdownLexer instance

    Returns:
        SlotdownLexer instance ready for use with Pygments
    """
    return SlotdownLexer()


def sourceLine_highlight(source: str, line: int, context: int = 1) -> str:
    """
    Render a source excerpt around a line for terminal error reports

    Args:
        source: Full document text
        line: 1-based line to point at
        context: Lines of context before and after

    Returns:
        Highlighted excerpt with line numbers; the target line is marked '>'
        (empty string if the line is out of range)
    """
    lines = source.splitlines()
    if line < 1 or line > len(lines):
        return ''

    first = max(1, line - context)
    last = min(len(lines), line + context)
    excerpt = '\n'.join(lines[first - 1:last]) + '\n'
    colored = highlight(excerpt, SlotdownLexer(), TerminalFormatter()).rstrip('\n').split('\n')

    rendered = []
    for number, text in zip(range(first, last + 1), colored):
        marker = '>' if number == line else ' '
        rendered.append(f"{marker} {number:>4} │ {text}")
    return '\n'.join(rendered)
