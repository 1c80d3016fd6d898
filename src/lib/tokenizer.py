"""
Tokenizer for the slotdown block-directive dialect

Scans raw text line by line into a flat, lazy sequence of tokens:

    ::block-hero{align=left}   → FENCE_OPEN  (name="block-hero", attributes="{align=left}")
    ---                        → PROPS       (YAML mapping up to the next ---)
    #title                     → SLOT_MARKER (name="title")
    Build :badge{x} fast       → TEXT "Build ", INLINE_DIRECTIVE badge, TEXT " fast"
    ::                         → FENCE_CLOSE

Markdown code blocks (``` or ~~~) are opaque: their lines become CODE tokens
and are never classified as directive syntax.

Text keeps its indentation relative to the fence-open line that encloses it,
so indented nested blocks read the same as flush-left ones.
"""

import re
from typing import Iterator, List, Optional, Tuple

from ..models.errors import ErrorKind, ParseError
from ..models.tokens import Token, TokenKind


FENCE_OPEN_RE = re.compile(r'^(:{2,})([A-Za-z][\w-]*)(.*)$')
FENCE_CLOSE_RE = re.compile(r'^:{2,}$')
SLOT_MARKER_RE = re.compile(r'^#([A-Za-z][\w-]*)$')
INLINE_RE = re.compile(r'(?<![\w:]):([A-Za-z][\w-]*)\{')
CODE_FENCE_RE = re.compile(r'^(`{3,}|~{3,})')
PROPS_DELIMITER = '---'


def attributes_scanEnd(text: str, start: int) -> int:
    """
    Find the end of a "{...}" attribute list

    Quote-aware: braces inside "..." or '...' do not count, and a backslash
    escapes the quote character inside a quoted value.

    Args:
        text: Text containing the attribute list
        start: Position of the opening '{'

    Returns:
        Position just past the closing '}', or -1 if the list is unterminated

    Example:
        >>> attributes_scanEnd('{a="}" b} tail', 0)
        9
    """
    quote: Optional[str] = None
    pos = start + 1

    while pos < len(text):
        char = text[pos]
        if quote:
            if char == '\\' and pos + 1 < len(text):
                pos += 2
                continue
            if char == quote:
                quote = None
        elif char in '"\'':
            quote = char
        elif char == '}':
            return pos + 1
        pos += 1

    return -1


def indent_measure(line: str) -> int:
    """Width of leading whitespace"""
    return len(line) - len(line.lstrip())


class Tokenizer:
    """
    Lazy, restartable line tokenizer

    Iterating a Tokenizer starts a fresh scan each time, so the same instance
    can be consumed more than once.

    Raises (while iterating):
        ParseError(UnterminatedAttributes): unclosed '{' in an attribute list
            or an unclosed props block
    """

    def __init__(self, source: str):
        """
        Args:
            source: Raw document text
        """
        self.source = source
        self.lines: List[str] = source.splitlines()

    def __iter__(self) -> Iterator[Token]:
        return self.tokens_generate()

    def tokens_generate(self) -> Iterator[Token]:
        """
        Generate tokens in source order

        Tracks the indentation of open fences (for dedenting text) and
        whether the scan is inside a markdown code block.
        """
        indents: List[int] = []
        code_marker: Optional[str] = None
        index = 0

        while index < len(self.lines):
            raw = self.lines[index].rstrip()
            line_no = index + 1
            index += 1
            stripped = raw.strip()
            indent = indent_measure(raw)
            text = self.line_dedent(raw, indents[-1] if indents else 0)

            # Inside a code block everything is verbatim until the closing fence
            if code_marker:
                if stripped.startswith(code_marker) and not stripped.strip(code_marker[0]):
                    code_marker = None
                yield Token(kind=TokenKind.CODE, line=line_no, text=text, indent=indent)
                continue

            if not stripped:
                yield Token(kind=TokenKind.BLANK, line=line_no)
                continue

            code_match = CODE_FENCE_RE.match(stripped)
            if code_match:
                code_marker = code_match.group(1)
                yield Token(kind=TokenKind.CODE, line=line_no, text=text, indent=indent)
                continue

            if FENCE_CLOSE_RE.match(stripped):
                if indents:
                    indents.pop()
                yield Token(
                    kind=TokenKind.FENCE_CLOSE, line=line_no, indent=indent, fence=len(stripped)
                )
                continue

            fence = self.fenceOpen_match(stripped, line_no, indent)
            if fence is not None:
                indents.append(indent)
                yield fence
                collected = self.props_collect(index, line_no, indent)
                if collected is not None:
                    props, index = collected
                    yield props
                continue

            slot_match = SLOT_MARKER_RE.match(stripped)
            if slot_match:
                yield Token(
                    kind=TokenKind.SLOT_MARKER, line=line_no, name=slot_match.group(1), indent=indent
                )
                continue

            yield from self.line_split(text, line_no, indent)

    def line_dedent(self, raw: str, base_indent: int) -> str:
        """Strip up to base_indent leading whitespace characters"""
        removable = min(indent_measure(raw), base_indent)
        return raw[removable:]

    def fenceOpen_match(self, stripped: str, line_no: int, indent: int) -> Optional[Token]:
        """
        Classify a line as a fence-open

        Args:
            stripped: Line with surrounding whitespace removed
            line_no: 1-based line number
            indent: Leading whitespace width

        Returns:
            FENCE_OPEN token, or None if the line is not a fence-open
            (trailing text after the name or attribute list makes it plain text)

        Raises:
            ParseError: If the attribute list is never closed
        """
        match = FENCE_OPEN_RE.match(stripped)
        if not match:
            return None

        colons, name, rest = match.groups()
        attributes: Optional[str] = None

        if rest.startswith('{'):
            end = attributes_scanEnd(rest, 0)
            if end == -1:
                raise ParseError.single(
                    ErrorKind.UNTERMINATED_ATTRIBUTES,
                    line_no,
                    f"Attribute list of '{colons}{name}' is never closed",
                )
            if rest[end:].strip():
                return None
            attributes = rest[:end]
        elif rest.strip():
            return None

        return Token(
            kind=TokenKind.FENCE_OPEN,
            line=line_no,
            name=name,
            attributes=attributes,
            indent=indent,
            fence=len(colons),
        )

    def props_collect(
        self, index: int, fence_line: int, base_indent: int
    ) -> Optional[Tuple[Token, int]]:
        """
        Collect a YAML props block directly following a fence-open

        Args:
            index: 0-based index of the line after the fence-open
            fence_line: Line number of the fence-open (for error reporting)
            base_indent: Indentation of the fence-open line

        Returns:
            (PROPS token with the raw YAML text, index of the line after the
            closing delimiter), or None if no block starts here

        Raises:
            ParseError: If the closing '---' is missing
        """
        if index >= len(self.lines) or self.lines[index].strip() != PROPS_DELIMITER:
            return None

        body: List[str] = []
        cursor = index + 1
        while cursor < len(self.lines):
            raw = self.lines[cursor].rstrip()
            if raw.strip() == PROPS_DELIMITER:
                token = Token(
                    kind=TokenKind.PROPS,
                    line=index + 1,
                    text='\n'.join(body),
                    indent=base_indent,
                )
                return token, cursor + 1
            body.append(self.line_dedent(raw, base_indent))
            cursor += 1

        raise ParseError.single(
            ErrorKind.UNTERMINATED_ATTRIBUTES,
            index + 1,
            f"Props block of the directive opened at line {fence_line} is never closed",
        )

    def line_split(self, text: str, line_no: int, indent: int) -> Iterator[Token]:
        """
        Split a plain-text line into TEXT spans and INLINE_DIRECTIVE tokens

        Args:
            text: Dedented line text
            line_no: 1-based line number
            indent: Leading whitespace width of the raw line

        Raises:
            ParseError: If an inline directive's attribute list is never closed

        Example:
            "Hi :badge{x} there" →
                TEXT "Hi ", INLINE_DIRECTIVE badge "{x}", TEXT " there"
        """
        spans: List[Token] = []
        pos = 0

        while True:
            match = INLINE_RE.search(text, pos)
            if not match:
                break

            brace = match.end() - 1
            end = attributes_scanEnd(text, brace)
            if end == -1:
                raise ParseError.single(
                    ErrorKind.UNTERMINATED_ATTRIBUTES,
                    line_no,
                    f"Attribute list of inline directive ':{match.group(1)}' is never closed",
                )

            if match.start() > pos:
                spans.append(Token(
                    kind=TokenKind.TEXT, line=line_no, text=text[pos:match.start()], indent=indent
                ))
            spans.append(Token(
                kind=TokenKind.INLINE_DIRECTIVE,
                line=line_no,
                name=match.group(1),
                attributes=text[brace:end],
                indent=indent,
            ))
            pos = end

        if pos < len(text) or not spans:
            spans.append(Token(kind=TokenKind.TEXT, line=line_no, text=text[pos:], indent=indent))

        for span in spans[:-1]:
            yield Token(
                kind=span.kind,
                line=span.line,
                name=span.name,
                text=span.text,
                attributes=span.attributes,
                indent=span.indent,
                line_end=False,
            )
        yield spans[-1]


def tokens_scan(source: str) -> List[Token]:
    """Tokenize a whole document eagerly"""
    return list(Tokenizer(source))
