"""
Tokenizer data models

Line-oriented token types produced by the Tokenizer and consumed by the
Parser.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class TokenKind(Enum):
    """
    Kinds of tokens emitted while scanning a slotdown document

    One token per source line, except INLINE_DIRECTIVE and TEXT spans which
    may share a line when a paragraph line contains inline directives.
    """
    FENCE_OPEN = "fence-open"              # ::card{icon=x}
    FENCE_CLOSE = "fence-close"            # ::
    PROPS = "props"                        # --- yaml --- after a fence-open
    SLOT_MARKER = "slot-marker"            # #title
    INLINE_DIRECTIVE = "inline-directive"  # :ellipsis{width=75%}
    TEXT = "text"                          # plain text span
    BLANK = "blank"                        # empty line (paragraph break)
    CODE = "code"                          # line inside a ``` code block


@dataclass(frozen=True)
class Token:
    """
    A single token in source order

    Attributes:
        kind: Token kind
        line: 1-based source line number
        name: Directive or slot name (fence-open, inline, slot-marker)
        text: Span text for TEXT/CODE tokens, raw YAML for PROPS
        attributes: Raw "{...}" attribute list (braces included), if any
        indent: Leading whitespace width of the source line
        fence: Colon count for fence-open/fence-close tokens
        line_end: True when a TEXT/INLINE token is the last span of its line

    Example:
        "::card{icon=x}" at line 3:
        Token(kind=TokenKind.FENCE_OPEN, line=3, name="card",
              attributes="{icon=x}", fence=2)
    """
    kind: TokenKind
    line: int
    name: str = ""
    text: str = ""
    attributes: Optional[str] = None
    indent: int = 0
    fence: int = 0
    line_end: bool = True
