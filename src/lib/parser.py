"""
Directive parser for the slotdown dialect

Consumes the token stream and builds a Document tree depth-first, keeping an
explicit stack of open directive frames:

    FENCE_OPEN   → push a frame, resolve its attribute list
    PROPS        → merge the YAML props block into the open frame
    SLOT_MARKER  → start a named slot in the innermost frame
    TEXT/INLINE  → accumulate into the current paragraph
    BLANK/CODE   → paragraph break / verbatim code text
    FENCE_CLOSE  → pop the frame, attach it to its parent (or the Document)

Parsing is fail-fast: the first structural error aborts the call and no
partial tree is returned.

Example:
    >>> doc = Parser("::card{icon=x}\\nHello\\n::").parse()
    >>> doc.children[0].kind, doc.children[0].attributes
    ('card', {'icon': 'x'})
    >>> doc.children[0].slots
    {'default': [TextNode(text='Hello')]}
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union, TYPE_CHECKING

from ..config import AppSettings, appsettings
from ..models.errors import ErrorKind, ParseError, ParseIssue
from ..models.nodes import AttributeValue, DirectiveNode, Document, Node, TextNode
from ..models.tokens import Token, TokenKind
from .attributes import AttributeResolver
from .log import LOG
from .slots import SlotBinder
from .tokenizer import Tokenizer

if TYPE_CHECKING:
    from .validator import TreeValidator, Violation


@dataclass
class DirectiveFrame:
    """
    An open fenced directive awaiting its closing fence

    Attributes:
        kind: Directive name
        line: Line of the fence-open
        fence: Colon count the closing fence must repeat
        attributes: Resolved attributes (brace list + props block)
        binder: Slot binder collecting the body
    """
    kind: str
    line: int
    fence: int
    attributes: Dict[str, AttributeValue]
    binder: SlotBinder


Segment = Tuple[Union[str, DirectiveNode], int]


class Parser:
    """
    Parser for slotdown block-directive documents

    A Parser instance holds the mutable state of one parse call; create one
    per document (instances are cheap and nothing is shared between them).
    """

    def __init__(self, source: str, settings: Optional[AppSettings] = None):
        """
        Args:
            source: Raw document text
            settings: Configuration override (defaults to the appsettings singleton)

        Attributes:
            stack: Open directive frames, innermost last
            children: Top-level nodes of the Document
            paragraph: Pending text spans and inline directives with their lines
            code: Pending code-block lines
        """
        self.source = source
        self.settings = settings or appsettings
        self.resolver = AttributeResolver()
        self.stack: List[DirectiveFrame] = []
        self.children: List[Node] = []
        self.paragraph: List[Segment] = []
        self.line_open = False
        self.code: List[str] = []
        self.code_line = 0

    def parse(self) -> Document:
        """
        Parse the source into a Document

        Returns:
            Document whose children are the top-level nodes

        Raises:
            ParseError: On the first tokenizer or parser error

        Example:
            >>> len(Parser("::a\\n::\\n::b\\n::").parse().children)
            2
        """
        self.stack = []
        self.children = []
        self.paragraph = []
        self.code = []
        self.line_open = False

        if len(self.source) > self.settings.max_input_chars:
            raise ParseError.single(
                ErrorKind.INPUT_TOO_LARGE,
                1,
                f"Input has {len(self.source)} characters; limit is {self.settings.max_input_chars}",
            )

        for token in Tokenizer(self.source):
            LOG(f"Token {token.kind.name} line {token.line}: {token.name or token.text!r}", level=3)
            self.token_consume(token)

        self.paragraph_flush()
        self.code_flush()

        if self.stack:
            frame = self.stack[-1]
            raise ParseError.single(
                ErrorKind.UNTERMINATED_DIRECTIVE,
                frame.line,
                f"Directive '{frame.kind}' opened at line {frame.line} is never closed",
            )

        LOG(f"Parsed {len(self.children)} top-level node(s)", level=2)
        return Document(children=list(self.children))

    def token_consume(self, token: Token) -> None:
        """Dispatch one token to its handler"""
        kind = token.kind

        if kind is TokenKind.TEXT or kind is TokenKind.INLINE_DIRECTIVE:
            self.code_flush()
            self.span_append(token)
        elif kind is TokenKind.CODE:
            self.paragraph_flush()
            if not self.code:
                self.code_line = token.line
            self.code.append(token.text)
        elif kind is TokenKind.BLANK:
            self.paragraph_flush()
            self.code_flush()
        else:
            self.paragraph_flush()
            self.code_flush()
            if kind is TokenKind.FENCE_OPEN:
                self.fence_open(token)
            elif kind is TokenKind.PROPS:
                self.props_apply(token)
            elif kind is TokenKind.SLOT_MARKER:
                self.slot_open(token)
            elif kind is TokenKind.FENCE_CLOSE:
                self.fence_close(token)

    def fence_open(self, token: Token) -> None:
        """Push a frame for a fenced directive"""
        if self.settings.depth_exceeds(len(self.stack) + 1):
            raise ParseError.single(
                ErrorKind.NESTING_TOO_DEEP,
                token.line,
                f"Directive '{token.name}' exceeds the nesting limit of "
                f"{self.settings.max_nesting_depth}",
            )

        attributes = self.resolver.attributes_resolve(token.attributes, token.line)
        self.stack.append(DirectiveFrame(
            kind=token.name,
            line=token.line,
            fence=token.fence,
            attributes=attributes,
            binder=SlotBinder(token.name),
        ))
        LOG(f"Opened '{token.name}' at line {token.line} (depth {len(self.stack)})", level=3)

    def props_apply(self, token: Token) -> None:
        """Merge a props block into the innermost frame"""
        frame = self.stack[-1]
        frame.attributes = self.resolver.props_merge(frame.attributes, token.text, token.line)

    def slot_open(self, token: Token) -> None:
        """Start a named slot in the innermost frame"""
        if not self.stack:
            raise ParseError.single(
                ErrorKind.SLOT_OUTSIDE_DIRECTIVE,
                token.line,
                f"Slot '#{token.name}' appears outside of any directive",
            )
        self.stack[-1].binder.marker_open(token.name, token.line)

    def fence_close(self, token: Token) -> None:
        """Pop the innermost frame and attach it to its parent"""
        if not self.stack:
            raise ParseError.single(
                ErrorKind.UNMATCHED_CLOSE,
                token.line,
                "Closing fence without an open directive",
            )

        frame = self.stack[-1]
        if token.fence != frame.fence:
            raise ParseError.single(
                ErrorKind.UNMATCHED_CLOSE,
                token.line,
                f"Closing fence '{':' * token.fence}' does not match "
                f"'{':' * frame.fence}{frame.kind}' opened at line {frame.line}",
            )

        self.stack.pop()
        node = DirectiveNode(
            kind=frame.kind,
            attributes=frame.attributes,
            slots=frame.binder.slots_bind(),
            inline=False,
            line=frame.line,
            fence=frame.fence,
        )
        self.node_emit(node)
        LOG(f"Closed '{frame.kind}' with slots {list(node.slots)}", level=3)

    def span_append(self, token: Token) -> None:
        """
        Add a text span or inline directive to the current paragraph

        Lines of one paragraph are joined with a newline.
        """
        if self.paragraph and not self.line_open:
            self.paragraph.append(('\n', token.line))

        if token.kind is TokenKind.INLINE_DIRECTIVE:
            node = DirectiveNode(
                kind=token.name,
                attributes=self.resolver.attributes_resolve(token.attributes, token.line),
                slots={},
                inline=True,
                line=token.line,
                fence=0,
            )
            self.paragraph.append((node, token.line))
        else:
            self.paragraph.append((token.text, token.line))

        self.line_open = not token.line_end

    def paragraph_flush(self) -> None:
        """Emit the pending paragraph as TextNodes and inline DirectiveNodes"""
        text: Optional[str] = None
        text_line = 0

        for value, line in self.paragraph:
            if isinstance(value, str):
                if text is None:
                    text, text_line = value, line
                else:
                    text += value
                continue
            if text:
                self.node_emit(TextNode(text=text, line=text_line))
            text = None
            self.node_emit(value)

        if text:
            self.node_emit(TextNode(text=text, line=text_line))

        self.paragraph = []
        self.line_open = False

    def code_flush(self) -> None:
        """Emit pending code-block lines as one verbatim TextNode"""
        if self.code:
            self.node_emit(TextNode(text='\n'.join(self.code), line=self.code_line))
            self.code = []

    def node_emit(self, node: Node) -> None:
        """Attach a finished node to the innermost frame or the Document"""
        if self.stack:
            self.stack[-1].binder.child_append(node)
        else:
            self.children.append(node)


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of document_parse()

    Attributes:
        document: Parsed tree, or None when parse-phase errors occurred
        errors: Parse-phase errors (fatal; document is None when non-empty)
        violations: Schema violations (non-fatal; document is still present)
    """
    document: Optional[Document]
    errors: List[ParseIssue] = field(default_factory=list)
    violations: List["Violation"] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when the document parsed and has no violations"""
        return self.document is not None and not self.errors and not self.violations


def document_parse(
    source: str,
    validator: Optional["TreeValidator"] = None,
    settings: Optional[AppSettings] = None,
) -> ParseResult:
    """
    Parse (and optionally validate) a document without raising

    Args:
        source: Raw document text
        validator: If given, the parsed tree is validated and violations
                   are returned alongside it
        settings: Configuration override

    Returns:
        ParseResult with either a document or the parse errors

    Example:
        >>> result = document_parse("::a\\n")
        >>> result.document is None, result.errors[0].kind.value
        (True, 'UnterminatedDirective')
    """
    try:
        document = Parser(source, settings=settings).parse()
    except ParseError as e:
        LOG(f"Parse failed: {e}", level=2)
        return ParseResult(document=None, errors=e.issues)

    violations = validator.document_validate(document) if validator is not None else []
    return ParseResult(document=document, violations=violations)
