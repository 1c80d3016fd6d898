"""
Read-only traversal interface for rendering collaborators

Renderers never receive the mutable parser state: they get pre-order
traversal over the finished Document, and per directive a NodeView with
only (kind, attributes, slots), plus the raw text of TextNodes.

Example, collecting card titles:

    class CardTitles(TreeVisitor):
        def __init__(self) -> None:
            super().__init__()
            self.titles: list[str] = []
            self.handler_register('card', self.card_visit)

        def card_visit(self, view: NodeView) -> None:
            for child in view.slots.get('title', ()):
                if isinstance(child, TextNode):
                    self.titles.append(child.text)

    visitor = CardTitles()
    visitor.document_walk(document)
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Iterator, Mapping, Sequence, Tuple

from ..models.nodes import (
    AttributeValue,
    DirectiveNode,
    Document,
    Node,
    TextNode,
    slotNames_ordered,
)


@dataclass(frozen=True)
class NodeView:
    """
    Read-only projection of a DirectiveNode handed to renderers

    Attributes:
        kind: Directive name
        attributes: Read-only attribute mapping
        slots: Read-only slot mapping (children as tuples)
        inline: Inline (":name{}") vs fenced ("::name") directive
        line: Source line
        path: Tree path (e.g. "/block-hero[0]/title/card[1]")
    """
    kind: str
    attributes: Mapping[str, AttributeValue]
    slots: Mapping[str, Sequence[Node]]
    inline: bool
    line: int
    path: str

    @classmethod
    def node_project(cls, node: DirectiveNode, path: str) -> "NodeView":
        return cls(
            kind=node.kind,
            attributes=MappingProxyType(dict(node.attributes)),
            slots=MappingProxyType({
                name: tuple(node.slots[name]) for name in slotNames_ordered(node.slots)
            }),
            inline=node.inline,
            line=node.line,
            path=path,
        )


def path_step(node: Node, index: int) -> str:
    """Path segment for a node at a position within its slot"""
    if isinstance(node, DirectiveNode):
        return f"{node.kind}[{index}]"
    return f"text[{index}]"


def node_walk(document: Document) -> Iterator[Tuple[str, Node]]:
    """
    Yield (path, node) pairs in pre-order

    Children of a directive are visited slot by slot, default slot first.

    Example:
        "::card\\n#title\\nA\\n::" yields
            ("/card[0]", DirectiveNode(card)), ("/card[0]/title/text[0]", TextNode("A"))
    """
    pending = [
        (f"/{path_step(child, index)}", child)
        for index, child in enumerate(document.children)
    ]
    pending.reverse()

    while pending:
        path, node = pending.pop()
        yield path, node
        if isinstance(node, DirectiveNode):
            nested = []
            for slot_name in slotNames_ordered(node.slots):
                for index, child in enumerate(node.slots[slot_name]):
                    nested.append((f"{path}/{slot_name}/{path_step(child, index)}", child))
            pending.extend(reversed(nested))


DirectiveHandler = Callable[[NodeView], None]


class TreeVisitor:
    """
    Pre-order visitor with a per-kind handler table

    Directive nodes are dispatched through `handlers` (kind → callable);
    kinds without a handler go to directive_visitDefault(). Text leaves go
    to text_visit(). Subclass and register handlers for the kinds you render.
    """

    def __init__(self) -> None:
        self.handlers: Dict[str, DirectiveHandler] = {}

    def handler_register(self, kind: str, handler: DirectiveHandler) -> None:
        """Route a directive kind to a handler"""
        self.handlers[kind] = handler

    def document_walk(self, document: Document) -> None:
        """Visit every node of the document in pre-order"""
        for path, node in node_walk(document):
            self.node_visit(node, path)

    def node_visit(self, node: Node, path: str) -> None:
        match node:
            case TextNode():
                self.text_visit(node.text, path)
            case DirectiveNode():
                view = NodeView.node_project(node, path)
                self.handlers.get(node.kind, self.directive_visitDefault)(view)

    def text_visit(self, text: str, path: str) -> None:
        """Called for every TextNode; override to consume inline markdown"""
        pass

    def directive_visitDefault(self, view: NodeView) -> None:
        """Called for directive kinds without a registered handler"""
        pass
