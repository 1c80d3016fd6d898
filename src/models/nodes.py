"""
Document tree models

The tree is built once per parse call and is not mutated afterwards. Nodes
own their slot contents exclusively; source line numbers are carried for
error reporting but do not take part in node equality.

Immutability is shallow: the dataclasses are frozen, but attributes, slots and
children are plain dicts and lists. Every parse builds fresh containers that no
other tree shares, so a caller that edits one only affects its own tree.
Renderers should read through visitor.NodeView, which copies them into
read-only mappings and tuples. Directive nodes and documents are not
hashable for the same reason.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union


AttributeValue = Union[str, int, float, bool]


@dataclass(frozen=True)
class TextNode:
    """
    Inert leaf holding literal text / inline markdown

    The text is opaque to slotdown and is handed to the renderer unmodified.

    Attributes:
        text: Paragraph or span text (lines joined with "\\n")
        line: 1-based line where the text starts
    """
    text: str
    line: int = field(default=0, compare=False, repr=False)


@dataclass(frozen=True)
class DirectiveNode:
    """
    A named, attributed block or inline directive

    Attributes:
        kind: Directive name (e.g., "block-hero", "card", "ellipsis")
        attributes: Resolved attribute mapping (unique keys)
        slots: Slot name -> ordered children; "default" holds unlabeled content
        inline: True for ":name{...}" spans, False for fenced "::name" blocks
        line: 1-based line of the fence-open or inline directive
        fence: Colon count of the opening fence (0 for inline directives)

    The attributes and slots containers are mutable (see the module
    docstring); the parser never hands the same container to two nodes.

    Example:
        "::card{icon=x}\\nHello\\n::" parses to
        DirectiveNode(kind="card", attributes={"icon": "x"},
                      slots={"default": [TextNode("Hello")]})
    """
    kind: str
    attributes: Dict[str, AttributeValue] = field(default_factory=dict)
    slots: Dict[str, List["Node"]] = field(default_factory=dict)
    inline: bool = False
    line: int = field(default=0, compare=False, repr=False)
    fence: int = field(default=2, compare=False, repr=False)

    def slot_get(self, name: str) -> List["Node"]:
        """Children of a slot, or an empty list if the slot is absent"""
        return self.slots.get(name, [])

    def children_iter(self) -> List[Tuple[str, "Node"]]:
        """All (slot name, child) pairs, default slot first"""
        pairs: List[Tuple[str, Node]] = []
        for slot_name in slotNames_ordered(self.slots):
            for child in self.slots[slot_name]:
                pairs.append((slot_name, child))
        return pairs


Node = Union[DirectiveNode, TextNode]


@dataclass(frozen=True)
class Document:
    """
    Root container: ordered top-level nodes

    Attributes:
        children: Top-level directive blocks, inline directives and paragraphs
    """
    children: List[Node] = field(default_factory=list)

    def directives_count(self) -> int:
        """Number of top-level block directives"""
        return sum(
            1 for child in self.children
            if isinstance(child, DirectiveNode) and not child.inline
        )


DEFAULT_SLOT = "default"


def slotNames_ordered(slots: Dict[str, List[Node]]) -> List[str]:
    """Slot names with the default slot first, others in declaration order"""
    names = [name for name in slots if name != DEFAULT_SLOT]
    if DEFAULT_SLOT in slots:
        names.insert(0, DEFAULT_SLOT)
    return names
