"""
Serializer for slotdown Document trees

Two outputs:
- directive text: renders a tree back to slotdown syntax such that parsing
  the result yields an equal tree (used for normalizing sources)
- dict / JSON: the plain-data form handed to external renderers
"""

import json
import math
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from ..config import appsettings
from ..models.nodes import (
    DEFAULT_SLOT,
    AttributeValue,
    DirectiveNode,
    Document,
    Node,
    TextNode,
    slotNames_ordered,
)
from .attributes import value_infer
from .log import LOG


BARE_VALUE_RE = re.compile(r'^[^\s"\'{}=]+$')
BARE_KEY_RE = re.compile(r'^[^\s"\'{}=]+$')
LINE_BREAKS = '\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029'


class PropsDumper(yaml.SafeDumper):
    """SafeDumper that keeps every props entry on a single source line"""


def str_represent(dumper: PropsDumper, value: str) -> yaml.ScalarNode:
    style = '"' if any(ch in LINE_BREAKS for ch in value) else None
    return dumper.represent_scalar('tag:yaml.org,2002:str', value, style=style)


PropsDumper.add_representer(str, str_represent)


def node_isBlock(node: Node) -> bool:
    return isinstance(node, DirectiveNode) and not node.inline


class Serializer:
    """
    Renders Documents to directive text or plain data

    Stateless; safe to share.
    """

    def __init__(self, indent: Optional[int] = None) -> None:
        """
        Args:
            indent: JSON indentation (defaults to settings.output_indent)
        """
        self.indent = appsettings.output_indent if indent is None else indent

    def document_serialize(self, document: Document) -> str:
        """
        Render a Document as slotdown text

        Args:
            document: Parsed tree

        Returns:
            Source text ending with a newline (empty string for an empty document)

        Example:
            >>> Serializer().document_serialize(Parser("::card{icon=x}\\nHi\\n::").parse())
            '::card{icon=x}\\nHi\\n::\\n'
        """
        text = self.nodes_serialize(document.children)
        LOG(f"Serialized {len(document.children)} top-level node(s)", level=2)
        return text + '\n' if text else ''

    def nodes_serialize(self, nodes: Sequence[Node]) -> str:
        """Render sibling nodes, choosing separators that preserve the tree"""
        parts: List[str] = []
        previous: Optional[Node] = None

        for node in nodes:
            if previous is not None:
                parts.append(self.separator_choose(previous, node))
            parts.append(self.node_serialize(node))
            previous = node

        return ''.join(parts)

    def separator_choose(self, previous: Node, node: Node) -> str:
        """
        Separator between two siblings

        Inline directives share a paragraph with neighbouring text; two text
        nodes are separate paragraphs; block directives sit on their own lines.
        """
        if node_isBlock(previous) or node_isBlock(node):
            return '\n'

        if isinstance(previous, TextNode) and isinstance(node, TextNode):
            return '\n\n'

        if isinstance(previous, TextNode):
            # text followed by an inline directive
            return '' if previous.text[-1:].isspace() else '\n\n'

        if isinstance(node, TextNode) and node.text.lstrip().startswith(('```', '~~~')):
            return '\n\n'

        return ''

    def node_serialize(self, node: Node) -> str:
        if isinstance(node, TextNode):
            return node.text
        if node.inline:
            brace, _ = self.attributes_split(node.attributes)
            return f":{node.kind}{{{brace}}}"
        return self.block_serialize(node)

    def block_serialize(self, node: DirectiveNode) -> str:
        """Render a fenced directive with its props block and slots"""
        fence = ':' * max(node.fence, 2)
        brace, props = self.attributes_split(node.attributes)
        lines = [f"{fence}{node.kind}{{{brace}}}" if brace else f"{fence}{node.kind}"]

        if props:
            lines.append('---')
            lines.append(yaml.dump(
                props,
                Dumper=PropsDumper,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
                width=float('inf'),
            ).rstrip('\n'))
            lines.append('---')

        body: List[str] = []
        for slot_name in slotNames_ordered(node.slots):
            children = node.slots[slot_name]
            if slot_name != DEFAULT_SLOT or not children:
                body.append(f"#{slot_name}")
            if children:
                body.append(self.nodes_serialize(children))

        if body and not props and body[0].split('\n', 1)[0].strip() == '---':
            # keep a leading thematic break from reading as a props block
            lines.append('')

        lines.extend(body)
        lines.append(fence)
        return '\n'.join(lines)

    def attributes_split(
        self, attributes: Dict[str, AttributeValue]
    ) -> Tuple[str, Dict[str, AttributeValue]]:
        """
        Split attributes into brace-list text and props-block values

        Values the brace syntax cannot express (False, non-finite floats,
        strings spanning lines, keys with spaces or quotes) go to the props
        block.

        Returns:
            (brace list body without braces, props mapping)
        """
        items: List[str] = []
        props: Dict[str, AttributeValue] = {}

        for key, value in attributes.items():
            if value is False or not BARE_KEY_RE.match(key):
                props[key] = value
            elif isinstance(value, float) and not math.isfinite(value):
                props[key] = value
            elif isinstance(value, str) and any(ch in LINE_BREAKS for ch in value):
                props[key] = value
            elif value is True:
                items.append(key)
            elif isinstance(value, (int, float)):
                items.append(f"{key}={value!r}")
            else:
                items.append(f"{key}={self.value_quote(value)}")

        return ' '.join(items), props

    def value_quote(self, value: str) -> str:
        """Quote a string value unless it reads back unchanged when bare"""
        if BARE_VALUE_RE.match(value) and value_infer(value) == value:
            return value
        escaped = value.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'

    def node_toDict(self, node: Node) -> Dict[str, Any]:
        """Plain-data form of one node"""
        if isinstance(node, TextNode):
            return {'type': 'text', 'text': node.text, 'line': node.line}
        return {
            'type': 'directive',
            'kind': node.kind,
            'inline': node.inline,
            'line': node.line,
            'attributes': dict(node.attributes),
            'slots': {
                name: [self.node_toDict(child) for child in node.slots[name]]
                for name in slotNames_ordered(node.slots)
            },
        }

    def tree_toDict(self, document: Document) -> Dict[str, Any]:
        """
        Plain-data form of a Document

        Example:
            {"type": "document", "children": [{"type": "directive", "kind": "card", ...}]}
        """
        return {
            'type': 'document',
            'children': [self.node_toDict(child) for child in document.children],
        }

    def tree_toJSON(self, document: Document, violations: Sequence[Any] = ()) -> str:
        """
        JSON form of a Document plus any validation violations

        Args:
            document: Parsed tree
            violations: Violation records to include under "violations"
        """
        payload = self.tree_toDict(document)
        payload['violations'] = [
            {
                'path': v.path,
                'rule': v.rule,
                'name': v.name,
                'line': v.line,
                'message': v.message,
            }
            for v in violations
        ]
        return json.dumps(payload, indent=self.indent or None, ensure_ascii=False)
