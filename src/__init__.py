"""
slotdown - Block-directive document parser

Parses ::directive{attr=value} documents with #slot sections into a typed,
validated component tree for rendering collaborators.
"""

__version__ = "0.3.0"
__author__ = "slotdown contributors"

from .lib import (
    Parser,
    ParseResult,
    document_parse,
    SchemaRegistry,
    TreeValidator,
    TreeVisitor,
    Serializer,
    LOG,
    state_connectToLogger,
)
from .models import Document, DirectiveNode, TextNode, ParseError, ErrorKind

__all__ = [
    "Parser",
    "ParseResult",
    "document_parse",
    "SchemaRegistry",
    "TreeValidator",
    "TreeVisitor",
    "Serializer",
    "LOG",
    "state_connectToLogger",
    "Document",
    "DirectiveNode",
    "TextNode",
    "ParseError",
    "ErrorKind",
    "__version__",
]
