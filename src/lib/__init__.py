"""
slotdown - Block-directive document parser

Tokenizer, parser, validator and serializer for ::directive{} documents.
"""

__version__ = "0.3.0"
__author__ = "slotdown contributors"

from .tokenizer import Tokenizer, tokens_scan
from .parser import Parser, ParseResult, document_parse
from .attributes import AttributeResolver, value_infer
from .slots import SlotBinder
from .registry import SchemaRegistry, SchemaRegistryError
from .validator import TreeValidator, Violation
from .visitor import NodeView, TreeVisitor, node_walk
from .serializer import Serializer
from .log import LOG, state_connectToLogger

__all__ = [
    "Tokenizer",
    "tokens_scan",
    "Parser",
    "ParseResult",
    "document_parse",
    "AttributeResolver",
    "value_infer",
    "SlotBinder",
    "SchemaRegistry",
    "SchemaRegistryError",
    "TreeValidator",
    "Violation",
    "NodeView",
    "TreeVisitor",
    "node_walk",
    "Serializer",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
