"""
Models package for slotdown

Contains data structures and type definitions for tokens, trees, schemas,
errors and the CLI pipeline.
"""

from .state import ProgramState, pipeline
from .directives import (
    AttributeSpec,
    AttributeType,
    DirectiveCategory,
    DirectiveSchema,
    SchemaFile,
)
from .errors import ErrorKind, ParseError, ParseIssue
from .nodes import DEFAULT_SLOT, DirectiveNode, Document, Node, TextNode
from .tokens import Token, TokenKind

__all__ = [
    "ProgramState",
    "pipeline",
    "AttributeSpec",
    "AttributeType",
    "DirectiveCategory",
    "DirectiveSchema",
    "SchemaFile",
    "ErrorKind",
    "ParseError",
    "ParseIssue",
    "DEFAULT_SLOT",
    "DirectiveNode",
    "Document",
    "Node",
    "TextNode",
    "Token",
    "TokenKind",
]
