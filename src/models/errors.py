"""
Error taxonomy for parsing and validation

Parse-phase errors are fatal to a parse call and are raised as ParseError.
Validation problems are collected as Violation records (see lib.validator)
and share the SchemaViolation kind.
"""

from enum import Enum
from dataclasses import dataclass
from typing import List, Sequence


class ErrorKind(Enum):
    """Structured error kinds reported through the error channel"""
    UNTERMINATED_ATTRIBUTES = "UnterminatedAttributes"
    UNTERMINATED_DIRECTIVE = "UnterminatedDirective"
    UNMATCHED_CLOSE = "UnmatchedClose"
    DUPLICATE_ATTRIBUTE = "DuplicateAttribute"
    DUPLICATE_SLOT = "DuplicateSlot"
    SLOT_OUTSIDE_DIRECTIVE = "SlotOutsideDirective"
    SCHEMA_VIOLATION = "SchemaViolation"
    INVALID_PROPS = "InvalidProps"
    INPUT_TOO_LARGE = "InputTooLarge"
    NESTING_TOO_DEEP = "NestingTooDeep"


@dataclass(frozen=True)
class ParseIssue:
    """
    One entry in the error channel

    Attributes:
        kind: Error kind
        line: 1-based source line the error refers to
        message: Human-readable description
    """
    kind: ErrorKind
    line: int
    message: str

    def __str__(self) -> str:
        return f"line {self.line}: {self.kind.value}: {self.message}"


class ParseError(Exception):
    """
    Raised when tokenizing or parsing a document fails

    Carries the ordered list of issues; no partial tree is ever attached.
    """

    def __init__(self, issues: Sequence[ParseIssue]):
        self.issues: List[ParseIssue] = list(issues)
        super().__init__("\n".join(str(issue) for issue in self.issues))

    @classmethod
    def single(cls, kind: ErrorKind, line: int, message: str) -> "ParseError":
        """Build a ParseError holding exactly one issue"""
        return cls([ParseIssue(kind=kind, line=line, message=message)])

    @property
    def kind(self) -> ErrorKind:
        """Kind of the first (usually only) issue"""
        return self.issues[0].kind

    @property
    def line(self) -> int:
        """Line of the first (usually only) issue"""
        return self.issues[0].line
