"""
Program state model and pipeline helper

ProgramState carries everything one CLI run knows; each pipeline stage
returns an updated copy instead of mutating shared objects.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field, fields, replace
from functools import reduce


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the slotdown CLI pipeline (state bus pattern).

    Each stage receives a copy of the state and adds its own fields.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, schemaFile,
                   outputFile, normalize, strict
        - env_check: inputSourceFile, schemaSourceFile, jsonOutputFile, envOK
        - source_parse: sourceText, parsedDocument, parseErrors
        - tree_validate: violations
        - results_report: reportResult

    Attributes:
        inputdir: Directory containing the source document
        outputdir: Base output directory
        verbosity: Logging verbosity level (1-3)
        inputFile: Source filename (relative to inputdir)
        schemaFile: Optional YAML schema file (relative to inputdir)
        outputFile: JSON tree filename (relative to outputdir)
        normalize: Also write the re-serialized source
        strict: Treat schema violations as failures
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the source document
        schemaSourceFile: Resolved path to the schema file, if any
        jsonOutputFile: Resolved path of the JSON tree output
        sourceText: Raw document text
        parsedDocument: Parsed Document (None on parse errors)
        parseErrors: Parse-phase errors
        violations: Schema violations
        reportResult: Summary of written outputs
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    schemaFile: Optional[str] = field(default=None)
    outputFile: str = field(default="tree.json")
    normalize: bool = field(default=False)
    strict: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    schemaSourceFile: Optional[Path] = field(default=None)
    jsonOutputFile: Path = field(default=Path("/"))
    sourceText: str = field(default="")
    parsedDocument: Optional[Any] = field(default=None)  # Document at runtime
    parseErrors: List[Any] = field(default_factory=list)  # List[ParseIssue]
    violations: List[Any] = field(default_factory=list)  # List[Violation]
    reportResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Build the initial state from parsed CLI options.

        Options without a matching ProgramState field (anything chris_plugin
        adds for its own use) are ignored.

        Args:
            options: Parsed CLI arguments (inputFile, schemaFile, ...)
            inputdir: Directory holding the source document
            outputdir: Directory receiving the JSON tree

        Returns:
            ProgramState carrying the CLI options
        """
        known = {f.name for f in fields(cls)}
        cli = {name: value for name, value in vars(options).items() if name in known}
        cli.update(inputdir=inputdir, outputdir=outputdir)
        return cls(**cli)

    def copy(self: PS) -> PS:
        """Shallow copy handed to the next pipeline stage"""
        return replace(self)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Run state transformations in order, feeding each stage the previous result.

    Example:
        final = pipeline(state, env_check, source_parse, tree_validate, results_report)
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
