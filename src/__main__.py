#!/usr/bin/env python3
"""
slotdown - Block-directive document parser

Parses a content page written in the ::directive{} dialect into a validated
component tree and writes it as JSON for a rendering collaborator.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Philosophy:
    - Content-first: pages stay readable markdown with component blocks
    - Fail fast on structure: a broken tree is never handed to a renderer
    - Report all schema problems at once: authors fix everything in one pass

Usage:
    slotdown inputdir/ outputdir/ --inputFile index.md

Examples:
    # Parse and validate against the built-in component schemas
    slotdown content/ out/ --inputFile index.md

    # Extra component schemas, normalized source, strict validation
    slotdown content/ out/ --inputFile index.md --schemaFile components.yaml --normalize --strict

    # Verbose output
    slotdown content/ out/ --inputFile index.md -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import (
    Parser,
    SchemaRegistry,
    SchemaRegistryError,
    Serializer,
    TreeValidator,
    __version__,
    LOG,
    state_connectToLogger,
)
from .lib.lexer import sourceLine_highlight
from .models import ParseError, ProgramState, pipeline


DISPLAY_TITLE = r"""
     _       _      _
 ___| | ___ | |_ __| | _____      ___ __
/ __| |/ _ \| __/ _` |/ _ \ \ /\ / / '_ \
\__ \ | (_) | || (_| | (_) \ V  V /| | | |
|___/_|\___/ \__\__,_|\___/ \_/\_/ |_| |_|

  Block-directive document parser
"""

# Define CLI arguments
parser = ArgumentParser(
    description="slotdown - parse ::directive{} documents into a validated component tree",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Input document (relative to inputdir)"
)

parser.add_argument(
    "--schemaFile",
    default=appsettings.schema_file,
    type=str,
    help="YAML file with additional directive schemas (relative to inputdir)",
)

parser.add_argument(
    "--outputFile",
    default="tree.json",
    type=str,
    help="JSON tree filename (relative to outputdir)",
)

parser.add_argument(
    "--normalize",
    action="store_true",
    help="Also write the re-serialized source next to the JSON tree",
)

parser.add_argument(
    "--strict",
    action="store_true",
    default=appsettings.strict_mode,
    help="Exit with an error when schema violations are found",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the input document
            - schemaSourceFile: Resolved schema file path (or None)
            - jsonOutputFile: Path the JSON tree will be written to
            - envOK: True if environment is valid

    Exits:
        1 if the input file or schema file is not found
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile
    if not input_file.exists():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    if state.schemaFile:
        schema_file = state.inputdir / state.schemaFile
        if not schema_file.exists():
            print(f"Error: Schema file not found: {schema_file}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        state.schemaSourceFile = schema_file
        LOG(f"Schema file: {schema_file}", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    state.jsonOutputFile = state.outputdir / state.outputFile
    LOG(f"Output file: {state.jsonOutputFile}", level=2)

    state.envOK = True
    return state


def parseErrors_print(source: str, errors: list) -> None:
    """Print parse errors with a highlighted excerpt of the offending line"""
    for issue in errors:
        print(f"Parse error: {issue}", file=sys.stderr)
        excerpt = sourceLine_highlight(source, issue.line)
        if excerpt:
            print(excerpt, file=sys.stderr)


def source_parse(inputstate: ProgramState) -> ProgramState:
    """
    Read and parse the input document into a Document tree.

    Args:
        inputstate: Program state with inputSourceFile set

    Returns:
        ProgramState with added fields:
            - sourceText: Raw document text
            - parsedDocument: Document tree
            - parseErrors: Empty list on success

    Exits:
        1 if the file cannot be read or parsing fails
    """

    state = inputstate.copy()

    LOG("Reading source file...", level=1)

    try:
        state.sourceText = state.inputSourceFile.read_text(encoding="utf-8")
        LOG(f"Read {len(state.sourceText)} characters from {state.inputSourceFile.name}", level=2)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading input file: {e}", file=sys.stderr)
        sys.exit(1)

    LOG("Parsing source into tree...", level=1)
    try:
        state.parsedDocument = Parser(state.sourceText).parse()
        state.parseErrors = []
        LOG(f"Parsed {len(state.parsedDocument.children)} top-level nodes", level=2)
    except ParseError as e:
        state.parseErrors = e.issues
        parseErrors_print(state.sourceText, e.issues)
        sys.exit(1)
    return state


def tree_validate(inputstate: ProgramState) -> ProgramState:
    """
    Validate the parsed tree against directive schemas.

    Violations are collected, not fatal; strict mode turns them into a
    failure in results_report.

    Args:
        inputstate: Program state with parsedDocument

    Returns:
        ProgramState with added field:
            - violations: List of Violation records

    Exits:
        1 if the schema file cannot be loaded
    """

    state = inputstate.copy()

    if not appsettings.validate_schema:
        LOG("Schema validation disabled", level=2)
        state.violations = []
        return state

    registry = SchemaRegistry()
    if state.schemaSourceFile:
        try:
            registry.schemas_loadYaml(state.schemaSourceFile)
        except SchemaRegistryError as e:
            print(f"Schema error: {e}", file=sys.stderr)
            sys.exit(1)

    LOG("Validating tree...", level=1)
    state.violations = TreeValidator(registry).document_validate(state.parsedDocument)
    for violation in state.violations:
        LOG(f"{violation}", level=1)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Write the JSON tree (and normalized source) and summarize results.

    Args:
        inputstate: Program state with parsedDocument and violations

    Returns:
        ProgramState with added field:
            - reportResult: Dict with output_file, normalized_file,
              node_count and violation_count

    Exits:
        1 if there is no parsed document, or in strict mode with violations
    """
    state: ProgramState = inputstate.copy()
    if state.parsedDocument is None:
        print("Error: No parsed document available", file=sys.stderr)
        sys.exit(1)

    serializer = Serializer()
    state.jsonOutputFile.write_text(
        serializer.tree_toJSON(state.parsedDocument, state.violations) + "\n", encoding="utf-8"
    )

    normalized_file = None
    if state.normalize:
        normalized_file = state.jsonOutputFile.with_suffix(".md")
        normalized_file.write_text(
            serializer.document_serialize(state.parsedDocument), encoding="utf-8"
        )

    state.reportResult = {
        "output_file": str(state.jsonOutputFile),
        "normalized_file": str(normalized_file) if normalized_file else None,
        "node_count": len(state.parsedDocument.children),
        "violation_count": len(state.violations),
    }

    for violation in state.violations:
        print(f"Schema violation: {violation}", file=sys.stderr)

    if state.verbosity >= 1:
        LOG("\n✓ Parse complete!", level=1)
        LOG(f"  Tree: {state.reportResult['output_file']}", level=1)
        if normalized_file:
            LOG(f"  Normalized source: {normalized_file}", level=1)
        LOG(f"  Top-level nodes: {state.reportResult['node_count']}", level=1)
        LOG(f"  Violations: {state.reportResult['violation_count']}", level=1)

    if state.strict and state.violations:
        print(f"Error: {len(state.violations)} schema violation(s) in strict mode", file=sys.stderr)
        sys.exit(1)
    return state


@chris_plugin(
    parser=parser,
    title="slotdown - Block-directive document parser",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - parse and validate a directive document.

    Orchestrates the pipeline:
        1. env_check: Validate paths and environment
        2. source_parse: Read and parse the document
        3. tree_validate: Check the tree against directive schemas
        4. results_report: Write JSON (and normalized source), report

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the source document
        outputdir: Directory where the JSON tree is written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, source_parse, tree_validate, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
