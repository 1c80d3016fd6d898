"""
Centralized logging using Loguru with context-aware verbosity.

LOG() respects the verbosity of the ProgramState bound to the current
context, so tokenizer, parser and validator code can trace their work
without having the state passed in.

Features:
- Verbosity taken from the connected ProgramState
- Timestamped, colored output on stderr
- Per-context binding via contextvars (parallel parses do not interfere)
- Silent when no state is connected (library use)

Usage:
    from slotdown.lib.log import LOG, state_connectToLogger

    # At start of a pipeline:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("Parsed 12 top-level nodes", level=1)
    LOG("Resolved attributes for ::card at line 7", level=2)
    LOG("Token FENCE_OPEN line 7: card", level=3)
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{module: <10}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Bind a ProgramState to the logging context.

    Args:
        state: ProgramState instance (anything with a verbosity attribute)
    """
    _program_state.set(state)


def state_disconnectFromLogger() -> None:
    """Unbind any ProgramState, silencing LOG() in this context"""
    _program_state.set(None)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if the connected state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=trace)
        **kwargs: Additional loguru arguments

    Example:
        LOG("Validation found 2 violations", level=1)
        LOG("Slot 'title' opened in ::block-hero", level=3)
    """
    state = _program_state.get()

    if state is not None and getattr(state, 'verbosity', 0) >= level:
        logger.opt(depth=1).debug(message, **kwargs)
