"""Logging bootstrap shared by every command invocation.

All framework loggers live under the ``cmdframe`` namespace.  A single
:class:`rich.logging.RichHandler` writing to stderr is attached on first
use; calling :func:`configure_logging` again only adjusts the level.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from cmdframe.exceptions import MissingDependencyError

ROOT_LOGGER_NAME: str = "cmdframe"

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")

LEVELS: dict[str, int] = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}

LEVEL_NAMES: tuple[str, ...] = (*LEVELS, *(name.upper() for name in LEVELS))
"""Accepted ``--loglevel`` values, lowercase first."""

DEFAULT_LEVEL: int = logging.WARNING

_LOGLEVEL_PATTERN = re.compile(r"--loglevel\s*=?\s*([a-zA-Z]+)")


def level_for_name(name: str) -> int:
    """Map a ``--loglevel`` value to a :mod:`logging` level.

    Raises
    ------
    KeyError
        If *name* is not one of :data:`LEVEL_NAMES`.
    """
    return LEVELS[name.lower()]


def scan_log_level(argv: Sequence[str]) -> str | None:
    """Find a ``--loglevel`` value in raw argv before formal parsing."""
    match = _LOGLEVEL_PATTERN.search(" ".join(argv))
    if match is None:
        return None
    name = match.group(1)
    if name.lower() not in LEVELS:
        return None
    return name


def configure_logging(level: int = DEFAULT_LEVEL) -> logging.Logger:
    """Configure the ``cmdframe`` logger once and set its level.

    Avoids attaching duplicate handlers when called for every invocation
    of a long-lived host or test session.
    """
    try:
        from rich.console import Console
        from rich.logging import RichHandler
    except ModuleNotFoundError as exc:
        raise MissingDependencyError(
            "rich is not installed.",
            actions=("Install it with: pip install rich",),
        ) from exc

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s | %(message)s"))
        logger.addHandler(handler)

    return logger


def get_logger(command_id: str) -> logging.Logger:
    """Return the per-command child logger."""
    return logging.getLogger(ROOT_LOGGER_NAME).getChild(command_id)
