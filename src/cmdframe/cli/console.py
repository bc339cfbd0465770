"""Rich console helpers for the CLI layer.

Consoles are created on demand rather than at import time so that the
stream they write to is whatever ``sys.stdout`` / ``sys.stderr`` is at
the moment of output (pytest's ``capsys`` relies on this).
"""

from __future__ import annotations

import sys
from typing import Any

from cmdframe.exceptions import MissingDependencyError


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` or raise ``MissingDependencyError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise MissingDependencyError(
            "rich is not installed.",
            actions=("Install it with: pip install rich",),
        ) from exc
    return Console


def get_console(*, stderr: bool = False) -> Any:
    """Create a Rich console targeting stdout, or stderr when *stderr*."""
    console_class = _load_rich_console_class()
    return console_class(stderr=stderr, soft_wrap=True, highlight=False)


def write_text(text: str, *, stderr: bool = False, style: str | None = None) -> None:
    """Write *text* verbatim (no markup parsing, no wrapping) plus a newline.

    Falls back to a plain :func:`print` when Rich is not installed, so
    help and version output never depend on it.
    """
    try:
        console = get_console(stderr=stderr)
    except MissingDependencyError:
        print(text, file=sys.stderr if stderr else sys.stdout)
        return
    console.out(text, style=style, highlight=False)
