"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Command completed (or help was shown) without error."""

GENERAL_ERROR: int = 1
"""A command failed and its error was reported; also the default for errors without an exit code."""

UNEXPECTED_ERROR: int = 2
"""An exception escaped the lifecycle's own error reporting."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
