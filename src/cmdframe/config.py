"""Environment-sensitive runtime switches.

Each switch is read at the lifecycle stage that needs it rather than once
at import time, so a long-lived host can change the environment between
invocations.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

CONTENT_TYPE_ENV: str = "CMDFRAME_CONTENT_TYPE"
"""``JSON`` forces JSON output mode even without ``--json``."""

JSON_TO_STDOUT_ENV: str = "CMDFRAME_JSON_TO_STDOUT"
"""Truthy routes JSON error documents to stdout instead of stderr."""

ENVIRONMENT_MODE_ENV: str = "CMDFRAME_ENV"
"""``development`` discloses stack traces in human-readable errors."""

_TRUTHY_VALUES = {"1", "true", "yes", "on"}


def env_text(name: str, *, default: str = "", environ: Mapping[str, str] | None = None) -> str:
    source = os.environ if environ is None else environ
    return source.get(name, default).strip()


def env_flag(name: str, *, environ: Mapping[str, str] | None = None) -> bool:
    return env_text(name, environ=environ).lower() in _TRUTHY_VALUES


def json_content_type_requested(environ: Mapping[str, str] | None = None) -> bool:
    return env_text(CONTENT_TYPE_ENV, environ=environ).upper() == "JSON"


def json_errors_to_stdout(environ: Mapping[str, str] | None = None) -> bool:
    """Return whether JSON error documents go to stdout.

    Defaults to ``False``: error documents are written to stderr unless
    the toggle is set.
    """
    return env_flag(JSON_TO_STDOUT_ENV, environ=environ)


def development_mode(environ: Mapping[str, str] | None = None) -> bool:
    return env_text(ENVIRONMENT_MODE_ENV, environ=environ).lower() == "development"
