"""Pure value predicates used by the flag kinds.

Every function here is a deterministic ``str -> bool`` check with no
side effects.
"""

from __future__ import annotations

import re

_EMAIL_PATTERN = re.compile(r"[^.][^@]*@[^.]+(\.[^.\s]+)+")
_RECORD_ID_PATTERN = re.compile(r"[a-zA-Z0-9]{15}|[a-zA-Z0-9]{18}")
_INVALID_PATH_CHARS = re.compile(r'[\["?<>|\]]')
_API_VERSION_PATTERN = re.compile(r"[1-9]\d\.0")


def is_email(value: str) -> bool:
    return _EMAIL_PATTERN.fullmatch(value) is not None


def is_record_id(value: str) -> bool:
    """Return whether *value* is a 15 or 18 character alphanumeric record ID."""
    return _RECORD_ID_PATTERN.fullmatch(value) is not None


def is_valid_path(value: str) -> bool:
    """Return whether *value* avoids the characters ``[ ] " ? < > |``."""
    return _INVALID_PATH_CHARS.search(value) is None


def is_api_version(value: str) -> bool:
    """Return whether *value* looks like ``<major>.0`` with a two-digit major."""
    return _API_VERSION_PATTERN.fullmatch(value) is not None
