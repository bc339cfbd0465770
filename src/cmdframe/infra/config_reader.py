"""Aggregated configuration readers.

Both readers satisfy :class:`~cmdframe.core.protocols.ConfigReader` and
return ``None`` for unset or blank settings.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from cmdframe.config import env_text

ENV_PREFIX: str = "CMDFRAME_"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def env_var_for(name: str) -> str:
    """Map a setting name to its environment variable.

    Example::

        >>> env_var_for("apiVersion")
        'CMDFRAME_API_VERSION'
    """
    return ENV_PREFIX + _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").upper()


class MappingConfigReader:
    """Read settings from an in-memory mapping."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values = dict(values or {})

    def get(self, name: str) -> Any:
        value = self._values.get(name)
        if isinstance(value, str) and not value.strip():
            return None
        return value


class EnvironmentConfigReader:
    """Read settings from ``CMDFRAME_*`` environment variables."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ

    def get(self, name: str) -> str | None:
        return env_text(env_var_for(name), environ=self._environ) or None
