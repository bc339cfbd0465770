"""Parse trailing ``name=value`` tokens into a varargs mapping."""

from __future__ import annotations

from collections.abc import Sequence

from cmdframe.core.models import VarargsSpec
from cmdframe.exceptions import (
    DuplicateVarargError,
    InvalidVarargsFormatError,
    VarargsRequiredError,
)


def parse_varargs(tokens: Sequence[str], spec: VarargsSpec) -> dict[str, str | None]:
    """Split each token on its first ``=`` and collect the pairs.

    Empty values are stored as ``None``.  The optional validator on *spec*
    runs once per pair, in token order, and may raise anything.

    Raises
    ------
    VarargsRequiredError
        If *spec* is required and *tokens* is empty.
    InvalidVarargsFormatError
        If a token has no ``=`` or an empty name.
    DuplicateVarargError
        If a name appears twice.
    """
    if not tokens and spec.required:
        raise VarargsRequiredError()

    varargs: dict[str, str | None] = {}
    for token in tokens:
        name, separator, value = token.partition("=")
        if not separator or not name:
            raise InvalidVarargsFormatError(token)
        if name in varargs:
            raise DuplicateVarargError(name)
        if spec.validator is not None:
            spec.validator(name, value)
        varargs[name] = value or None
    return varargs
