"""Assemble a command's declared flags and the builtin flags into a FlagSet.

Output order is load-bearing for usage synthesis:

1. declared flags, in declaration order;
2. conditional ``targetusername`` / ``targetdevhubusername`` /
   ``apiversion`` flags;
3. the always-present ``json`` and ``loglevel`` flags.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Mapping

from cmdframe.core import flags
from cmdframe.core.models import FlagDefinition, FlagKind, FlagSet
from cmdframe.core.validators import is_api_version
from cmdframe.exceptions import (
    InvalidApiVersionError,
    InvalidFlagCharError,
    InvalidFlagNameError,
    InvalidLoggerLevelError,
    InvalidLongDescriptionFormatError,
    MissingOrInvalidFlagDescriptionError,
    ReservedFlagNameError,
    UnknownBuiltinFlagTypeError,
)
from cmdframe.logging import LEVEL_NAMES

FlagDeclaration = FlagDefinition | bool | None
"""A declared entry: a definition, ``True`` for a builtin, or ``False``/``None`` to skip."""

_NAME_PATTERN = re.compile(r"[a-z][a-z0-9-]*")


# ---------------------------------------------------------------------------
# Builtin catalog
# ---------------------------------------------------------------------------

def _parse_loglevel(value: str) -> str:
    if value in LEVEL_NAMES:
        return value
    raise InvalidLoggerLevelError(value)


def _parse_apiversion(value: str) -> str:
    if is_api_version(value):
        return value
    raise InvalidApiVersionError(value)


def _json_flag() -> FlagDefinition:
    return flags.boolean(
        description="format output as json",
        long_description="Format output as JSON.",
    )


def _loglevel_flag() -> FlagDefinition:
    return dataclasses.replace(
        flags.enum(
            options=LEVEL_NAMES,
            description="logging level for this command invocation",
            long_description="The logging level for this command invocation.",
        ),
        parse=_parse_loglevel,
    )


def _apiversion_flag() -> FlagDefinition:
    return flags.string(
        description="override the api version used for api requests made by this command",
        long_description="Override the API version used for API requests made by this command.",
        parse=_parse_apiversion,
    )


def _concise_flag() -> FlagDefinition:
    return flags.boolean(
        description="emit brief command output to stdout",
        long_description="Emit brief command output to stdout.",
    )


def _quiet_flag() -> FlagDefinition:
    return flags.boolean(
        description="nothing emitted stdout",
        long_description="Suppress all command output to stdout.",
    )


def _verbose_flag() -> FlagDefinition:
    return flags.boolean(
        description="emit additional command output to stdout",
        long_description="Emit additional command output to stdout.",
    )


def _targetusername_flag() -> FlagDefinition:
    return flags.string(
        char="u",
        description="username or alias for the target org; overrides default target org",
        long_description="A username or alias for the target org. Overrides the default target org.",
    )


def _targetdevhubusername_flag() -> FlagDefinition:
    return flags.string(
        char="v",
        description="username or alias for the dev hub org; overrides default dev hub org",
        long_description="A username or alias for the dev hub org. Overrides the default dev hub org.",
    )


REQUIRED_BUILTINS: dict[str, Callable[[], FlagDefinition]] = {
    "json": _json_flag,
    "loglevel": _loglevel_flag,
}

OPTIONAL_BUILTINS: dict[str, Callable[[], FlagDefinition]] = {
    "apiversion": _apiversion_flag,
    "concise": _concise_flag,
    "quiet": _quiet_flag,
    "verbose": _verbose_flag,
    "targetusername": _targetusername_flag,
    "targetdevhubusername": _targetdevhubusername_flag,
}

BUILTIN_NAMES: frozenset[str] = frozenset({*REQUIRED_BUILTINS, *OPTIONAL_BUILTINS})


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_custom_flag(name: str, definition: FlagDefinition) -> FlagDefinition:
    """Check a non-builtin declaration and return it with its name assigned.

    Checks, in order: name pattern, char shape, description, long
    description.

    Raises
    ------
    FlagDefinitionError
        The first violated rule, naming the flag.
    """
    if not isinstance(name, str) or _NAME_PATTERN.fullmatch(name) is None:
        raise InvalidFlagNameError(str(name))
    char = definition.char
    if char is not None and (
        not isinstance(char, str) or len(char) != 1 or not ("a" <= char.lower() <= "z")
    ):
        raise InvalidFlagCharError(name, char)
    if not definition.description or not isinstance(definition.description, str):
        raise MissingOrInvalidFlagDescriptionError(name)
    if definition.long_description is not None and not isinstance(definition.long_description, str):
        raise InvalidLongDescriptionFormatError(name)
    return _named(name, definition)


def _named(name: str, definition: FlagDefinition) -> FlagDefinition:
    deprecated = definition.deprecated
    if deprecated is not None and not deprecated.subject_name:
        deprecated = dataclasses.replace(deprecated, subject_name=name, subject_type="flag")
    return dataclasses.replace(definition, name=name, deprecated=deprecated)


def _is_builtin_marker(declaration: FlagDeclaration) -> bool:
    if declaration is True:
        return True
    return isinstance(declaration, FlagDefinition) and declaration.kind is FlagKind.BUILTIN


def _check_unique_chars(definitions: list[FlagDefinition]) -> None:
    owners: dict[str, str] = {}
    for definition in definitions:
        if definition.char is None:
            continue
        owner = owners.get(definition.char)
        if owner is not None:
            raise InvalidFlagCharError(
                definition.name,
                definition.char,
                reason=(
                    f"Flag '{definition.name}' char '{definition.char}' is already "
                    f"used by flag '{owner}'."
                ),
            )
        owners[definition.char] = definition.name


# ---------------------------------------------------------------------------
# Public builder
# ---------------------------------------------------------------------------

def build_flag_set(
    declared: Mapping[str, FlagDeclaration] | None = None,
    *,
    username: bool = False,
    devhub_username: bool = False,
) -> FlagSet:
    """Build the validated, ordered FlagSet for one command.

    Parameters
    ----------
    declared:
        The command's own declarations.
    username:
        The command supports or requires a target username.
    devhub_username:
        The command supports or requires a dev hub username.

    Raises
    ------
    UnknownBuiltinFlagTypeError
        A builtin marker uses a name outside the catalog.
    ReservedFlagNameError
        A custom definition is declared under ``json`` or ``loglevel``.
    FlagDefinitionError
        A custom flag breaks a naming or description rule.
    """
    output: dict[str, FlagDefinition] = {}

    for name, declaration in (declared or {}).items():
        if declaration is None or declaration is False:
            continue
        if name in REQUIRED_BUILTINS:
            if not _is_builtin_marker(declaration):
                raise ReservedFlagNameError(name)
            # json and loglevel are always appended last with their canonical shape.
            continue
        if _is_builtin_marker(declaration):
            factory = OPTIONAL_BUILTINS.get(name)
            if factory is None:
                raise UnknownBuiltinFlagTypeError(name)
            output[name] = _named(name, factory())
            continue
        if not isinstance(declaration, FlagDefinition):
            raise MissingOrInvalidFlagDescriptionError(name)
        output[name] = validate_custom_flag(name, declaration)

    conditional = {
        "targetusername": username,
        "targetdevhubusername": devhub_username,
        "apiversion": username or devhub_username,
    }
    for name, enabled in conditional.items():
        if enabled and name not in output:
            output[name] = _named(name, OPTIONAL_BUILTINS[name]())

    for name, factory in REQUIRED_BUILTINS.items():
        output[name] = _named(name, factory())

    definitions = list(output.values())
    _check_unique_chars(definitions)
    return FlagSet(definitions)
