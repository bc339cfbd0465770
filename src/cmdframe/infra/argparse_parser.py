"""Default argv parser adapter built on :mod:`argparse`.

Every value-taking flag is registered with ``type=str`` and converted
afterwards through :meth:`FlagDefinition.convert`, so conversion failures
surface as the framework's own typed errors rather than argparse usage
messages.  Relationship checks (required, ``depends_on``, ``exclusive``)
run after binding, against the set of flags actually received.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from typing import Any, NoReturn

from cmdframe.core.models import ArgumentDefinition, FlagDefinition, FlagSet
from cmdframe.core.protocols import ParseOutput
from cmdframe.exceptions import FlagParseError


class _RaisingArgumentParser(argparse.ArgumentParser):
    """An ArgumentParser that raises instead of printing and exiting."""

    def error(self, message: str) -> NoReturn:
        raise FlagParseError(message[:1].upper() + message[1:] + ".")


class ArgparseFlagParser:
    """Bind argv against a FlagSet using :mod:`argparse`.

    Satisfies :class:`~cmdframe.core.protocols.ArgvParser`.
    """

    def __init__(self, prog: str | None = None) -> None:
        self._prog = prog

    def parse(
        self,
        flag_set: FlagSet,
        args: Sequence[ArgumentDefinition],
        argv: Sequence[str],
        *,
        strict: bool,
    ) -> ParseOutput:
        parser = self._build_parser(flag_set, args)
        if strict:
            namespace = parser.parse_args(list(argv))
            leftovers: list[str] = []
        else:
            namespace, leftovers = parser.parse_known_args(list(argv))
        bound = vars(namespace)

        received = frozenset(name for name in flag_set if name in bound)
        flags: dict[str, Any] = {}
        for name, definition in flag_set.items():
            if name in bound:
                flags[name] = definition.convert(bound[name])
            elif definition.default is not None:
                flags[name] = definition.default

        _check_required(flag_set, received)
        _check_relationships(flag_set, received)

        positional: dict[str, Any] = {}
        for arg in args:
            if arg.name in bound:
                positional[arg.name] = bound[arg.name]
            elif arg.required:
                raise FlagParseError(f"Missing 1 required arg: {arg.name}.")
            elif arg.default is not None:
                positional[arg.name] = arg.default

        return ParseOutput(flags=flags, args=positional, argv=tuple(leftovers), received=received)

    # ------------------------------------------------------------------
    # Parser construction
    # ------------------------------------------------------------------

    def _build_parser(
        self,
        flag_set: FlagSet,
        args: Sequence[ArgumentDefinition],
    ) -> argparse.ArgumentParser:
        parser = _RaisingArgumentParser(prog=self._prog, add_help=False, allow_abbrev=False)
        for name, definition in flag_set.items():
            option_strings = [f"--{name}"]
            if definition.char:
                option_strings.append(f"-{definition.char}")
            if definition.takes_value:
                parser.add_argument(
                    *option_strings,
                    dest=name,
                    type=str,
                    default=argparse.SUPPRESS,
                )
            else:
                parser.add_argument(
                    *option_strings,
                    dest=name,
                    action="store_const",
                    const="",
                    default=argparse.SUPPRESS,
                )
        for arg in args:
            parser.add_argument(arg.name, nargs="?", default=argparse.SUPPRESS)
        return parser


def _display_name(definition: FlagDefinition) -> str:
    if definition.char:
        return f"-{definition.char}, --{definition.name}"
    return f"--{definition.name}"


def _check_required(flag_set: FlagSet, received: frozenset[str]) -> None:
    for name, definition in flag_set.items():
        if definition.required and name not in received and definition.default is None:
            raise FlagParseError(f"Missing required flag: {_display_name(definition)}.")


def _check_relationships(flag_set: FlagSet, received: frozenset[str]) -> None:
    for name in flag_set:
        if name not in received:
            continue
        definition = flag_set[name]
        for other in definition.depends_on:
            if other not in received:
                raise FlagParseError(f"--{other}= must also be provided when using --{name}=")
        for other in definition.exclusive:
            if other in received:
                raise FlagParseError(f"--{name}= cannot also be provided when using --{other}=")
