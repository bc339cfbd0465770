"""Docopt-style usage grammar synthesized from a FlagSet.

See http://docopt.org/.  Elements, in emission order:

1. the varargs placeholder ``name=value...`` (bracketed when optional);
2. command-declared required flags;
3. command-declared optional flags;
4. opt-in builtin flags (``--quiet``, ``-u <string>``, ...);
5. always-present builtin flags (``--json``, ``--loglevel``).

Relationships combine flags into groups:

* ``depends_on=["b"]`` on ``a`` renders ``a b`` (both must be given);
* ``exclusive=["b"]`` on ``a`` renders ``a | b`` (either, not both).

A group is parenthesized when any participant is required, otherwise
bracketed, and takes the emission slot of the flag that declared the
relationship.  Only one hop is resolved: a flag consumed into a group is
never expanded further, and a flag honors only its first relationship
kind that still has unconsumed targets.

Example::

    -f <string> (-n <string> | -s <url>) [-c <integer>] [--json]
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from cmdframe.core.models import FlagDefinition, FlagKind, FlagSet, VarargsSpec

logger = logging.getLogger(__name__)

ALWAYS_BUILTINS: tuple[str, ...] = ("json", "loglevel")
SOMETIMES_BUILTINS: tuple[str, ...] = (
    "targetusername",
    "targetdevhubusername",
    "apiversion",
    "concise",
    "quiet",
    "verbose",
)


class UsageSynthesizer:
    """Render one FlagSet (plus varargs) into a usage string.

    Each :meth:`generate` call works on fresh copies, so repeated calls
    with the same input return the same string.
    """

    def __init__(self, flag_set: FlagSet, varargs: VarargsSpec | bool | Mapping[str, Any] = False) -> None:
        self._flag_set = flag_set
        self._varargs_config = varargs

    def generate(self) -> str:
        try:
            return self._generate()
        except Exception:  # noqa: BLE001 (usage must never abort a command)
            logger.debug("Usage generation failed", exc_info=True)
            return ""

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _generate(self) -> str:
        varargs = VarargsSpec.coerce(self._varargs_config)
        visible = [flag for flag in self._flag_set.values() if not flag.hidden]
        elements = self.group_flag_elements(visible)

        required, optional, sometimes, always = self._categorize(visible)
        ordered: list[str] = []
        if varargs.enabled:
            ordered.append("name=value..." if varargs.required else "[name=value...]")
        for bucket in (required, optional, sometimes, always):
            ordered.extend(elements[flag.name] for flag in bucket if flag.name in elements)
        return " ".join(ordered)

    @staticmethod
    def _categorize(
        visible: list[FlagDefinition],
    ) -> tuple[list[FlagDefinition], list[FlagDefinition], list[FlagDefinition], list[FlagDefinition]]:
        always = [flag for flag in visible if flag.name in ALWAYS_BUILTINS]
        sometimes = [flag for flag in visible if flag.name in SOMETIMES_BUILTINS]
        declared = [
            flag
            for flag in visible
            if flag.name not in ALWAYS_BUILTINS and flag.name not in SOMETIMES_BUILTINS
        ]
        required = [flag for flag in declared if flag.required]
        optional = [flag for flag in declared if not flag.required]
        return required, optional, sometimes, always

    # ------------------------------------------------------------------
    # Grouping
    # ------------------------------------------------------------------

    def group_flag_elements(self, visible: list[FlagDefinition]) -> dict[str, str]:
        """Map each emitted flag name to its rendered (possibly grouped) element.

        Flags consumed into another flag's group have no entry.
        """
        elements = {flag.name: self.render_flag(flag) for flag in visible}
        remaining = {flag.name: flag for flag in visible}

        for flag in visible:
            if flag.name not in remaining:
                continue
            if self._combine(elements, remaining, flag, flag.depends_on, " "):
                continue
            self._combine(elements, remaining, flag, flag.exclusive, " | ")

        for name, flag in remaining.items():
            if not flag.required:
                elements[name] = f"[{elements[name]}]"
        return elements

    @staticmethod
    def _combine(
        elements: dict[str, str],
        remaining: dict[str, FlagDefinition],
        head: FlagDefinition,
        targets: tuple[str, ...],
        separator: str,
    ) -> bool:
        partners = [
            remaining[name]
            for name in targets
            if name != head.name and name in remaining
        ]
        if not partners:
            return False

        tokens = [elements[head.name]]
        is_required = head.required
        for partner in partners:
            tokens.append(elements.pop(partner.name))
            del remaining[partner.name]
            is_required = is_required or partner.required

        joined = separator.join(tokens)
        elements[head.name] = f"({joined})" if is_required else f"[{joined}]"
        del remaining[head.name]
        return True

    # ------------------------------------------------------------------
    # Single element
    # ------------------------------------------------------------------

    @staticmethod
    def render_flag(flag: FlagDefinition) -> str:
        """Render ``-c``/``--name`` plus the value placeholder, if any."""
        name = f"-{flag.char}" if flag.char else f"--{flag.name}"
        if not flag.takes_value:
            return name
        if flag.kind is FlagKind.ENUM and flag.options:
            return f"{name} {'|'.join(flag.options)}"
        return f"{name} <{flag.kind.value}>"


def generate_usage(flag_set: FlagSet, varargs: VarargsSpec | bool | Mapping[str, Any] = False) -> str:
    """Return the usage grammar for *flag_set*, or ``""`` if it cannot be built."""
    return UsageSynthesizer(flag_set, varargs).generate()
