"""Domain models for cmdframe.

Definitions (flags, arguments, deprecations, varargs, the flag set) are
**frozen** dataclasses built once per command and shared by every
invocation.  The per-invocation :class:`CommandContext` is the only
mutable model; it is created when a lifecycle starts and discarded with
it.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


# ---------------------------------------------------------------------------
# Flag kinds
# ---------------------------------------------------------------------------

class FlagKind(str, enum.Enum):
    """Closed set of flag kinds.  The value is the usage placeholder text."""

    BOOLEAN = "boolean"
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    ENUM = "enum"
    ARRAY = "array"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    URL = "url"
    EMAIL = "email"
    ID = "id"
    FILEPATH = "filepath"
    DIRECTORY = "directory"
    OPTION = "option"
    HELP = "help"
    BUILTIN = "builtin"

    @property
    def takes_value(self) -> bool:
        return self not in (FlagKind.BOOLEAN, FlagKind.HELP, FlagKind.BUILTIN)


# ---------------------------------------------------------------------------
# Deprecation
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DeprecationNotice:
    """Describes a deprecated command or flag.

    Exactly one of ``removal_version`` and ``message_override`` must be
    given.  ``subject_name`` and ``subject_type`` may be left empty when
    the notice is attached to a declaration; they are filled in from the
    flag or command it is attached to.
    """

    removal_version: int | None = None
    """Major version in which the subject is removed."""

    message_override: str | None = None
    """Complete replacement for the standard message."""

    replacement: str | None = None
    """Name of the command or flag to use instead."""

    message: str | None = None
    """Extra text appended to the standard message."""

    subject_name: str = ""
    subject_type: str = ""
    """``"command"`` or ``"flag"``."""

    def __post_init__(self) -> None:
        if (self.removal_version is None) == (self.message_override is None):
            raise ValueError(
                "A deprecation notice needs exactly one of removal_version "
                "and message_override.",
            )
        if self.subject_type not in ("", "command", "flag"):
            raise ValueError(f"Unknown deprecation subject type: {self.subject_type!r}")


# ---------------------------------------------------------------------------
# Flag definition
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FlagDefinition:
    """A single flag declaration, tagged with its :class:`FlagKind`.

    Instances are produced by the constructors in
    :mod:`cmdframe.core.flags`; ``name`` is assigned when the flag is
    placed into a :class:`FlagSet`.
    """

    kind: FlagKind
    description: str
    long_description: str | None = None
    char: str | None = None
    required: bool = False
    hidden: bool = False
    default: Any = None
    deprecated: DeprecationNotice | None = None
    parse: Callable[[str], Any] | None = None
    options: tuple[str, ...] | None = None
    depends_on: tuple[str, ...] = ()
    exclusive: tuple[str, ...] = ()
    delimiter: str = ","
    name: str = ""

    @property
    def takes_value(self) -> bool:
        return self.kind.takes_value

    def convert(self, raw: str) -> Any:
        """Convert the raw string bound at parse time to a typed value.

        Raises
        ------
        FlagValueError
            When *raw* is not acceptable for this flag's kind.
        """
        if not self.takes_value:
            return True
        if self.parse is None:
            return raw
        return self.parse(raw)


class FlagSet(Mapping[str, FlagDefinition]):
    """Immutable, insertion-ordered mapping of flag name to definition."""

    __slots__ = ("_flags",)

    def __init__(self, definitions: Iterable[FlagDefinition] = ()) -> None:
        flags: dict[str, FlagDefinition] = {}
        for definition in definitions:
            if not definition.name:
                raise ValueError("Flags placed in a FlagSet must be named.")
            flags[definition.name] = definition
        self._flags: dict[str, FlagDefinition] = flags

    def __getitem__(self, name: str) -> FlagDefinition:
        return self._flags[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._flags)

    def __len__(self) -> int:
        return len(self._flags)

    def __repr__(self) -> str:
        return f"FlagSet({list(self._flags)!r})"

    def by_char(self, char: str) -> FlagDefinition | None:
        """Return the flag whose short char is *char*, if any."""
        for definition in self._flags.values():
            if definition.char == char:
                return definition
        return None


# ---------------------------------------------------------------------------
# Positional arguments and varargs
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ArgumentDefinition:
    """A positional argument accepted by a command."""

    name: str
    description: str = ""
    required: bool = False
    default: str | None = None


VarargsValidator = Callable[[str, "str | None"], None]


@dataclass(frozen=True, slots=True)
class VarargsSpec:
    """Normalized varargs configuration.

    Use :meth:`coerce` to accept the declaration shorthands ``False``,
    ``True`` and ``{"required": ..., "validator": ...}``.
    """

    enabled: bool = False
    required: bool = False
    validator: VarargsValidator | None = None

    @classmethod
    def coerce(cls, value: bool | Mapping[str, Any] | VarargsSpec | None) -> VarargsSpec:
        if isinstance(value, VarargsSpec):
            return value
        if value is None or value is False:
            return cls()
        if value is True:
            return cls(enabled=True)
        if isinstance(value, Mapping):
            return cls(
                enabled=True,
                required=bool(value.get("required", False)),
                validator=value.get("validator"),
            )
        raise TypeError(f"Unsupported varargs configuration: {value!r}")


# ---------------------------------------------------------------------------
# Errors, normalized for rendering
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class NormalizedError:
    """The single shape every failed invocation is rendered from."""

    name: str
    message: str
    actions: tuple[str, ...] = ()
    exit_code: int = 1
    data: Any = None
    stack: str | None = None
    command_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "message": self.message,
            "actions": list(self.actions),
            "exitCode": self.exit_code,
            "data": self.data,
            "stack": self.stack,
            "commandName": self.command_name,
        }


# ---------------------------------------------------------------------------
# Per-invocation context
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class CommandContext:
    """Everything a command's business logic sees for one invocation."""

    command_id: str
    argv: tuple[str, ...] = ()
    is_json: bool = False
    flags: dict[str, Any] = field(default_factory=dict)
    args: dict[str, Any] = field(default_factory=dict)
    varargs: dict[str, str | None] = field(default_factory=dict)
    org: Any = None
    hub_org: Any = None
    project: Any = None
    config: Any = None
    warnings: list[str] = field(default_factory=list)
    exit_code: int = 0
    ux: Any = None
    logger: Any = None


TableColumns = Sequence[str] | Mapping[str, str]
"""Column keys (labels derived by upper-casing) or a key → label mapping."""
