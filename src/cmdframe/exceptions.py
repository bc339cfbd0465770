"""Custom exception hierarchy for cmdframe.

Every failure that the command lifecycle knows how to render inherits from
:class:`CmdframeError`.  Errors raised by a command's own business logic
may be anything; the lifecycle normalizes them into the same shape, but
errors raised by the framework itself are always typed subclasses defined
here so callers can catch them precisely.

Hierarchy
---------
CmdframeError
├── FlagDefinitionError
│   ├── InvalidFlagNameError
│   ├── InvalidFlagCharError
│   ├── MissingOrInvalidFlagDescriptionError
│   ├── InvalidLongDescriptionFormatError
│   ├── ReservedFlagNameError
│   └── UnknownBuiltinFlagTypeError
├── FlagValueError
│   ├── InvalidFlagTypeError
│   ├── InvalidLoggerLevelError
│   ├── InvalidApiVersionError
│   └── FlagParseError
├── VarargsError
│   ├── VarargsRequiredError
│   ├── InvalidVarargsFormatError
│   └── DuplicateVarargError
├── AuthorizationError
│   ├── RequiresProjectError
│   ├── RequiresUsernameError
│   └── RequiresDevhubUsernameError
├── NoUsernameError
├── InvalidProjectWorkspaceError
└── MissingDependencyError
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class CmdframeError(Exception):
    """Base exception for all cmdframe errors.

    Parameters
    ----------
    message:
        Human-readable description of the failure.
    actions:
        Suggested next steps, rendered below the message in a
        ``Try this:`` block.
    exit_code:
        Process exit code to use when this error ends an invocation.
    data:
        Optional JSON-serializable payload routed through the result
        display when the error is rendered.
    """

    def __init__(
        self,
        message: str,
        *,
        actions: Sequence[str] = (),
        exit_code: int = 1,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.actions: tuple[str, ...] = tuple(actions)
        self.exit_code: int = exit_code
        self.data: Any = data
        self.command_name: str | None = None
        """Id of the command that was running when the error was raised."""

    @property
    def name(self) -> str:
        return type(self).__name__


# --- Flag definitions (author errors, raised at definition time) -----------

class FlagDefinitionError(CmdframeError):
    """Raised when a command declares an invalid flag."""

    def __init__(self, message: str, *, flag_name: str, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.flag_name: str = flag_name


class InvalidFlagNameError(FlagDefinitionError):
    def __init__(self, flag_name: str) -> None:
        super().__init__(
            f"Flag name '{flag_name}' must start with a lowercase letter and "
            "contain only lowercase letters, digits and dashes.",
            flag_name=flag_name,
        )


class InvalidFlagCharError(FlagDefinitionError):
    def __init__(self, flag_name: str, char: object, *, reason: str | None = None) -> None:
        super().__init__(
            reason
            or f"Flag '{flag_name}' char '{char}' must be a single alphabetic character.",
            flag_name=flag_name,
        )
        self.char: object = char


class MissingOrInvalidFlagDescriptionError(FlagDefinitionError):
    def __init__(self, flag_name: str) -> None:
        super().__init__(
            f"Flag '{flag_name}' is missing a description, or its description is not a string.",
            flag_name=flag_name,
        )


class InvalidLongDescriptionFormatError(FlagDefinitionError):
    def __init__(self, flag_name: str) -> None:
        super().__init__(
            f"Flag '{flag_name}' has a long description that is not a string.",
            flag_name=flag_name,
        )


class ReservedFlagNameError(FlagDefinitionError):
    def __init__(self, flag_name: str) -> None:
        super().__init__(
            f"Flag '{flag_name}' is reserved and cannot be redefined.",
            flag_name=flag_name,
        )


class UnknownBuiltinFlagTypeError(FlagDefinitionError):
    def __init__(self, flag_name: str) -> None:
        super().__init__(
            f"Unknown builtin flag type '{flag_name}'.",
            flag_name=flag_name,
        )


# --- Flag values (raised per invocation) -----------------------------------

class FlagValueError(CmdframeError):
    """Raised when a value bound to a flag cannot be accepted."""


class InvalidFlagTypeError(FlagValueError):
    """Raised when a raw flag value does not convert to the flag's kind."""

    def __init__(self, value: str, kind: str, hint: str | None = None) -> None:
        message = f"The value '{value}' is not a valid {kind}."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)
        self.value: str = value
        self.kind: str = kind
        self.hint: str | None = hint


class InvalidLoggerLevelError(FlagValueError):
    def __init__(self, value: str) -> None:
        super().__init__(f"'{value}' is not a valid log level.")
        self.value: str = value


class InvalidApiVersionError(FlagValueError):
    def __init__(self, value: str) -> None:
        super().__init__(
            f"'{value}' is not a valid API version.",
            actions=("Specify the API version as <major>.0, for example 50.0.",),
        )
        self.value: str = value


class FlagParseError(FlagValueError):
    """Raised when argv cannot be bound to the declared flags and args."""


# --- Varargs ---------------------------------------------------------------

class VarargsError(CmdframeError):
    """Raised when trailing ``name=value`` tokens are invalid."""


class VarargsRequiredError(VarargsError):
    def __init__(self) -> None:
        super().__init__(
            "Provide required name=value pairs for the command. "
            "Enclose any values that contain spaces in double quotes.",
        )


class InvalidVarargsFormatError(VarargsError):
    def __init__(self, token: str) -> None:
        super().__init__(
            "Setting variables must be in the format <key>=<value> or "
            f'<key>="<value with spaces>" but found {token}.',
        )
        self.token: str = token


class DuplicateVarargError(VarargsError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Cannot set variable name '{name}' twice for the same command.")
        self.vararg_name: str = name


# --- Authorization ---------------------------------------------------------

class AuthorizationError(CmdframeError):
    """Raised when a command's project or credential requirement is unmet."""


class RequiresProjectError(AuthorizationError):
    def __init__(self) -> None:
        super().__init__(
            "This command is required to run from within a project workspace.",
        )


class RequiresUsernameError(AuthorizationError):
    def __init__(self) -> None:
        super().__init__(
            "This command requires a username.",
            actions=(
                "Specify a username with the --targetusername (-u) flag "
                "or set a default username in the configuration.",
            ),
        )


class RequiresDevhubUsernameError(AuthorizationError):
    def __init__(self) -> None:
        super().__init__(
            "This command requires a dev hub username.",
            actions=(
                "Specify a dev hub username with the --targetdevhubusername (-v) "
                "flag or set a default dev hub username in the configuration.",
            ),
        )


# --- Collaborator signals --------------------------------------------------

class NoUsernameError(CmdframeError):
    """Raised by org resolvers when no username was given or configured."""


class InvalidProjectWorkspaceError(CmdframeError):
    """Raised by project resolvers when not inside a project workspace."""


# --- Environment -----------------------------------------------------------

class MissingDependencyError(CmdframeError):
    """Raised when an optional UI library is required but not installed."""
