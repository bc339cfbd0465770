"""Protocols (interfaces) consumed by the lifecycle.

These define the contracts that collaborator adapters must satisfy.
Default implementations live in :mod:`cmdframe.infra` and
:mod:`cmdframe.cli.ux`; any object with matching methods satisfies a
protocol structurally (no explicit inheritance required).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from cmdframe.core.models import ArgumentDefinition, FlagSet, TableColumns


@dataclass(frozen=True, slots=True)
class ParseOutput:
    """Result of binding argv against a FlagSet."""

    flags: dict[str, Any] = field(default_factory=dict)
    """Typed flag values, defaults included."""

    args: dict[str, Any] = field(default_factory=dict)
    """Positional argument values by name."""

    argv: tuple[str, ...] = ()
    """Tokens bound to neither a flag nor a positional argument."""

    received: frozenset[str] = frozenset()
    """Names of the flags actually present on the command line."""


class ArgvParser(Protocol):
    """Contract for argv tokenization backends."""

    def parse(
        self,
        flag_set: FlagSet,
        args: Sequence[ArgumentDefinition],
        argv: Sequence[str],
        *,
        strict: bool,
    ) -> ParseOutput:
        """Bind *argv* against *flag_set* and *args*.

        When *strict* is false, unrecognized tokens are returned in
        :attr:`ParseOutput.argv` instead of failing.

        Raises
        ------
        FlagValueError
            When a value cannot be converted, or a flag is unknown,
            missing or in conflict with another.
        """
        ...  # pragma: no cover


class OrgResolver(Protocol):
    """Contract for credential / org resolution backends."""

    def resolve(self, username: str | None, config: Any, *, devhub: bool) -> Any:
        """Return an org handle for *username* (or the configured default).

        Raises
        ------
        NoUsernameError
            When no username was given and no default is configured.
        """
        ...  # pragma: no cover

    def set_api_version(self, org: Any, version: str) -> None:
        ...  # pragma: no cover


class ProjectResolver(Protocol):
    def resolve(self) -> Any:
        """Return the current project handle.

        Raises
        ------
        InvalidProjectWorkspaceError
            When the working directory is not inside a project.
        """
        ...  # pragma: no cover


class ConfigReader(Protocol):
    def get(self, name: str) -> Any:
        """Return the aggregated setting *name*, or ``None`` when unset."""
        ...  # pragma: no cover


class EventHub(Protocol):
    """Contract for a process-wide named event hub."""

    def subscribe(self, name: str, listener: Callable[[Any], None], *, key: str | None = None) -> None:
        """Register *listener* for *name*.

        Subscribing again with the same *key* replaces the earlier
        listener instead of adding a second one.
        """
        ...  # pragma: no cover

    def publish(self, name: str, payload: Any) -> None:
        ...  # pragma: no cover


class OutputSink(Protocol):
    """Contract for the display side of an invocation."""

    warnings: list[str]

    def log(self, *messages: Any) -> None: ...  # pragma: no cover

    def log_json(self, document: Any) -> None: ...  # pragma: no cover

    def warn(self, message: str) -> None: ...  # pragma: no cover

    def error(self, *messages: Any) -> None: ...  # pragma: no cover

    def error_json(self, document: Any, *, stdout: bool | None = None) -> None: ...  # pragma: no cover

    def table(self, rows: Sequence[Mapping[str, Any]], columns: TableColumns) -> None: ...  # pragma: no cover

    def styled_header(self, header: str) -> None: ...  # pragma: no cover

    def styled_object(self, obj: Mapping[str, Any], keys: Sequence[str] | None = None) -> None: ...  # pragma: no cover

    def help(self, text: str) -> None: ...  # pragma: no cover

    def start_spinner(self, message: str) -> None: ...  # pragma: no cover

    def stop_spinner(self, message: str | None = None) -> None: ...  # pragma: no cover

    def prompt(self, message: str, *, default: str = "", secret: bool = False) -> str: ...  # pragma: no cover

    def confirm(self, message: str, *, default: bool = False) -> bool: ...  # pragma: no cover
