"""Immutable command descriptors.

A :class:`CommandDescriptor` is built once per command and handed to
every lifecycle that runs it.  Building one builds (and validates) the
command's FlagSet, so authoring mistakes surface at definition time
rather than on the first invocation.

Usage::

    from cmdframe.core import flags
    from cmdframe.core.command import command

    @command(
        flags={"name": flags.string(char="n", description="name to greet", required=True)},
        description="Print a greeting.",
    )
    def hello(context):
        context.ux.log(f"Hello {context.flags['name']}")
        return {"greeted": context.flags["name"]}
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from cmdframe.core.flag_set import FlagDeclaration, build_flag_set
from cmdframe.core.models import (
    ArgumentDefinition,
    CommandContext,
    DeprecationNotice,
    FlagSet,
    TableColumns,
    VarargsSpec,
)
from cmdframe.core.result import CommandResult, DisplayRoutine

RunCallable = Callable[[CommandContext], Any]
EventListener = Callable[[Any, CommandContext], None]


@dataclass(frozen=True, slots=True)
class CommandDescriptor:
    """Everything the lifecycle needs to know about one command."""

    id: str
    run: RunCallable
    flag_set: FlagSet
    args: tuple[ArgumentDefinition, ...] = ()
    varargs: VarargsSpec = field(default_factory=VarargsSpec)
    requires_project: bool = False
    supports_username: bool = False
    requires_username: bool = False
    supports_devhub_username: bool = False
    requires_devhub_username: bool = False
    table_column_data: TableColumns | None = None
    display: DisplayRoutine | None = None
    deprecated: DeprecationNotice | None = None
    lifecycle_events: Mapping[str, EventListener] = field(default_factory=dict)
    """Event name -> listener, called as ``listener(payload, context)``."""

    description: str = ""
    examples: tuple[str, ...] = ()
    strict: bool = True

    @property
    def parse_strictly(self) -> bool:
        """Unknown trailing tokens are an error unless varargs are enabled."""
        return self.strict and not self.varargs.enabled

    def new_result(self) -> CommandResult:
        return CommandResult(table_column_data=self.table_column_data, display=self.display)


def define_command(
    run: RunCallable,
    *,
    id: str | None = None,  # noqa: A002
    flags: Mapping[str, FlagDeclaration] | None = None,
    args: Sequence[ArgumentDefinition | str] = (),
    varargs: VarargsSpec | bool | Mapping[str, Any] = False,
    requires_project: bool = False,
    supports_username: bool = False,
    requires_username: bool = False,
    supports_devhub_username: bool = False,
    requires_devhub_username: bool = False,
    table_column_data: TableColumns | None = None,
    display: DisplayRoutine | None = None,
    deprecated: DeprecationNotice | None = None,
    lifecycle_events: Mapping[str, EventListener] | None = None,
    description: str | None = None,
    examples: Sequence[str] = (),
    strict: bool = True,
) -> CommandDescriptor:
    """Build a :class:`CommandDescriptor` around *run*.

    *id* defaults to the function name with underscores turned into
    colons (``org_list`` becomes ``org:list``); *description* defaults to
    the first line of the function's docstring.  Positional *args* may be
    given as bare names.

    Raises
    ------
    FlagDefinitionError
        If a declared flag breaks a naming or description rule.
    """
    command_id = id or run.__name__.replace("_", ":")
    flag_set = build_flag_set(
        flags,
        username=supports_username or requires_username,
        devhub_username=supports_devhub_username or requires_devhub_username,
    )
    if deprecated is not None and not deprecated.subject_name:
        deprecated = dataclasses.replace(deprecated, subject_name=command_id, subject_type="command")
    if description is None:
        summary = (run.__doc__ or "").strip().splitlines()
        description = summary[0] if summary else ""

    return CommandDescriptor(
        id=command_id,
        run=run,
        flag_set=flag_set,
        args=tuple(
            arg if isinstance(arg, ArgumentDefinition) else ArgumentDefinition(name=arg)
            for arg in args
        ),
        varargs=VarargsSpec.coerce(varargs),
        requires_project=requires_project,
        supports_username=supports_username,
        requires_username=requires_username,
        supports_devhub_username=supports_devhub_username,
        requires_devhub_username=requires_devhub_username,
        table_column_data=table_column_data,
        display=display,
        deprecated=deprecated,
        lifecycle_events=dict(lifecycle_events or {}),
        description=description,
        examples=tuple(examples),
        strict=strict,
    )


def command(**options: Any) -> Callable[[RunCallable], CommandDescriptor]:
    """Decorator form of :func:`define_command`."""

    def decorate(run: RunCallable) -> CommandDescriptor:
        return define_command(run, **options)

    return decorate
