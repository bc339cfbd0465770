"""The per-invocation command lifecycle.

One :class:`CommandLifecycle` runs one command once::

    CREATED -> INITIALIZING -> HELP_EXIT -> TERMINAL
                            -> PARSING -> DEPRECATION_CHECK [-> VARARGS]
                               -> AUTHORIZE -> RUNNING -> SUCCEEDED -> TERMINAL

Any non-terminal state may move to FAILED, which always ends in TERMINAL.
Every error raised after initialization funnels through the single FAILED
transition, so exactly one error report is produced per failed run.

Architecture notes
------------------
* Output mode, logging and the display sink are set up before anything
  that can fail, so parse errors are still reported in the right mode.
* Collaborators are injected through :class:`Collaborators`; nothing here
  resolves orgs or projects itself.
* This module, with :mod:`cmdframe.cli.app`, is the only place that
  decides an invocation's exit code.
"""

from __future__ import annotations

import enum
import inspect
import logging
import traceback
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from cmdframe.cli import exit_codes
from cmdframe.cli.help import render_help
from cmdframe.cli.ux import RichUX
from cmdframe.config import development_mode, json_content_type_requested, json_errors_to_stdout
from cmdframe.core.command import CommandDescriptor, EventListener
from cmdframe.core.deprecation import collect_deprecation_warnings
from cmdframe.core.models import CommandContext, NormalizedError
from cmdframe.core.protocols import (
    ArgvParser,
    ConfigReader,
    EventHub,
    OrgResolver,
    OutputSink,
    ProjectResolver,
)
from cmdframe.core.varargs import parse_varargs
from cmdframe.exceptions import (
    CmdframeError,
    InvalidProjectWorkspaceError,
    NoUsernameError,
    RequiresDevhubUsernameError,
    RequiresProjectError,
    RequiresUsernameError,
)
from cmdframe.infra.argparse_parser import ArgparseFlagParser
from cmdframe.infra.config_reader import EnvironmentConfigReader
from cmdframe.infra.event_hub import default_event_hub
from cmdframe.logging import DEFAULT_LEVEL, configure_logging, get_logger, level_for_name, scan_log_level

logger = logging.getLogger(__name__)

CMD_ERROR_EVENT: str = "cmdError"
"""Published on the event hub after every failed invocation."""

JSON_MARKER: str = "--json"
HELP_MARKER: str = "-h"


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------

class LifecycleState(enum.Enum):
    CREATED = "created"
    INITIALIZING = "initializing"
    HELP_EXIT = "help_exit"
    PARSING = "parsing"
    DEPRECATION_CHECK = "deprecation_check"
    VARARGS = "varargs"
    AUTHORIZE = "authorize"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TERMINAL = "terminal"


_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.CREATED: frozenset({LifecycleState.INITIALIZING}),
    LifecycleState.INITIALIZING: frozenset({LifecycleState.HELP_EXIT, LifecycleState.PARSING}),
    LifecycleState.HELP_EXIT: frozenset({LifecycleState.TERMINAL}),
    LifecycleState.PARSING: frozenset({LifecycleState.DEPRECATION_CHECK}),
    LifecycleState.DEPRECATION_CHECK: frozenset({LifecycleState.VARARGS, LifecycleState.AUTHORIZE}),
    LifecycleState.VARARGS: frozenset({LifecycleState.AUTHORIZE}),
    LifecycleState.AUTHORIZE: frozenset({LifecycleState.RUNNING}),
    LifecycleState.RUNNING: frozenset({LifecycleState.SUCCEEDED}),
    LifecycleState.SUCCEEDED: frozenset({LifecycleState.TERMINAL}),
    LifecycleState.FAILED: frozenset({LifecycleState.TERMINAL}),
    LifecycleState.TERMINAL: frozenset(),
}

_CANNOT_FAIL = frozenset({LifecycleState.FAILED, LifecycleState.TERMINAL})


class IllegalTransitionError(RuntimeError):
    """Raised when the lifecycle is driven out of order (a framework bug)."""

    def __init__(self, current: LifecycleState, target: LifecycleState) -> None:
        super().__init__(f"Illegal lifecycle transition: {current.name} -> {target.name}")
        self.current = current
        self.target = target


# ---------------------------------------------------------------------------
# Collaborators and events
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Collaborators:
    """External services a lifecycle consumes.

    Org and project resolvers have no default; a command that requires
    one without it being configured fails authorization.
    """

    parser: ArgvParser = field(default_factory=ArgparseFlagParser)
    org_resolver: OrgResolver | None = None
    project_resolver: ProjectResolver | None = None
    config_reader: ConfigReader = field(default_factory=EnvironmentConfigReader)
    event_hub: EventHub = field(default_factory=lambda: default_event_hub)
    ux_factory: Callable[[logging.Logger, bool], OutputSink] = RichUX
    """Called as ``ux_factory(logger, output_enabled)``."""

    environ: Mapping[str, str] | None = None
    """Environment for the runtime switches; ``None`` means ``os.environ``."""


@dataclass(frozen=True, slots=True)
class CommandErrorEvent:
    """Payload of the :data:`CMD_ERROR_EVENT` notification."""

    error: BaseException
    normalized: NormalizedError
    flags: dict[str, Any]
    """Parsed flags merged with varargs."""

    org: Any = None
    """The resolved org, or else the resolved hub org, or ``None``."""


# ---------------------------------------------------------------------------
# Error normalization and formatting
# ---------------------------------------------------------------------------

def normalize_error(exc: BaseException, command_id: str | None = None) -> NormalizedError:
    """Convert anything raised during a run into a :class:`NormalizedError`."""
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip()
    if isinstance(exc, CmdframeError):
        if command_id is not None:
            exc.command_name = command_id
        return NormalizedError(
            name=exc.name,
            message=exc.message,
            actions=exc.actions,
            exit_code=exc.exit_code or exit_codes.GENERAL_ERROR,
            data=exc.data,
            stack=stack,
            command_name=exc.command_name,
        )
    exit_code = getattr(exc, "exit_code", None)
    actions = getattr(exc, "actions", None)
    return NormalizedError(
        name=type(exc).__name__,
        message=str(exc) or type(exc).__name__,
        actions=tuple(actions) if isinstance(actions, (list, tuple)) else (),
        exit_code=exit_code if isinstance(exit_code, int) and exit_code else exit_codes.GENERAL_ERROR,
        data=getattr(exc, "data", None),
        stack=stack,
        command_name=command_id,
    )


def format_error(error: NormalizedError, *, show_stack: bool = False) -> list[str]:
    """Return the human-readable segments of an error report.

    Joined, the segments read::

        ERROR running org:list: Something broke.

        Try this:
          Run it again.
    """
    running = f" running {error.command_name}" if error.command_name else ""
    segments = [f"ERROR{running}: ", error.message]
    if error.actions:
        segments.append("\n\nTry this:")
        segments.extend(f"\n  {action}" for action in error.actions)
    if show_stack and error.stack:
        segments.append(f"\n*** Internal Diagnostic ***\n\n{error.stack}\n******\n")
    return segments


def _bind_listener(listener: EventListener, context: CommandContext) -> Callable[[Any], None]:
    def deliver(payload: Any) -> None:
        listener(payload, context)

    return deliver


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class CommandLifecycle:
    """Run one command descriptor against one argv.

    Parameters
    ----------
    descriptor:
        The command to run.
    collaborators:
        External services; defaults are used when omitted.
    bin_name:
        Executable name shown in help output.
    """

    def __init__(
        self,
        descriptor: CommandDescriptor,
        collaborators: Collaborators | None = None,
        *,
        bin_name: str = "cmdframe",
    ) -> None:
        self.descriptor = descriptor
        self.collaborators = collaborators if collaborators is not None else Collaborators()
        self.bin_name = bin_name
        self.state = LifecycleState.CREATED
        self.history: list[LifecycleState] = [LifecycleState.CREATED]
        self.context: CommandContext | None = None
        self.result = descriptor.new_result()
        self.error: NormalizedError | None = None
        self._received: frozenset[str] = frozenset()
        self._leftovers: tuple[str, ...] = ()

    @property
    def exit_code(self) -> int:
        return self.context.exit_code if self.context is not None else exit_codes.SUCCESS

    def run(self, argv: Sequence[str]) -> Any:
        """Run the command and return its value (``None`` on help or failure).

        The outcome is reported through the display sink; the exit code
        is available as :attr:`exit_code` afterwards.
        """
        self._transition(LifecycleState.INITIALIZING)
        context = self._initialize(tuple(argv))

        try:
            if self._should_emit_help(context.argv):
                self._transition(LifecycleState.HELP_EXIT)
                context.ux.help(render_help(self.descriptor, self.bin_name))
                self._transition(LifecycleState.TERMINAL)
                return None

            self._parse(context)
            self._check_deprecations(context)
            if self.descriptor.varargs.enabled:
                self._parse_varargs(context)
            context.logger.info(
                "Running command [%s] with flags [%s] and args [%s]",
                self.descriptor.id,
                context.flags,
                context.args,
            )
            self._authorize(context)

            self._transition(LifecycleState.RUNNING)
            self._subscribe_lifecycle_events(context)
            data = self.descriptor.run(context)
            if inspect.iscoroutine(data):
                data.close()
                raise TypeError(
                    f"Command {self.descriptor.id} returned a coroutine; command run "
                    "functions must be synchronous.",
                )
            self.result.data = data

            self._transition(LifecycleState.SUCCEEDED)
            self._report_success(context)
        except Exception as exc:  # noqa: BLE001 (single FAILED funnel)
            self._fail(context, exc)
            self._transition(LifecycleState.TERMINAL)
            return None

        self._transition(LifecycleState.TERMINAL)
        return self.result.data

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _transition(self, target: LifecycleState) -> None:
        allowed = _TRANSITIONS[self.state]
        failing = target is LifecycleState.FAILED and self.state not in _CANNOT_FAIL
        if target not in allowed and not failing:
            raise IllegalTransitionError(self.state, target)
        logger.debug("%s: %s -> %s", self.descriptor.id, self.state.name, target.name)
        self.state = target
        self.history.append(target)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _initialize(self, argv: tuple[str, ...]) -> CommandContext:
        environ = self.collaborators.environ
        is_json = JSON_MARKER in argv or json_content_type_requested(environ)

        level_name = scan_log_level(argv)
        configure_logging(level_for_name(level_name) if level_name else DEFAULT_LEVEL)
        command_logger = get_logger(self.descriptor.id)

        ux = self.collaborators.ux_factory(command_logger, not is_json)
        context = CommandContext(
            command_id=self.descriptor.id,
            argv=argv,
            is_json=is_json,
            warnings=ux.warnings,
            ux=ux,
            logger=command_logger,
        )
        self.context = context
        return context

    def _should_emit_help(self, argv: tuple[str, ...]) -> bool:
        if HELP_MARKER not in argv:
            return False
        return not any(
            name != "help" and definition.char == "h"
            for name, definition in self.descriptor.flag_set.items()
        )

    def _parse(self, context: CommandContext) -> None:
        self._transition(LifecycleState.PARSING)
        output = self.collaborators.parser.parse(
            self.descriptor.flag_set,
            self.descriptor.args,
            context.argv,
            strict=self.descriptor.parse_strictly,
        )
        context.flags = dict(output.flags)
        context.args = dict(output.args)
        self._received = output.received
        self._leftovers = output.argv

    def _check_deprecations(self, context: CommandContext) -> None:
        self._transition(LifecycleState.DEPRECATION_CHECK)
        for warning in collect_deprecation_warnings(
            self.descriptor.deprecated,
            self.descriptor.flag_set,
            [name for name in self.descriptor.flag_set if name in self._received],
        ):
            context.ux.warn(warning)

    def _parse_varargs(self, context: CommandContext) -> None:
        self._transition(LifecycleState.VARARGS)
        positional = set(context.args.values())
        tokens = [token for token in self._leftovers if token not in positional]
        context.varargs = parse_varargs(tokens, self.descriptor.varargs)

    def _authorize(self, context: CommandContext) -> None:
        self._transition(LifecycleState.AUTHORIZE)
        descriptor = self.descriptor
        config_reader = self.collaborators.config_reader
        context.config = config_reader

        if descriptor.requires_project:
            context.project = self._resolve_project()

        api_version = config_reader.get("apiVersion")
        if api_version and not context.flags.get("apiversion"):
            context.ux.warn(f'apiVersion configuration overridden at "{api_version}"')

        if descriptor.supports_username or descriptor.requires_username:
            context.org = self._resolve_org(
                context,
                context.flags.get("targetusername"),
                devhub=False,
                required=descriptor.requires_username,
            )
        if descriptor.supports_devhub_username or descriptor.requires_devhub_username:
            context.hub_org = self._resolve_org(
                context,
                context.flags.get("targetdevhubusername"),
                devhub=True,
                required=descriptor.requires_devhub_username,
            )

    def _resolve_project(self) -> Any:
        resolver = self.collaborators.project_resolver
        if resolver is None:
            raise RequiresProjectError()
        try:
            return resolver.resolve()
        except InvalidProjectWorkspaceError as exc:
            raise RequiresProjectError() from exc

    def _resolve_org(
        self,
        context: CommandContext,
        username: str | None,
        *,
        devhub: bool,
        required: bool,
    ) -> Any:
        resolver = self.collaborators.org_resolver
        try:
            if resolver is None:
                raise NoUsernameError("No org resolver is configured.")
            org = resolver.resolve(username, context.config, devhub=devhub)
        except NoUsernameError as exc:
            if not required:
                return None
            if devhub:
                raise RequiresDevhubUsernameError() from exc
            raise RequiresUsernameError() from exc
        except Exception:
            if required:
                raise
            context.logger.debug("Optional org resolution failed", exc_info=True)
            return None

        api_version = context.flags.get("apiversion")
        if api_version:
            resolver.set_api_version(org, api_version)
        return org

    def _subscribe_lifecycle_events(self, context: CommandContext) -> None:
        hub = self.collaborators.event_hub
        for name, listener in self.descriptor.lifecycle_events.items():
            hub.subscribe(name, _bind_listener(listener, context), key=self.descriptor.id)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _report_success(self, context: CommandContext) -> None:
        if context.is_json:
            context.ux.log_json(
                {
                    "status": context.exit_code,
                    "result": self.result.data,
                    "warnings": list(context.warnings),
                },
            )
        else:
            self.result.display(context.ux)

    def _fail(self, context: CommandContext, exc: Exception) -> None:
        self._transition(LifecycleState.FAILED)
        error = normalize_error(exc, self.descriptor.id)
        self.error = error
        context.exit_code = context.exit_code or error.exit_code or exit_codes.GENERAL_ERROR

        if context.is_json:
            document = error.to_dict()
            document.update(
                status=error.exit_code,
                result=error.data,
                warnings=list(context.warnings),
            )
            context.ux.error_json(
                document, stdout=json_errors_to_stdout(self.collaborators.environ),
            )
        else:
            show_stack = development_mode(self.collaborators.environ)
            context.ux.error(*format_error(error, show_stack=show_stack))
            if error.data is not None:
                self.result.data = error.data
                self.result.display(context.ux)

        event = CommandErrorEvent(
            error=exc,
            normalized=error,
            flags={**context.flags, **context.varargs},
            org=context.org if context.org is not None else context.hub_org,
        )
        try:
            self.collaborators.event_hub.publish(CMD_ERROR_EVENT, event)
        except Exception as listener_exc:  # noqa: BLE001
            context.logger.warning("A %s listener failed: %s", CMD_ERROR_EVENT, listener_exc)


def run_command(
    descriptor: CommandDescriptor,
    argv: Sequence[str],
    collaborators: Collaborators | None = None,
    *,
    bin_name: str = "cmdframe",
) -> int:
    """Run *descriptor* once and return the invocation's exit code."""
    lifecycle = CommandLifecycle(descriptor, collaborators, bin_name=bin_name)
    lifecycle.run(argv)
    return lifecycle.exit_code
