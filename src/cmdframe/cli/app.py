"""Command dispatch and the process-level error boundary.

``main`` routes the first argv token to a registered command and runs its
lifecycle; ``cli`` wraps ``main`` for use from a console-script entry
point and is the only place that calls :func:`sys.exit`.

Usage::

    from cmdframe.cli.app import cli

    def entry_point() -> None:
        cli([hello, org_list], bin_name="mycli")
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping, Sequence

from cmdframe.cli import exit_codes
from cmdframe.cli.console import write_text
from cmdframe.cli.lifecycle import Collaborators, run_command
from cmdframe.core.command import CommandDescriptor
from cmdframe.exceptions import CmdframeError
from cmdframe.version import __version__

CommandTable = Mapping[str, CommandDescriptor] | Iterable[CommandDescriptor]

_VERSION_TOKENS = frozenset({"-V", "--version"})
_HELP_TOKENS = frozenset({"-h", "--help", "help"})


# ---------------------------------------------------------------------------
# Command registry
# ---------------------------------------------------------------------------

def build_registry(commands: CommandTable) -> dict[str, CommandDescriptor]:
    """Index *commands* by id.

    Raises
    ------
    ValueError
        If two descriptors share an id.
    """
    if isinstance(commands, Mapping):
        return dict(commands)
    registry: dict[str, CommandDescriptor] = {}
    for descriptor in commands:
        if descriptor.id in registry:
            raise ValueError(f"Duplicate command id: {descriptor.id!r}")
        registry[descriptor.id] = descriptor
    return registry


def render_command_list(registry: Mapping[str, CommandDescriptor], bin_name: str) -> str:
    lines = ["USAGE", f"  $ {bin_name} COMMAND", "", "COMMANDS"]
    visible = sorted(registry)
    if not visible:
        lines.append("  (none)")
        return "\n".join(lines)
    width = max(len(command_id) for command_id in visible)
    for command_id in visible:
        description = registry[command_id].description
        lines.append(f"  {command_id:<{width}}  {description}".rstrip())
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    commands: CommandTable,
    argv: Sequence[str] | None = None,
    *,
    bin_name: str,
    collaborators: Collaborators | None = None,
) -> int:
    """Dispatch one invocation.

    Parameters
    ----------
    commands:
        The command descriptors, as a sequence or an id mapping.
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    bin_name:
        Executable name shown in help output.
    collaborators:
        Shared by every lifecycle this call starts.

    Returns
    -------
    int
        OS process exit code.
    """
    registry = build_registry(commands)
    tokens = list(sys.argv[1:] if argv is None else argv)

    if not tokens or tokens[0] in _HELP_TOKENS:
        write_text(render_command_list(registry, bin_name))
        return exit_codes.SUCCESS

    if tokens[0] in _VERSION_TOKENS:
        write_text(f"{bin_name} {__version__}")
        return exit_codes.SUCCESS

    command_id, rest = tokens[0], tokens[1:]
    descriptor = registry.get(command_id)
    if descriptor is None:
        write_text(
            f"ERROR: {command_id} is not a {bin_name} command. "
            f"Run '{bin_name} help' to list the available commands.",
            stderr=True,
        )
        return exit_codes.GENERAL_ERROR

    return run_command(descriptor, rest, collaborators, bin_name=bin_name)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli(
    commands: CommandTable,
    *,
    bin_name: str,
    argv: Sequence[str] | None = None,
    collaborators: Collaborators | None = None,
) -> None:
    """Top-level error boundary invoked by a console-script entry point.

    Wraps :func:`main` and guarantees the process never exits with a raw
    stack trace during normal usage.
    """
    try:
        code = main(commands, argv, bin_name=bin_name, collaborators=collaborators)
    except CmdframeError as exc:
        write_text(f"ERROR: {exc.message}", stderr=True)
        for action in exc.actions:
            write_text(f"  {action}", stderr=True)
        sys.exit(exc.exit_code or exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        write_text("\nAborted by user.", stderr=True)
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        write_text(
            "Unexpected error. Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}",
            stderr=True,
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
    sys.exit(code)
