"""CLI layer: lifecycle, display sink, help and dispatch.

This package is the outermost layer.  It may import from ``core`` and
``infra``, but no other layer may import from ``cli``.
"""

from cmdframe.cli.app import cli, main
from cmdframe.cli.lifecycle import (
    CMD_ERROR_EVENT,
    Collaborators,
    CommandErrorEvent,
    CommandLifecycle,
    LifecycleState,
    run_command,
)
from cmdframe.cli.ux import RichUX

__all__: list[str] = [
    "CMD_ERROR_EVENT",
    "Collaborators",
    "CommandErrorEvent",
    "CommandLifecycle",
    "LifecycleState",
    "RichUX",
    "cli",
    "main",
    "run_command",
]
