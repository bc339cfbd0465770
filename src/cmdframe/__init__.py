"""cmdframe: typed flags, a strict command lifecycle and docopt-style usage.

Built with a layered architecture: ``core`` (pure models and algorithms),
``infra`` (default collaborator adapters) and ``cli`` (lifecycle, output
and dispatch).
"""

from cmdframe.cli.app import cli, main
from cmdframe.core import flags
from cmdframe.core.command import CommandDescriptor, command, define_command
from cmdframe.core.models import ArgumentDefinition, CommandContext, DeprecationNotice
from cmdframe.core.usage import generate_usage
from cmdframe.version import __version__

__all__: list[str] = [
    "ArgumentDefinition",
    "CommandContext",
    "CommandDescriptor",
    "DeprecationNotice",
    "__version__",
    "cli",
    "command",
    "define_command",
    "flags",
    "generate_usage",
    "main",
]
