"""Core layer: flag schema, flag sets, usage grammar and command descriptors.

Rules
-----
* No ``print()`` calls and no Rich rendering.
* No argv tokenization, environment or filesystem access.
* No imports from ``cli`` or ``infra``; collaborators are consumed
  through :mod:`cmdframe.core.protocols`.
"""

from cmdframe.core import flags
from cmdframe.core.command import CommandDescriptor, command, define_command
from cmdframe.core.deprecation import collect_deprecation_warnings, format_deprecation_warning
from cmdframe.core.flag_set import BUILTIN_NAMES, build_flag_set
from cmdframe.core.models import (
    ArgumentDefinition,
    CommandContext,
    DeprecationNotice,
    FlagDefinition,
    FlagKind,
    FlagSet,
    NormalizedError,
    VarargsSpec,
)
from cmdframe.core.protocols import (
    ArgvParser,
    ConfigReader,
    EventHub,
    OrgResolver,
    OutputSink,
    ParseOutput,
    ProjectResolver,
)
from cmdframe.core.result import CommandResult
from cmdframe.core.usage import UsageSynthesizer, generate_usage
from cmdframe.core.varargs import parse_varargs

__all__: list[str] = [
    "BUILTIN_NAMES",
    "ArgumentDefinition",
    "ArgvParser",
    "CommandContext",
    "CommandDescriptor",
    "CommandResult",
    "ConfigReader",
    "DeprecationNotice",
    "EventHub",
    "FlagDefinition",
    "FlagKind",
    "FlagSet",
    "NormalizedError",
    "OrgResolver",
    "OutputSink",
    "ParseOutput",
    "ProjectResolver",
    "UsageSynthesizer",
    "VarargsSpec",
    "build_flag_set",
    "collect_deprecation_warnings",
    "command",
    "define_command",
    "flags",
    "format_deprecation_warning",
    "generate_usage",
    "parse_varargs",
]
