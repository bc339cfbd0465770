"""Plain-text help for a single command.

The first line is always ``USAGE``, followed by the synthesized usage
grammar.  Output example::

    USAGE
      $ mycli org:list [-f <string>] [--json] [--loglevel trace|...]

    DESCRIPTION
      List orgs.

    FLAGS
      -f, --filter=filter  only orgs matching this name
      --json               format output as json
"""

from __future__ import annotations

from cmdframe.core.command import CommandDescriptor
from cmdframe.core.models import ArgumentDefinition, FlagDefinition
from cmdframe.core.usage import generate_usage

INDENT = "  "


def _argument_token(arg: ArgumentDefinition) -> str:
    name = arg.name.upper()
    return name if arg.required else f"[{name}]"


def _flag_label(definition: FlagDefinition) -> str:
    label = f"--{definition.name}"
    if definition.takes_value:
        label = f"{label}={definition.name}"
    if definition.char:
        return f"-{definition.char}, {label}"
    return label


def _two_columns(rows: list[tuple[str, str]]) -> list[str]:
    width = max(len(left) for left, _ in rows)
    return [f"{INDENT}{left:<{width}}  {right}".rstrip() for left, right in rows]


def render_help(descriptor: CommandDescriptor, bin_name: str) -> str:
    """Render help text for *descriptor* as invoked through *bin_name*."""
    usage_parts = [f"$ {bin_name}", descriptor.id]
    usage_parts.extend(_argument_token(arg) for arg in descriptor.args)
    usage = generate_usage(descriptor.flag_set, descriptor.varargs)
    if usage:
        usage_parts.append(usage)
    lines = ["USAGE", INDENT + " ".join(usage_parts)]

    if descriptor.args:
        lines += ["", "ARGUMENTS"]
        lines += _two_columns(
            [(arg.name.upper(), arg.description) for arg in descriptor.args],
        )

    if descriptor.description:
        lines += ["", "DESCRIPTION", INDENT + descriptor.description]

    visible = [flag for flag in descriptor.flag_set.values() if not flag.hidden]
    if visible:
        lines += ["", "FLAGS"]
        lines += _two_columns([(_flag_label(flag), flag.description) for flag in visible])

    if descriptor.examples:
        lines += ["", "EXAMPLES"]
        lines += [INDENT + example for example in descriptor.examples]

    return "\n".join(lines)
