"""Deprecation warning text for commands and flags."""

from __future__ import annotations

from collections.abc import Iterable

from cmdframe.core.models import DeprecationNotice, FlagSet


def format_deprecation_warning(notice: DeprecationNotice) -> str:
    """Format *notice* as a single warning sentence.

    Example::

        The flag "old" has been deprecated and will be removed in v50.0
        or later. Use "new" instead.
    """
    if notice.message_override is not None:
        message = notice.message_override
    else:
        message = (
            f'The {notice.subject_type or "command"} "{notice.subject_name}" has been '
            f"deprecated and will be removed in v{notice.removal_version}.0 or later."
        )
    if notice.replacement:
        message += f' Use "{notice.replacement}" instead.'
    if notice.message:
        message += f" {notice.message}"
    return message


def collect_deprecation_warnings(
    command_notice: DeprecationNotice | None,
    flag_set: FlagSet,
    received: Iterable[str],
) -> list[str]:
    """Return one warning per notice on the command or a received flag."""
    warnings: list[str] = []
    if command_notice is not None:
        warnings.append(format_deprecation_warning(command_notice))
    for name in received:
        definition = flag_set.get(name)
        if definition is not None and definition.deprecated is not None:
            warnings.append(format_deprecation_warning(definition.deprecated))
    return warnings
