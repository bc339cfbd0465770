"""Flag kind constructors and their value-conversion contracts.

Each public function returns a :class:`~cmdframe.core.models.FlagDefinition`
tagged with the kind of the constructor used.  All constructors accept
the shared keyword options:

* ``description`` (required) and ``long_description``
* ``char``: a single-letter short form
* ``required``, ``hidden``, ``default``
* ``deprecated``: a :class:`~cmdframe.core.models.DeprecationNotice`
* ``depends_on`` / ``exclusive``: names of related flags

Conversion runs when a raw string is bound at parse time; every failure
raises :class:`~cmdframe.exceptions.InvalidFlagTypeError` carrying the raw
value, the kind and, where useful, a formatting hint.

Usage::

    from cmdframe.core import flags

    declared = {
        "name": flags.string(char="n", description="record name", required=True),
        "ids": flags.array(description="record ids", delimiter=";"),
        "limit": flags.integer(description="maximum rows", default=50),
        "verbose": flags.builtin(),
    }
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Sequence
from datetime import date as _date
from datetime import datetime as _datetime
from datetime import time as _time
from typing import Any
from urllib.parse import SplitResult, urlsplit

from cmdframe.core import validators
from cmdframe.core.models import FlagDefinition, FlagKind
from cmdframe.exceptions import FlagValueError, InvalidFlagTypeError

DATE_HINT = "Must be a valid date, e.g. 01-02-2000 or 01/02/2000 01:02:34."
EMAIL_HINT = "Must be a valid email address, e.g. me@example.com."
ID_HINT = "Must be a valid 15 or 18 character record ID."
PATH_HINT = 'Must be a valid path without any of the characters [ ] " ? < > |.'
URL_HINT = "Must be a valid URL, e.g. https://example.com."
TIME_HINT = "Must be a valid time, e.g. 01:02:03."

_INTEGER_PATTERN = re.compile(r"[-+]?\d+")
_DATE_FORMATS: tuple[str, ...] = ("%m-%d-%Y", "%m/%d/%Y", "%Y-%m-%d", "%Y/%m/%d")
_TIME_FORMATS: tuple[str, ...] = ("%H:%M:%S", "%H:%M")


# ---------------------------------------------------------------------------
# Shared assembly
# ---------------------------------------------------------------------------

def _build(
    kind: FlagKind,
    *,
    description: str,
    long_description: str | None = None,
    char: str | None = None,
    required: bool = False,
    hidden: bool = False,
    default: Any = None,
    deprecated: Any = None,
    depends_on: Sequence[str] = (),
    exclusive: Sequence[str] = (),
    parse: Callable[[str], Any] | None = None,
    options: Sequence[str] | None = None,
    delimiter: str = ",",
) -> FlagDefinition:
    return FlagDefinition(
        kind=kind,
        description=description,
        long_description=long_description,
        char=char,
        required=required,
        hidden=hidden,
        default=default,
        deprecated=deprecated,
        parse=parse,
        options=tuple(options) if options is not None else None,
        depends_on=tuple(depends_on),
        exclusive=tuple(exclusive),
        delimiter=delimiter,
    )


def _checked(kind: FlagKind, predicate: Callable[[str], bool], hint: str | None = None) -> Callable[[str], str]:
    def parse(raw: str) -> str:
        if not predicate(raw):
            raise InvalidFlagTypeError(raw, kind.value, hint)
        return raw

    return parse


# ---------------------------------------------------------------------------
# Converters (pure)
# ---------------------------------------------------------------------------

def to_integer(raw: str) -> int:
    if _INTEGER_PATTERN.fullmatch(raw.strip()) is None:
        raise InvalidFlagTypeError(raw, FlagKind.INTEGER.value)
    return int(raw)


def to_number(raw: str) -> int | float:
    """Parse an integer or floating point literal; reject non-finite values."""
    text = raw.strip()
    if _INTEGER_PATTERN.fullmatch(text):
        return int(text)
    try:
        value = float(text)
    except ValueError:
        raise InvalidFlagTypeError(raw, FlagKind.NUMBER.value) from None
    if not math.isfinite(value):
        raise InvalidFlagTypeError(raw, FlagKind.NUMBER.value)
    return value


def parse_calendar(raw: str) -> _datetime:
    """Parse ISO 8601 or ``MM-DD-YYYY`` / ``MM/DD/YYYY`` with an optional time.

    Raises
    ------
    ValueError
        If no supported format matches.
    """
    text = raw.strip()
    try:
        return _datetime.fromisoformat(text)
    except ValueError:
        pass

    date_part, _, time_part = text.partition(" ")
    time_formats = _TIME_FORMATS if time_part else ("",)
    for date_format in _DATE_FORMATS:
        for time_format in time_formats:
            pattern = f"{date_format} {time_format}" if time_format else date_format
            try:
                return _datetime.strptime(text, pattern)
            except ValueError:
                continue
    raise ValueError(f"Unrecognized date: {date_part!r}")


def to_date(raw: str) -> _date:
    try:
        return parse_calendar(raw).date()
    except ValueError:
        raise InvalidFlagTypeError(raw, FlagKind.DATE.value, DATE_HINT) from None


def to_datetime(raw: str) -> _datetime:
    try:
        return parse_calendar(raw)
    except ValueError:
        raise InvalidFlagTypeError(raw, FlagKind.DATETIME.value, DATE_HINT) from None


def to_time(raw: str) -> _time:
    for time_format in _TIME_FORMATS:
        try:
            return _datetime.strptime(raw.strip(), time_format).time()
        except ValueError:
            continue
    raise InvalidFlagTypeError(raw, FlagKind.TIME.value, TIME_HINT)


def to_url(raw: str) -> SplitResult:
    if not raw or any(ch.isspace() for ch in raw):
        raise InvalidFlagTypeError(raw, FlagKind.URL.value, URL_HINT)
    try:
        parts = urlsplit(raw)
    except ValueError:
        raise InvalidFlagTypeError(raw, FlagKind.URL.value, URL_HINT) from None
    if not parts.scheme or not (parts.netloc or parts.path):
        raise InvalidFlagTypeError(raw, FlagKind.URL.value, URL_HINT)
    return parts


# ---------------------------------------------------------------------------
# Kind constructors
# ---------------------------------------------------------------------------

def boolean(*, description: str, **options: Any) -> FlagDefinition:
    """A presence-only switch; no value is consumed."""
    return _build(FlagKind.BOOLEAN, description=description, **options)


def string(*, description: str, **options: Any) -> FlagDefinition:
    return _build(FlagKind.STRING, description=description, **options)


def integer(*, description: str, **options: Any) -> FlagDefinition:
    return _build(FlagKind.INTEGER, description=description, parse=to_integer, **options)


def number(*, description: str, **options: Any) -> FlagDefinition:
    """An integer or floating point number, e.g. ``42`` or ``4.2``."""
    return _build(FlagKind.NUMBER, description=description, parse=to_number, **options)


def enum(*, description: str, options: Sequence[str], **extra: Any) -> FlagDefinition:
    """A value restricted to *options* (case-sensitive)."""
    allowed = tuple(options)

    def parse(raw: str) -> str:
        if raw not in allowed:
            raise InvalidFlagTypeError(
                raw,
                FlagKind.ENUM.value,
                f"Must be one of: {', '.join(allowed)}.",
            )
        return raw

    return _build(FlagKind.ENUM, description=description, parse=parse, options=allowed, **extra)


def array(
    *,
    description: str,
    map: Callable[[str], Any] | None = None,  # noqa: A002
    delimiter: str = ",",
    options: Sequence[str] | None = None,
    **extra: Any,
) -> FlagDefinition:
    """A delimited list, e.g. ``one,two,three``.

    Parameters
    ----------
    map:
        Optional per-element converter, e.g. ``int``.
    delimiter:
        Element separator; defaults to ``,``.
    options:
        Optional allowed values, checked before *map* runs.
    """
    allowed = tuple(options) if options is not None else None

    def parse(raw: str) -> list[Any]:
        values = raw.split(delimiter)
        if allowed is not None:
            for value in values:
                if value not in allowed:
                    raise InvalidFlagTypeError(
                        value,
                        FlagKind.ARRAY.value,
                        f"Each element must be one of: {', '.join(allowed)}.",
                    )
        if map is None:
            return values
        try:
            return [map(value) for value in values]
        except FlagValueError:
            raise
        except (TypeError, ValueError):
            raise InvalidFlagTypeError(raw, FlagKind.ARRAY.value) from None

    return _build(
        FlagKind.ARRAY,
        description=description,
        parse=parse,
        options=allowed,
        delimiter=delimiter,
        **extra,
    )


def date(*, description: str, **options: Any) -> FlagDefinition:
    """A calendar date, e.g. ``01-02-2000``."""
    return _build(FlagKind.DATE, description=description, parse=to_date, **options)


def datetime(*, description: str, **options: Any) -> FlagDefinition:
    """A date with an optional time, e.g. ``01/02/2000 01:02:34``."""
    return _build(FlagKind.DATETIME, description=description, parse=to_datetime, **options)


def time(*, description: str, **options: Any) -> FlagDefinition:
    """A time of day, e.g. ``01:02:03``."""
    return _build(FlagKind.TIME, description=description, parse=to_time, **options)


def url(*, description: str, **options: Any) -> FlagDefinition:
    return _build(FlagKind.URL, description=description, parse=to_url, **options)


def email(*, description: str, **options: Any) -> FlagDefinition:
    return _build(
        FlagKind.EMAIL,
        description=description,
        parse=_checked(FlagKind.EMAIL, validators.is_email, EMAIL_HINT),
        **options,
    )


def id(*, description: str, **options: Any) -> FlagDefinition:  # noqa: A001
    """A 15 or 18 character record ID."""
    return _build(
        FlagKind.ID,
        description=description,
        parse=_checked(FlagKind.ID, validators.is_record_id, ID_HINT),
        **options,
    )


def filepath(*, description: str, **options: Any) -> FlagDefinition:
    return _build(
        FlagKind.FILEPATH,
        description=description,
        parse=_checked(FlagKind.FILEPATH, validators.is_valid_path, PATH_HINT),
        **options,
    )


def directory(*, description: str, **options: Any) -> FlagDefinition:
    return _build(
        FlagKind.DIRECTORY,
        description=description,
        parse=_checked(FlagKind.DIRECTORY, validators.is_valid_path, PATH_HINT),
        **options,
    )


def option(*, description: str, parse: Callable[[str], Any], **options: Any) -> FlagDefinition:
    """A custom flag whose value is converted by the caller's *parse*."""
    return _build(FlagKind.OPTION, description=description, parse=parse, **options)


def help(*, char: str = "h", description: str = "Show CLI help.", **options: Any) -> FlagDefinition:  # noqa: A001
    return _build(FlagKind.HELP, description=description, char=char, **options)


def builtin() -> FlagDefinition:
    """Mark a declaration as one of the builtin flags, configured centrally.

    The marker carries no options; the flag set builder substitutes the
    canonical definition for the declaration's name.
    """
    return FlagDefinition(kind=FlagKind.BUILTIN, description="")
