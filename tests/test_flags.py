"""Tests for the flag kind constructors and value conversion (core/flags.py).

Every test is a pure function call: no I/O, no mocking.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time
from typing import Any

import pytest

from cmdframe.core import flags
from cmdframe.core.models import FlagDefinition, FlagKind
from cmdframe.exceptions import InvalidFlagTypeError


# ---------------------------------------------------------------------------
# Kind tags
# ---------------------------------------------------------------------------

class TestKindTags:
    @pytest.mark.parametrize(
        ("constructor", "kind", "extra"),
        [
            (flags.boolean, FlagKind.BOOLEAN, {}),
            (flags.string, FlagKind.STRING, {}),
            (flags.integer, FlagKind.INTEGER, {}),
            (flags.number, FlagKind.NUMBER, {}),
            (flags.enum, FlagKind.ENUM, {"options": ["a", "b"]}),
            (flags.array, FlagKind.ARRAY, {}),
            (flags.date, FlagKind.DATE, {}),
            (flags.datetime, FlagKind.DATETIME, {}),
            (flags.time, FlagKind.TIME, {}),
            (flags.url, FlagKind.URL, {}),
            (flags.email, FlagKind.EMAIL, {}),
            (flags.id, FlagKind.ID, {}),
            (flags.filepath, FlagKind.FILEPATH, {}),
            (flags.directory, FlagKind.DIRECTORY, {}),
            (flags.option, FlagKind.OPTION, {"parse": str.upper}),
            (flags.help, FlagKind.HELP, {}),
        ],
    )
    def test_constructor_sets_kind(
        self,
        constructor: Callable[..., FlagDefinition],
        kind: FlagKind,
        extra: dict[str, Any],
    ) -> None:
        definition = constructor(description="test", **extra)
        assert definition.kind is kind
        assert definition.description == "test"

    def test_builtin_marker(self) -> None:
        assert flags.builtin().kind is FlagKind.BUILTIN

    def test_shared_options_are_kept(self) -> None:
        definition = flags.string(
            description="name",
            long_description="The name.",
            char="n",
            required=True,
            hidden=True,
            default="x",
            depends_on=["other"],
            exclusive=["third"],
        )
        assert definition.char == "n"
        assert definition.required is True
        assert definition.hidden is True
        assert definition.default == "x"
        assert definition.depends_on == ("other",)
        assert definition.exclusive == ("third",)

    def test_help_defaults_to_char_h(self) -> None:
        assert flags.help().char == "h"

    def test_definitions_are_frozen(self) -> None:
        definition = flags.string(description="x")
        with pytest.raises(AttributeError):
            definition.required = True  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Presence-only kinds
# ---------------------------------------------------------------------------

class TestPresenceKinds:
    def test_boolean_takes_no_value(self) -> None:
        definition = flags.boolean(description="x")
        assert definition.takes_value is False
        assert definition.convert("") is True

    def test_help_takes_no_value(self) -> None:
        assert flags.help().takes_value is False

    def test_string_is_identity(self) -> None:
        assert flags.string(description="x").convert("hello world") == "hello world"


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

class TestNumbers:
    @pytest.mark.parametrize(("raw", "expected"), [("12", 12), ("-3", -3), ("+4", 4)])
    def test_integer_accepts_decimal(self, raw: str, expected: int) -> None:
        assert flags.integer(description="x").convert(raw) == expected

    @pytest.mark.parametrize("raw", ["1.5", "abc", "", "0x10"])
    def test_integer_rejects_non_integers(self, raw: str) -> None:
        with pytest.raises(InvalidFlagTypeError) as exc_info:
            flags.integer(description="x").convert(raw)
        assert exc_info.value.kind == "integer"

    def test_number_keeps_integral_text_as_int(self) -> None:
        value = flags.number(description="x").convert("42")
        assert value == 42
        assert isinstance(value, int)

    def test_number_parses_floats(self) -> None:
        assert flags.number(description="x").convert("4.25") == pytest.approx(4.25)

    @pytest.mark.parametrize("raw", ["inf", "nan", "four"])
    def test_number_rejects_non_finite_and_text(self, raw: str) -> None:
        with pytest.raises(InvalidFlagTypeError):
            flags.number(description="x").convert(raw)


# ---------------------------------------------------------------------------
# Enum and array
# ---------------------------------------------------------------------------

class TestEnum:
    def test_accepts_member(self) -> None:
        assert flags.enum(description="x", options=["a", "b"]).convert("b") == "b"

    def test_rejects_non_member(self) -> None:
        with pytest.raises(InvalidFlagTypeError, match="Must be one of: a, b"):
            flags.enum(description="x", options=["a", "b"]).convert("c")

    def test_options_are_recorded(self) -> None:
        assert flags.enum(description="x", options=["a", "b"]).options == ("a", "b")


class TestArray:
    def test_default_delimiter(self) -> None:
        assert flags.array(description="x").convert("1,2,3") == ["1", "2", "3"]

    def test_integer_mapper(self) -> None:
        assert flags.array(description="x", map=int).convert("1,2,3") == [1, 2, 3]

    def test_custom_delimiter(self) -> None:
        definition = flags.array(description="x", delimiter=";")
        assert definition.convert("a;b") == ["a", "b"]
        assert definition.delimiter == ";"

    def test_allowed_values(self) -> None:
        definition = flags.array(description="x", options=["a", "b"])
        assert definition.convert("a,b") == ["a", "b"]
        with pytest.raises(InvalidFlagTypeError):
            definition.convert("a,c")

    def test_mapper_failure_is_a_type_error(self) -> None:
        with pytest.raises(InvalidFlagTypeError) as exc_info:
            flags.array(description="x", map=int).convert("1,x")
        assert exc_info.value.kind == "array"


# ---------------------------------------------------------------------------
# Dates and times
# ---------------------------------------------------------------------------

class TestCalendar:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("2000-01-02", date(2000, 1, 2)),
            ("01-02-2000", date(2000, 1, 2)),
            ("01/02/2000", date(2000, 1, 2)),
        ],
    )
    def test_date_formats(self, raw: str, expected: date) -> None:
        assert flags.date(description="x").convert(raw) == expected

    def test_datetime_with_time(self) -> None:
        value = flags.datetime(description="x").convert("01/02/2000 01:02:34")
        assert value == datetime(2000, 1, 2, 1, 2, 34)

    def test_invalid_date_has_hint(self) -> None:
        with pytest.raises(InvalidFlagTypeError) as exc_info:
            flags.date(description="x").convert("not a date")
        assert exc_info.value.hint == flags.DATE_HINT

    def test_time(self) -> None:
        assert flags.time(description="x").convert("01:02:03") == time(1, 2, 3)
        assert flags.time(description="x").convert("13:45") == time(13, 45)

    def test_invalid_time(self) -> None:
        with pytest.raises(InvalidFlagTypeError):
            flags.time(description="x").convert("25:00")


# ---------------------------------------------------------------------------
# Validated strings
# ---------------------------------------------------------------------------

class TestValidatedStrings:
    def test_url_split(self) -> None:
        value = flags.url(description="x").convert("https://example.com/path")
        assert value.scheme == "https"
        assert value.netloc == "example.com"
        assert value.path == "/path"

    @pytest.mark.parametrize("raw", ["example.com", "http://a b", ""])
    def test_url_rejects(self, raw: str) -> None:
        with pytest.raises(InvalidFlagTypeError) as exc_info:
            flags.url(description="x").convert(raw)
        assert exc_info.value.hint == flags.URL_HINT

    def test_email(self) -> None:
        definition = flags.email(description="x")
        assert definition.convert("me@example.com") == "me@example.com"
        with pytest.raises(InvalidFlagTypeError) as exc_info:
            definition.convert("me@example")
        assert exc_info.value.hint == flags.EMAIL_HINT

    @pytest.mark.parametrize("raw", ["a" * 15, "0" * 18])
    def test_record_id_accepts(self, raw: str) -> None:
        assert flags.id(description="x").convert(raw) == raw

    def test_record_id_rejects_wrong_length(self) -> None:
        with pytest.raises(InvalidFlagTypeError) as exc_info:
            flags.id(description="x").convert("a" * 16)
        assert exc_info.value.hint == flags.ID_HINT

    def test_filepath_blacklist(self) -> None:
        definition = flags.filepath(description="x")
        assert definition.convert("some/dir/file.txt") == "some/dir/file.txt"
        with pytest.raises(InvalidFlagTypeError) as exc_info:
            definition.convert("bad|path")
        assert exc_info.value.hint == flags.PATH_HINT

    def test_directory_blacklist(self) -> None:
        with pytest.raises(InvalidFlagTypeError) as exc_info:
            flags.directory(description="x").convert("what?")
        assert exc_info.value.hint == flags.PATH_HINT
        assert str(exc_info.value).startswith("The value 'what?' is not a valid directory.")

    def test_option_uses_caller_parse(self) -> None:
        assert flags.option(description="x", parse=str.upper).convert("abc") == "ABC"
