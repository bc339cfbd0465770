"""Tests for the Rich-backed display sink (cli/ux.py)."""

from __future__ import annotations

import json
import logging
import sys
from unittest.mock import MagicMock

import pytest

from cmdframe.cli import ux as ux_module
from cmdframe.cli.ux import RichUX
from cmdframe.exceptions import MissingDependencyError


def _ux(output_enabled: bool = True, level: int = logging.WARNING) -> RichUX:
    logger = logging.getLogger("cmdframe.test-ux")
    logger.setLevel(level)
    return RichUX(logger, output_enabled)


# ---------------------------------------------------------------------------
# Plain output
# ---------------------------------------------------------------------------

class TestLog:
    def test_log_writes_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux().log("hello", "world")
        assert capsys.readouterr().out == "hello world\n"

    def test_log_is_silent_when_disabled(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux(output_enabled=False).log("hello")
        assert capsys.readouterr().out == ""

    def test_markup_is_not_interpreted(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux().log("[name=value...] [bold]x[/bold]")
        assert capsys.readouterr().out == "[name=value...] [bold]x[/bold]\n"

    def test_log_json_ignores_output_switch(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux(output_enabled=False).log_json({"status": 0, "result": [1, 2]})
        assert json.loads(capsys.readouterr().out) == {"status": 0, "result": [1, 2]}

    def test_styled_json_respects_output_switch(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux(output_enabled=False).styled_json({"a": 1})
        assert capsys.readouterr().out == ""

    def test_help_always_prints(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux(output_enabled=False).help("USAGE\n  $ x")
        assert capsys.readouterr().out == "USAGE\n  $ x\n"


# ---------------------------------------------------------------------------
# Warnings and errors
# ---------------------------------------------------------------------------

class TestWarn:
    def test_prints_with_prefix(self, capsys: pytest.CaptureFixture[str]) -> None:
        sink = _ux()
        sink.warn("careful")
        captured = capsys.readouterr()
        assert captured.err == "WARNING: careful\n"
        assert sink.warnings == []

    def test_collected_when_output_disabled(self, capsys: pytest.CaptureFixture[str]) -> None:
        sink = _ux(output_enabled=False)
        sink.warn("one")
        sink.warn("two")
        sink.warn("one")
        assert sink.warnings == ["one", "two"]
        assert capsys.readouterr().err == ""

    def test_suppressed_below_warning_level(self, capsys: pytest.CaptureFixture[str]) -> None:
        sink = _ux(output_enabled=False, level=logging.ERROR)
        sink.warn("quiet")
        assert sink.warnings == []
        _ux(level=logging.ERROR).warn("quiet")
        assert capsys.readouterr().err == ""

    def test_warnings_are_per_instance(self) -> None:
        first = _ux(output_enabled=False)
        first.warn("mine")
        assert _ux(output_enabled=False).warnings == []


class TestError:
    def test_error_joins_segments_on_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux().error("ERROR: ", "bad")
        assert capsys.readouterr().err == "ERROR: bad\n"

    def test_error_json_defaults_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux(output_enabled=False).error_json({"status": 1})
        captured = capsys.readouterr()
        assert json.loads(captured.err) == {"status": 1}
        assert captured.out == ""

    def test_error_json_to_stdout_when_configured(
        self, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("CMDFRAME_JSON_TO_STDOUT", "true")
        _ux(output_enabled=False).error_json({"status": 1})
        captured = capsys.readouterr()
        assert json.loads(captured.out) == {"status": 1}
        assert captured.err == ""

    def test_explicit_destination_overrides_switch(
        self, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("CMDFRAME_JSON_TO_STDOUT", "true")
        _ux(output_enabled=False).error_json({"status": 1}, stdout=False)
        captured = capsys.readouterr()
        assert json.loads(captured.err) == {"status": 1}
        assert captured.out == ""


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------

class TestStructured:
    def test_table_with_key_list(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux().table([{"name": "alpha", "size": 1}, {"name": "beta"}], ["name", "size"])
        out = capsys.readouterr().out
        assert "NAME" in out
        assert "SIZE" in out
        assert "alpha" in out
        assert "beta" in out

    def test_table_with_label_mapping(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux().table([{"name": "alpha"}], {"name": "Org Name"})
        assert "Org Name" in capsys.readouterr().out

    def test_table_silent_when_disabled(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux(output_enabled=False).table([{"name": "alpha"}], ["name"])
        assert capsys.readouterr().out == ""

    def test_styled_header(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux().styled_header("Orgs")
        assert capsys.readouterr().out == "=== Orgs\n"

    def test_styled_object_aligns_keys(self, capsys: pytest.CaptureFixture[str]) -> None:
        _ux().styled_object({"id": 1, "name": "a", "skip": "x"}, ["id", "name"])
        assert capsys.readouterr().out == "id:   1\nname: a\n"


# ---------------------------------------------------------------------------
# Spinner and prompts
# ---------------------------------------------------------------------------

class TestSpinner:
    def test_start_and_stop(self, monkeypatch: pytest.MonkeyPatch) -> None:
        console = MagicMock()
        monkeypatch.setattr(ux_module, "get_console", lambda **kwargs: console)
        monkeypatch.setattr(ux_module, "write_text", MagicMock())

        sink = _ux()
        sink.start_spinner("Working")
        console.status.assert_called_once_with("Working")
        console.status.return_value.start.assert_called_once_with()

        sink.stop_spinner("done")
        console.status.return_value.stop.assert_called_once_with()
        ux_module.write_text.assert_called_once_with("Working... done", stderr=True)

    def test_disabled_output_never_spins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        console = MagicMock()
        monkeypatch.setattr(ux_module, "get_console", lambda **kwargs: console)
        sink = _ux(output_enabled=False)
        sink.start_spinner("Working")
        sink.stop_spinner()
        console.status.assert_not_called()


class TestPrompts:
    def test_prompt_uses_questionary(self, monkeypatch: pytest.MonkeyPatch) -> None:
        questionary = MagicMock()
        questionary.text.return_value.ask.return_value = "typed"
        monkeypatch.setitem(sys.modules, "questionary", questionary)

        assert _ux().prompt("Name?", default="x") == "typed"
        questionary.text.assert_called_once_with("Name?", default="x")

    def test_secret_prompt_uses_password(self, monkeypatch: pytest.MonkeyPatch) -> None:
        questionary = MagicMock()
        questionary.password.return_value.ask.return_value = "hunter2"
        monkeypatch.setitem(sys.modules, "questionary", questionary)

        assert _ux().prompt("Password?", secret=True) == "hunter2"

    def test_cancelled_prompt_is_interrupt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        questionary = MagicMock()
        questionary.confirm.return_value.ask.return_value = None
        monkeypatch.setitem(sys.modules, "questionary", questionary)

        with pytest.raises(KeyboardInterrupt):
            _ux().confirm("Sure?")

    def test_confirm(self, monkeypatch: pytest.MonkeyPatch) -> None:
        questionary = MagicMock()
        questionary.confirm.return_value.ask.return_value = True
        monkeypatch.setitem(sys.modules, "questionary", questionary)

        assert _ux().confirm("Sure?", default=True) is True
        questionary.confirm.assert_called_once_with("Sure?", default=True)

    def test_missing_questionary(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "questionary", None)
        with pytest.raises(MissingDependencyError, match="questionary is not installed"):
            _ux().prompt("Name?")
