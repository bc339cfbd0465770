"""Tests for command dispatch and the script-level boundary (cli/app.py)."""

from __future__ import annotations

import json
import sys
from typing import Any

import pytest

from cmdframe.cli import app, exit_codes
from cmdframe.cli.app import build_registry, cli, main, render_command_list
from cmdframe.cli.lifecycle import Collaborators
from cmdframe.core.command import CommandDescriptor, define_command
from cmdframe.core.models import CommandContext
from cmdframe.exceptions import CmdframeError
from cmdframe.version import __version__


def org_list(context: CommandContext) -> Any:
    """List orgs."""
    return [{"name": "alpha"}]


def org_create(context: CommandContext) -> Any:
    """Create an org."""
    raise CmdframeError("quota exceeded", exit_code=3)


def interrupted(context: CommandContext) -> Any:
    raise KeyboardInterrupt


def _commands() -> list[CommandDescriptor]:
    return [
        define_command(org_list, table_column_data=["name"]),
        define_command(org_create),
        define_command(interrupted),
    ]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TestRegistry:
    def test_indexes_by_id(self) -> None:
        registry = build_registry(_commands())
        assert sorted(registry) == ["interrupted", "org:create", "org:list"]

    def test_duplicate_ids_rejected(self) -> None:
        with pytest.raises(ValueError, match="org:list"):
            build_registry([define_command(org_list), define_command(org_list)])

    def test_mapping_is_accepted(self) -> None:
        descriptor = define_command(org_list)
        assert build_registry({"ls": descriptor}) == {"ls": descriptor}

    def test_command_list(self) -> None:
        text = render_command_list(build_registry(_commands()), "mycli")
        assert text.splitlines() == [
            "USAGE",
            "  $ mycli COMMAND",
            "",
            "COMMANDS",
            "  interrupted",
            "  org:create   Create an org.",
            "  org:list     List orgs.",
        ]

    def test_empty_command_list(self) -> None:
        assert render_command_list({}, "mycli").endswith("COMMANDS\n  (none)")


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------

class TestMain:
    @pytest.mark.parametrize("argv", [[], ["help"], ["--help"], ["-h"]])
    def test_lists_commands(self, argv: list[str], capsys: pytest.CaptureFixture[str]) -> None:
        assert main(_commands(), argv, bin_name="mycli") == exit_codes.SUCCESS
        out = capsys.readouterr().out
        assert out.startswith("USAGE\n")
        assert "org:list" in out

    @pytest.mark.parametrize("flag", ["-V", "--version"])
    def test_version(self, flag: str, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(_commands(), [flag], bin_name="mycli") == exit_codes.SUCCESS
        assert capsys.readouterr().out == f"mycli {__version__}\n"

    def test_unknown_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(_commands(), ["nope"], bin_name="mycli") == exit_codes.GENERAL_ERROR
        assert capsys.readouterr().err.startswith("ERROR: nope is not a mycli command.")

    def test_dispatches_with_remaining_argv(
        self, collaborators: Collaborators, capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = main(_commands(), ["org:list", "--json"], bin_name="mycli", collaborators=collaborators)

        assert code == exit_codes.SUCCESS
        assert json.loads(capsys.readouterr().out)["result"] == [{"name": "alpha"}]

    def test_command_help_uses_bin_name(
        self, collaborators: Collaborators, capsys: pytest.CaptureFixture[str],
    ) -> None:
        main(_commands(), ["org:list", "-h"], bin_name="mycli", collaborators=collaborators)
        assert "$ mycli org:list" in capsys.readouterr().out

    def test_failed_command_exit_code(self, collaborators: Collaborators) -> None:
        assert main(_commands(), ["org:create"], bin_name="mycli", collaborators=collaborators) == 3

    def test_defaults_to_sys_argv(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setattr(sys, "argv", ["mycli", "--version"])
        assert main(_commands(), bin_name="mycli") == exit_codes.SUCCESS
        assert capsys.readouterr().out == f"mycli {__version__}\n"


# ---------------------------------------------------------------------------
# cli()
# ---------------------------------------------------------------------------

class TestCli:
    def test_exits_with_command_code(self, collaborators: Collaborators) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli(_commands(), bin_name="mycli", argv=["org:create"], collaborators=collaborators)
        assert exc_info.value.code == 3

    def test_success_exits_zero(self, collaborators: Collaborators) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli(_commands(), bin_name="mycli", argv=["org:list"], collaborators=collaborators)
        assert exc_info.value.code == exit_codes.SUCCESS

    def test_keyboard_interrupt(
        self, collaborators: Collaborators, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli(_commands(), bin_name="mycli", argv=["interrupted"], collaborators=collaborators)
        assert exc_info.value.code == exit_codes.KEYBOARD_INTERRUPT
        assert "Aborted by user." in capsys.readouterr().err

    def test_framework_error_escaping_main(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str],
    ) -> None:
        def explode(*args: Any, **kwargs: Any) -> int:
            raise CmdframeError("broken install", actions=("Reinstall.",), exit_code=5)

        monkeypatch.setattr(app, "main", explode)
        with pytest.raises(SystemExit) as exc_info:
            cli([], bin_name="mycli", argv=[])

        assert exc_info.value.code == 5
        assert capsys.readouterr().err == "ERROR: broken install\n  Reinstall.\n"

    def test_unexpected_error(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str],
    ) -> None:
        def explode(*args: Any, **kwargs: Any) -> int:
            raise RuntimeError("kaboom")

        monkeypatch.setattr(app, "main", explode)
        with pytest.raises(SystemExit) as exc_info:
            cli([], bin_name="mycli", argv=[])

        assert exc_info.value.code == exit_codes.UNEXPECTED_ERROR
        assert "RuntimeError: kaboom" in capsys.readouterr().err
