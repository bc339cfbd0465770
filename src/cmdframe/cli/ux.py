"""Rich-backed display sink for one command invocation.

:class:`RichUX` is the default :class:`~cmdframe.core.protocols.OutputSink`.
Every call is echoed to the invocation logger at DEBUG level; stream
output only happens while output is enabled (it is disabled in JSON mode,
where a single document is emitted at the end instead).  Interactive
prompts use questionary, imported lazily so non-interactive commands
never need it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from cmdframe.cli.console import get_console, write_text
from cmdframe.config import json_errors_to_stdout
from cmdframe.core.models import TableColumns
from cmdframe.exceptions import MissingDependencyError
from cmdframe.logging import ROOT_LOGGER_NAME

WARNING_PREFIX = "WARNING:"


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise MissingDependencyError(
            "questionary is not installed.",
            actions=("Install it with: pip install questionary",),
        ) from exc
    return questionary


def _import_rich_table() -> type[Any]:
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise MissingDependencyError(
            "rich is not installed.",
            actions=("Install it with: pip install rich",),
        ) from exc
    return Table


def _to_json(document: Any) -> str:
    return json.dumps(document, indent=4, default=str)


def _column_labels(columns: TableColumns) -> list[tuple[str, str]]:
    if isinstance(columns, Mapping):
        return [(key, label) for key, label in columns.items()]
    return [(key, key.upper()) for key in columns]


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


class RichUX:
    """Display sink bound to one invocation.

    Parameters
    ----------
    logger:
        Where every call is logged; also gates warnings (nothing is shown
        or collected when the logger is not enabled for WARNING).
    output_enabled:
        ``False`` in JSON mode.  Warnings are then collected in
        :attr:`warnings` for the final JSON document instead of printed.
    """

    def __init__(self, logger: logging.Logger | None = None, output_enabled: bool = True) -> None:
        self.logger = logger if logger is not None else logging.getLogger(ROOT_LOGGER_NAME)
        self.output_enabled = output_enabled
        self.warnings: list[str] = []
        self._spinner: Any = None
        self._spinner_message: str = ""

    # ------------------------------------------------------------------
    # Plain output
    # ------------------------------------------------------------------

    def log(self, *messages: Any) -> None:
        text = " ".join(str(message) for message in messages)
        if self.output_enabled:
            write_text(text)
        self.logger.debug(text)

    def log_json(self, document: Any) -> None:
        """Write *document* as JSON to stdout, even when output is disabled."""
        text = _to_json(document)
        write_text(text)
        self.logger.debug(text)

    def styled_json(self, document: Any) -> None:
        text = _to_json(document)
        self.logger.debug(text)
        if self.output_enabled:
            write_text(text)

    def warn(self, message: str) -> None:
        self.logger.debug("%s %s", WARNING_PREFIX, message)
        if not self.logger.isEnabledFor(logging.WARNING):
            return
        if self.output_enabled:
            write_text(f"{WARNING_PREFIX} {message}", stderr=True, style="yellow")
        elif message not in self.warnings:
            self.warnings.append(message)

    def error(self, *messages: Any) -> None:
        text = "".join(str(message) for message in messages)
        if self.output_enabled:
            write_text(text, stderr=True)
        self.logger.debug(text)

    def error_json(self, document: Any, *, stdout: bool | None = None) -> None:
        """Write an error document to stderr, or to stdout when *stdout* is true.

        When *stdout* is ``None`` the ``CMDFRAME_JSON_TO_STDOUT`` switch decides.
        """
        if stdout is None:
            stdout = json_errors_to_stdout()
        text = _to_json(document)
        write_text(text, stderr=not stdout)
        self.logger.debug(text)

    def help(self, text: str) -> None:
        write_text(text)

    # ------------------------------------------------------------------
    # Structured output
    # ------------------------------------------------------------------

    def table(self, rows: Sequence[Mapping[str, Any]], columns: TableColumns) -> None:
        """Render *rows* as a table.

        *columns* is either a sequence of keys (labels are the upper-cased
        keys) or a mapping of key to label.
        """
        if self.output_enabled:
            table_class = _import_rich_table()
            labels = _column_labels(columns)
            table = table_class(show_header=True, header_style="bold", box=None, pad_edge=False)
            for _, label in labels:
                table.add_column(label, overflow="fold")
            for row in rows:
                table.add_row(*(_cell(row.get(key)) for key, _ in labels))
            get_console().print(table)
        self.logger.debug("%s", list(rows))

    def styled_header(self, header: str) -> None:
        self.logger.debug(header)
        if self.output_enabled:
            write_text(f"=== {header}", style="bold")

    def styled_object(self, obj: Mapping[str, Any], keys: Sequence[str] | None = None) -> None:
        self.logger.debug("%s", obj)
        if not self.output_enabled:
            return
        selected = list(keys) if keys is not None else list(obj)
        if not selected:
            return
        width = max(len(key) for key in selected) + 1
        for key in selected:
            write_text(f"{key + ':':<{width}} {_cell(obj.get(key))}")

    # ------------------------------------------------------------------
    # Spinner
    # ------------------------------------------------------------------

    def start_spinner(self, message: str) -> None:
        if not self.output_enabled:
            return
        self.stop_spinner()
        self._spinner_message = message
        self._spinner = get_console(stderr=True).status(message)
        self._spinner.start()

    def stop_spinner(self, message: str | None = None) -> None:
        if self._spinner is None:
            return
        self._spinner.stop()
        self._spinner = None
        if message:
            write_text(f"{self._spinner_message}... {message}", stderr=True)

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def prompt(self, message: str, *, default: str = "", secret: bool = False) -> str:
        """Ask the user for a line of text.

        Raises
        ------
        KeyboardInterrupt
            If the user cancels the prompt.
        """
        questionary = _import_questionary()
        question = (
            questionary.password(message)
            if secret
            else questionary.text(message, default=default)
        )
        answer: str | None = question.ask()
        if answer is None:
            raise KeyboardInterrupt
        return answer

    def confirm(self, message: str, *, default: bool = False) -> bool:
        questionary = _import_questionary()
        answer: bool | None = questionary.confirm(message, default=default).ask()
        if answer is None:
            raise KeyboardInterrupt
        return answer
