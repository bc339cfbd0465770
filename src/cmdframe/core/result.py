"""The value a command returned, plus how to show it to a human."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from cmdframe.core.models import TableColumns
from cmdframe.core.protocols import OutputSink

NO_RESULTS_MESSAGE = "No results found."

DisplayRoutine = Callable[["CommandResult", OutputSink], None]


class CommandResult:
    """Wraps command output for human-mode rendering.

    Parameters
    ----------
    data:
        Whatever the command returned (or an error's data payload).
    table_column_data:
        Columns to render *data* as a table, when it is a sequence of rows.
    display:
        Optional replacement for :meth:`default_display`, called as
        ``display(result, ux)``.
    """

    def __init__(
        self,
        data: Any = None,
        *,
        table_column_data: TableColumns | None = None,
        display: DisplayRoutine | None = None,
    ) -> None:
        self.data = data
        self.table_column_data = table_column_data
        self._display = display

    def display(self, ux: OutputSink) -> None:
        if self._display is not None:
            self._display(self, ux)
        else:
            self.default_display(ux)

    def default_display(self, ux: OutputSink) -> None:
        """Render a table of rows, or ``No results found.`` for no rows.

        Nothing is printed unless ``table_column_data`` is set and
        :attr:`data` is a sequence (strings and mappings do not count).
        """
        if not self.table_column_data or not _is_row_sequence(self.data):
            return
        if self.data:
            ux.table(self.data, self.table_column_data)
        else:
            ux.log(NO_RESULTS_MESSAGE)


def _is_row_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, Mapping))
