"""Render action results as a rich console table."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.text import Text

from shepherd.actions.base import ActionResult, Outcome
from shepherd.core.projects import ReportSeparator

if TYPE_CHECKING:
    from shepherd.actions.base import Action

_OUTCOME_STYLE = {
    Outcome.SUCCESS: "green",
    Outcome.FAILURE: "red",
    Outcome.ATTENTION: "black on yellow",
    Outcome.NEUTRAL: "",
}

_STATUS_COLUMN = "Status"


def build_table(
    action: Action, items: Sequence[ActionResult | ReportSeparator]
) -> Table:
    """One row per project; separators start a new labelled section."""
    table = Table(title=action.description, title_justify="left")
    for idx, column in enumerate(action.columns):
        if idx == 0:
            table.add_column(column, style="cyan", no_wrap=True)
        else:
            table.add_column(column, justify="right")

    for item in items:
        if isinstance(item, ReportSeparator):
            table.add_section()
            if item.label:
                table.add_row(Text(item.label, style="bold italic"))
            continue
        table.add_row(*_cells(action, item), style=None if item.selected else "dim")

    return table


def _cells(action: Action, result: ActionResult) -> list[Text]:
    row = result.row()
    highlighted = (
        _STATUS_COLUMN if _STATUS_COLUMN in action.columns else action.columns[0]
    )
    cells: list[Text] = []
    for column in action.columns:
        value = row.get(column, "")
        style = _OUTCOME_STYLE[result.outcome] if column == highlighted else ""
        cells.append(Text(value, style=style))
    return cells


def failure_lines(items: Sequence[ActionResult | ReportSeparator]) -> list[str]:
    return [
        f"{item.project}: {item.error}"
        for item in items
        if isinstance(item, ActionResult) and item.error
    ]


class ReportFormatter:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print_report(
        self, action: Action, items: Sequence[ActionResult | ReportSeparator]
    ) -> None:
        self.console.print(build_table(action, items))
        failures = failure_lines(items)
        if failures:
            self.console.print()
            self.console.print("[bold red]Failures:[/]")
            for line in failures:
                self.console.print(Text(f"  {line}", style="red"))
