from __future__ import annotations
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .checks.base import CheckRegistry
from .models import Report, Section, Status

_ICONS = {
    Status.HEALTHY: "✅",
    Status.WARNING: "⚠️",
    Status.CRITICAL: "❌",
    Status.MANUAL_CHECK: "👁",
    Status.UNKNOWN: "❔",
}


class Reporter:
    """Terminal summary of a report run."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def section(self, section: Section) -> None:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Status", width=8)
        table.add_column("Check", style="bold")
        table.add_column("Details")
        for r in section.results:
            details = Text(r.note)
            if r.error:
                details.append(f"\n{r.error}", style="red")
            table.add_row(_ICONS[r.status], Text(r.name), details)
        self.console.print(Panel.fit(table, title=Text(section.title, style="bold blue")))

    def summary(self, report: Report, output: Path) -> None:
        counts = report.counts()
        table = Table(show_header=True, header_style="bold")
        for status in Status:
            table.add_column(status.value)
        table.add_row(*(str(counts[status]) for status in Status))
        if counts[Status.CRITICAL] or counts[Status.UNKNOWN]:
            style = "bold red"
        elif counts[Status.WARNING]:
            style = "bold yellow"
        else:
            style = "bold green"
        self.console.print(Panel.fit(table, title=Text("Summary", style=style)))
        self.console.print(f"[bold]Report written to[/bold] {output}")

    def catalogue(self, registry: CheckRegistry) -> None:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Section", style="bold blue")
        table.add_column("Check", no_wrap=True)
        table.add_column("Source", overflow="fold")
        for d in registry:
            table.add_row(d.section, d.name, d.source or "manual")
        self.console.print(table)
