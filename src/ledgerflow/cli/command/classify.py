from __future__ import annotations

from pathlib import Path
from typing import List

from rich.table import Table

from ledgerflow.model.events import FinancialEventBase, NullStatementEvent
from ledgerflow.workspace import Workspace

from .util import classify_file, console, load_workspace_settings


def render_events(events: List[FinancialEventBase], title: str) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Summary", style="white")
    table.add_column("ID8", style="dim", no_wrap=True)

    for i, event in enumerate(events, start=1):
        summary = event.label
        if isinstance(event, NullStatementEvent):
            summary = f"[yellow]{event.reason}[/]"
        table.add_row(str(i), event.event_type, summary, event.event_id[:8])
    return table


def run(*, workspace: Workspace, input_path: Path) -> int:
    """Classify a parser output file and print one row per event.

    Returns an exit code (0 for success, 1 if the file cannot be read).
    """
    settings = load_workspace_settings(workspace)
    try:
        events = classify_file(input_path, settings)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1

    if not events:
        console.print("[yellow]No events in parser output.[/]")
        return 0

    console.print(render_events(events, title=f"Events in {input_path.name}"))
    skipped = sum(1 for e in events if isinstance(e, NullStatementEvent))
    if skipped:
        console.print(f"[yellow]{skipped} record(s) could not be classified and will be skipped.[/]")
    return 0
