from __future__ import annotations

from pathlib import Path
from typing import List

from ledgerflow.model.events import FinancialEventBase
from ledgerflow.services.follow_up_service import find_follow_ups
from ledgerflow.services.phase_planner import PhasePlan, plan_phases
from ledgerflow.workspace import Workspace

from .classify import render_events
from .util import classify_file, console, load_workspace_settings


def print_plan(plan: PhasePlan, events: List[FinancialEventBase]) -> None:
    if plan.phase1:
        console.print(render_events(plan.phase1, title="Phase 1: entities"))
    if plan.phase2:
        console.print(render_events(plan.phase2, title="Phase 2: transactions"))
    if plan.informational:
        console.print(render_events(plan.informational, title="Informational (not committed)"))
    if plan.skipped:
        console.print(f"[yellow]Skipped {len(plan.skipped)} unrecognized record(s).[/]")

    follow_ups = find_follow_ups(events)
    if follow_ups:
        console.print("\n[bold]Follow-up questions:[/]")
        for question in follow_ups:
            picker = f" [dim]({question.picker_type.value})[/dim]" if question.picker_type else ""
            console.print(f"  - {question.question or ', '.join(question.missing_fields)}{picker}")


def run(*, workspace: Workspace, input_path: Path) -> int:
    """Show how a parser output file would be committed, phase by phase.

    Returns an exit code (0 for success, 1 if the file cannot be read).
    """
    settings = load_workspace_settings(workspace)
    try:
        events = classify_file(input_path, settings)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1

    plan = plan_phases(events)
    if plan.is_empty:
        console.print("[yellow]Nothing to commit.[/]")
    print_plan(plan, events)
    console.print(
        f"\n[bold]{len(plan.phase1)}[/] in phase 1, [bold]{len(plan.phase2)}[/] in phase 2, "
        f"[bold]{len(plan.informational)}[/] informational"
    )
    return 0
