from __future__ import annotations

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rich.table import Table

from ledgerflow.model.events import FinancialEventBase
from ledgerflow.services.commit_orchestrator import (
    CommitOrchestrator,
    CommitReport,
    PhaseCommitError,
)
from ledgerflow.services.commit_summary import CommitSummary, find_fixed_income
from ledgerflow.services.phase_planner import plan_phases
from ledgerflow.storage.remote_store import RemoteLedgerStore
from ledgerflow.storage.snapshot import load_snapshot
from ledgerflow.storage.store import LedgerStore, StoreError
from ledgerflow.workspace import Workspace

from .plan import print_plan
from .util import classify_file, console, load_workspace_settings


async def _commit(store: LedgerStore, events: List[FinancialEventBase]) -> tuple:
    snapshot = await load_snapshot(store)
    report = await CommitOrchestrator(store).commit(events, snapshot)
    return report, snapshot


def _print_report(report: CommitReport) -> None:
    table = Table(title="Commit result", show_lines=False)
    table.add_column("Outcome", style="cyan", no_wrap=True)
    table.add_column("Event", style="white")
    table.add_column("Note", style="dim")

    for event in report.committed:
        note = "default account" if event.event_id in report.default_used else ""
        table.add_row("[green]committed[/]", event.label, note)
    for pending in report.pending:
        note = pending.reason.value
        if pending.suggested_card is not None:
            note = f"{note}: {pending.suggested_card.display_name}"
        table.add_row("[yellow]pending[/]", pending.event.label, note)
    for rejected in report.rejected:
        table.add_row("[red]rejected[/]", rejected.event.label, rejected.reason)

    console.print(table)


def _save_report(workspace: Workspace, report: CommitReport) -> Path:
    workspace.reports_dir.mkdir(parents=True, exist_ok=True)
    path = workspace.reports_dir / f"commit-{datetime.now():%Y%m%d-%H%M%S}.json"
    data = {
        "state": report.state.value,
        "committed": [e.model_dump(mode="json") for e in report.committed],
        "pending": [
            {"event": p.event.model_dump(mode="json"), "reason": p.reason.value}
            for p in report.pending
        ],
        "rejected": [
            {"event": r.event.model_dump(mode="json"), "reason": r.reason} for r in report.rejected
        ],
        "default_used": report.default_used,
        "account_map_refreshed": report.account_map_refreshed,
    }
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def run(
    *,
    workspace: Workspace,
    input_path: Path,
    write: bool = False,
    store: Optional[LedgerStore] = None,
) -> int:
    """Commit a parser output file to the remote ledger.

    Dry-run by default: prints the phase plan and follow-up questions. With
    write=True, loads the ledger snapshot, runs both phases and prints what
    happened to each event.

    Returns an exit code (0 for success, 1 on unreadable input or a failed
    phase).
    """
    settings = load_workspace_settings(workspace)
    try:
        events = classify_file(input_path, settings)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1

    plan = plan_phases(events)
    print_plan(plan, events)

    if plan.is_empty:
        console.print("[yellow]Nothing to commit.[/]")
        return 0

    if not write:
        console.print(
            f"\n[dim]Dry-run: would commit {plan.committable_count} event(s). "
            "Use --write to persist.[/]"
        )
        return 0

    owned_store = None
    if store is None:
        owned_store = RemoteLedgerStore.from_settings(settings)
        store = owned_store

    try:
        report, snapshot = asyncio.run(_commit(store, events))
    except PhaseCommitError as e:
        console.print(f"[red]Error:[/red] {e}")
        if e.report.committed:
            console.print(
                f"[yellow]{len(e.report.committed)} event(s) were committed before the failure "
                "and stay applied; re-check the ledger before retrying.[/]"
            )
        return 1
    except StoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1
    finally:
        if owned_store is not None:
            owned_store.close()

    _print_report(report)
    console.print(f"\n[green]{CommitSummary.from_events(report.committed).confirmation_message}[/]")

    hint = find_fixed_income(report.committed, snapshot.account_map)
    if hint is not None:
        console.print(
            f"[cyan]{hint.event.category} income of {hint.event.amount} looks recurring; "
            "consider setting up automatic income.[/]"
        )

    saved = _save_report(workspace, report)
    console.print(f"[dim]Report saved to {saved}[/dim]")
    return 0
