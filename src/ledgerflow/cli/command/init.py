"""Initialize a new ledgerflow workspace directory."""

from __future__ import annotations

from ledgerflow.workspace import Workspace

from .util import console

_STARTER_SETTINGS_YML = """\
# ledgerflow settings
# The API token is read from LEDGERFLOW_API_TOKEN and never stored here.
# LEDGERFLOW_API_URL overrides api_base_url when set.

api_base_url: http://localhost:3000/api
timeout_seconds: 30
base_currency: CNY
log_level: WARNING
"""


def run(*, workspace: Workspace) -> int:
    """Create the workspace directories and a starter settings file.

    Skips anything that already exists (safe to run on an existing workspace).

    Returns:
        Exit code (0 = success)
    """
    root = workspace.root
    console.print(f"[bold cyan]Initializing workspace:[/] {root}\n")

    created = []
    skipped = []

    for directory in [
        workspace.settings_path.parent,  # config/
        workspace.inbox_dir,
        workspace.reports_dir,
    ]:
        label = str(directory.relative_to(root)) + "/"
        if directory.exists():
            skipped.append(label)
        else:
            directory.mkdir(parents=True, exist_ok=True)
            created.append(label)

    settings_path = workspace.settings_path
    if settings_path.exists():
        skipped.append(str(settings_path.relative_to(root)))
    else:
        settings_path.write_text(_STARTER_SETTINGS_YML, encoding="utf-8")
        created.append(str(settings_path.relative_to(root)))

    if created:
        console.print("[green]Created:[/]")
        for c in created:
            console.print(f"  {c}")

    if skipped:
        console.print("[dim]Already exists (skipped):[/dim]")
        for s in skipped:
            console.print(f"  [dim]{s}[/dim]")

    if not created:
        console.print("[green]Workspace already fully initialized.[/]")
    else:
        console.print(f"\n[green]Workspace ready at {root}[/]")
        console.print("\n[dim]Next steps:[/dim]")
        console.print("  1. export LEDGERFLOW_API_TOKEN=...")
        console.print("  2. Save parser output as JSON under inbox/")
        console.print("  3. Run: ledgerflow plan inbox/<file>.json")
        console.print("  4. Run: ledgerflow commit inbox/<file>.json --write")

    return 0
