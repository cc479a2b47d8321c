from __future__ import annotations

"""
ledgerflow CLI Wrapper (Typer + Rich)

Classify parser output and commit it to the remote ledger in dependency order.

All paths are resolved from a single workspace root:
  --data-dir / LEDGERFLOW_DATA env var / current working directory
"""

import logging
from pathlib import Path
from typing import Optional

import typer

from ledgerflow.config import ENV_DATA_DIR
from ledgerflow.model.settings_io import load_settings
from ledgerflow.workspace import Workspace

HELP_WRITE = "Persist changes (default: dry-run)"
HELP_INPUT = "Parser output JSON file ({'events': [...]} or a bare list)"

APP_HELP = "ledgerflow CLI"

app = typer.Typer(no_args_is_help=True, add_completion=False, help=APP_HELP)


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        envvar=ENV_DATA_DIR,
        help="Workspace root directory (default: current directory)",
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (default: log_level from settings)"
    ),
):
    """ledgerflow CLI. All paths are resolved from a single workspace root."""
    workspace = Workspace.resolve(data_dir)
    level = log_level or load_settings(workspace.settings_path).log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["workspace"] = workspace


def _ws(ctx: typer.Context) -> Workspace:
    return ctx.obj["workspace"]


@app.command()
def init(ctx: typer.Context):
    """Initialize a new workspace with required directories and starter config.

    Safe to run on an existing workspace; skips anything that already exists.

    Examples:
      ledgerflow --data-dir ~/ledger init
      ledgerflow init
    """
    from ledgerflow.cli.command import init as cmd_init

    code = cmd_init.run(workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def classify(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help=HELP_INPUT),
):
    """Classify parser output into typed events and list them."""
    from ledgerflow.cli.command import classify as cmd_classify

    code = cmd_classify.run(workspace=_ws(ctx), input_path=input_path)
    raise typer.Exit(code=code)


@app.command()
def plan(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help=HELP_INPUT),
):
    """Show the phase 1 / phase 2 split and any follow-up questions."""
    from ledgerflow.cli.command import plan as cmd_plan

    code = cmd_plan.run(workspace=_ws(ctx), input_path=input_path)
    raise typer.Exit(code=code)


@app.command()
def commit(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help=HELP_INPUT),
    write: bool = typer.Option(False, "--write", help=HELP_WRITE),
):
    """Commit parser output to the remote ledger.

    Examples:
      ledgerflow commit inbox/lunch.json
      ledgerflow commit inbox/lunch.json --write

    Safety: dry-run by default. Use --write to send writes to the ledger.
    """
    from ledgerflow.cli.command import commit as cmd_commit

    code = cmd_commit.run(workspace=_ws(ctx), input_path=input_path, write=write)
    raise typer.Exit(code=code)


if __name__ == "__main__":
    app()  # pragma: no cover
