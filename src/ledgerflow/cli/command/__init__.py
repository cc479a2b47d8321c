from __future__ import annotations

# Command implementations for the ledgerflow CLI.
# Each command module exposes a `run(...)` function that performs the action
# and prints to the console. Typer wrappers in ledgerflow.cli.app delegate here.

__all__ = [
    "classify",
    "commit",
    "init",
    "plan",
]
