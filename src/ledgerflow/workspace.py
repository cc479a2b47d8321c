"""
Workspace - centralized path resolution for ledgerflow.

A Workspace is the directory holding the settings file, parser output waiting
to be committed, and saved commit reports.

Resolution priority:
1. Explicit path (--data-dir CLI option)
2. LEDGERFLOW_DATA environment variable
3. Current working directory
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ledgerflow.config import ENV_DATA_DIR


@dataclass
class Workspace:
    """Root directory for all ledgerflow paths."""

    root: Path

    @classmethod
    def resolve(cls, explicit: Path | None = None) -> Workspace:
        """Resolve workspace root from explicit path, env var, or CWD.

        Args:
            explicit: Explicitly provided path (highest priority)

        Returns:
            Workspace with resolved root
        """
        if explicit is not None:
            return cls(root=explicit)
        env = os.environ.get(ENV_DATA_DIR)
        if env:
            return cls(root=Path(env))
        return cls(root=Path.cwd())

    @property
    def settings_path(self) -> Path:
        return self.root / "config" / "ledgerflow.yml"

    @property
    def inbox_dir(self) -> Path:
        return self.root / "inbox"

    @property
    def reports_dir(self) -> Path:
        return self.root / "reports"


__all__ = ["Workspace"]
