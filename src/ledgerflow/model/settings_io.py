from __future__ import annotations

"""
Settings I/O (YAML loading and saving).

Functions for reading and writing config/ledgerflow.yml.
"""

from pathlib import Path

import yaml

from ledgerflow.model.settings import Settings


def load_settings(path: Path) -> Settings:
    """Load settings from YAML (safe loader).

    A missing file yields default Settings. A file that exists but does not
    validate raises, so a typo in the API URL key is not silently ignored.

    Args:
        path: Path to ledgerflow.yml

    Returns:
        Settings instance
    """
    if not path.exists():
        return Settings()

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return Settings.model_validate(data)


def save_settings(path: Path, settings: Settings) -> None:
    """Save settings to YAML, creating parent directories if needed.

    The API token is never written; supply it through LEDGERFLOW_API_TOKEN.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    data = settings.model_dump(exclude_none=True, exclude={"api_token"}, mode="json")

    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(
            data,
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
