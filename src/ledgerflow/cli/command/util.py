from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import List, Union

from rich.console import Console
from rich.text import Text

from ledgerflow.model.events import FinancialEventBase
from ledgerflow.model.settings import Settings
from ledgerflow.model.settings_io import load_settings
from ledgerflow.services.event_classifier import EventClassifier
from ledgerflow.workspace import Workspace

console = Console()


def read_parser_output(path: Path) -> object:
    if not path.exists():
        raise FileNotFoundError(f"Parser output not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def load_workspace_settings(workspace: Workspace) -> Settings:
    return load_settings(workspace.settings_path).with_env_overrides()


def classify_file(path: Path, settings: Settings) -> List[FinancialEventBase]:
    """Read a parser JSON file and classify its records."""
    classifier = EventClassifier(base_currency=settings.base_currency)
    return classifier.classify_payload(read_parser_output(path))


def fmt_amount(amt: Union[Decimal, float, None]) -> Text:
    if amt is None:
        return Text("")
    s = f"{amt:,.2f}"
    if amt < 0:
        return Text(s, style="bold red")
    elif amt > 0:
        return Text(s, style="bold green")
    return Text(s)
