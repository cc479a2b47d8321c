"""
Holding Reconciler - matches a buy/sell event to an existing holding.

Matching order within the target account:
1. Ticker code, case-insensitive equality
2. Name, case-insensitive substring in either direction

A buy with no match creates a new holding. A sell with no match raises
NoHoldingToSell before anything is sent to the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from ledgerflow.model.entities import Holding
from ledgerflow.model.events import HoldingAction, HoldingUpdateEvent


class ReconciliationError(Exception):
    """Base exception for holding events that cannot be committed as given."""

    pass


class NoHoldingToSell(ReconciliationError):
    """Raised when a sell names a position the account does not hold."""

    pass


class HoldingAccountUnresolved(ReconciliationError):
    """Raised when a holding trade names no known investment account."""

    pass


@dataclass(frozen=True)
class ExistingHolding:
    holding: Holding


@dataclass(frozen=True)
class CreateNew:
    account_id: str


Reconciliation = Union[ExistingHolding, CreateNew]


def _names_overlap(a: str, b: str) -> bool:
    a, b = a.lower(), b.lower()
    return a in b or b in a


def find_holding(event: HoldingUpdateEvent, holdings: Iterable[Holding]) -> Optional[Holding]:
    candidates = list(holdings)

    if event.ticker_code:
        ticker = event.ticker_code.lower()
        for holding in candidates:
            if holding.ticker_code and holding.ticker_code.lower() == ticker:
                return holding

    if event.name:
        for holding in candidates:
            names = [holding.name] + ([holding.display_name] if holding.display_name else [])
            if any(n and _names_overlap(event.name, n) for n in names):
                return holding

    return None


def reconcile(
    event: HoldingUpdateEvent, account_id: str, holdings_of_account: Iterable[Holding]
) -> Reconciliation:
    """Decide whether a trade targets an existing holding or a new one.

    Holdings belonging to other accounts are ignored even if passed in.

    Raises:
        NoHoldingToSell: sell with no matching holding in the account
    """
    own = [h for h in holdings_of_account if h.account_id == account_id]
    holding = find_holding(event, own)

    if holding is not None:
        return ExistingHolding(holding=holding)
    if event.action is HoldingAction.buy:
        return CreateNew(account_id=account_id)
    raise NoHoldingToSell(
        f"No holding matching {event.ticker_code or event.name!r} in account {account_id} to sell"
    )


__all__ = [
    "CreateNew",
    "ExistingHolding",
    "HoldingAccountUnresolved",
    "NoHoldingToSell",
    "Reconciliation",
    "ReconciliationError",
    "find_holding",
    "reconcile",
]
