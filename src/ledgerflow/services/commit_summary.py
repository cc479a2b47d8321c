"""
Commit Summary - what to tell the user after a commit.

CommitSummary counts committed events per variant and renders a short
confirmation. find_fixed_income spots salary-like income in a batch so the
caller can offer to set it up as recurring.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from ledgerflow.config import FIXED_INCOME_CATEGORIES
from ledgerflow.model.events import (
    AssetUpdateEvent,
    BudgetEvent,
    CreditCardUpdateEvent,
    FinancialEventBase,
    HoldingUpdateEvent,
    TransactionDirection,
    TransactionEvent,
)


@dataclass
class CommitSummary:
    """Per-variant counts of committed events."""

    transaction_count: int = 0
    asset_update_count: int = 0
    credit_card_count: int = 0
    holding_count: int = 0
    budget_count: int = 0

    @classmethod
    def from_events(cls, events: Iterable[FinancialEventBase]) -> "CommitSummary":
        summary = cls()
        for event in events:
            if isinstance(event, TransactionEvent):
                summary.transaction_count += 1
            elif isinstance(event, AssetUpdateEvent):
                summary.asset_update_count += 1
            elif isinstance(event, CreditCardUpdateEvent):
                summary.credit_card_count += 1
            elif isinstance(event, HoldingUpdateEvent):
                summary.holding_count += 1
            elif isinstance(event, BudgetEvent):
                summary.budget_count += 1
        return summary

    @property
    def total_count(self) -> int:
        return (
            self.transaction_count
            + self.asset_update_count
            + self.credit_card_count
            + self.holding_count
            + self.budget_count
        )

    @property
    def confirmation_message(self) -> str:
        """One-line confirmation; specific when a single kind was saved."""
        total = self.total_count
        if total == 0:
            return "Nothing was saved"
        if self.transaction_count == total:
            noun = "transaction" if total == 1 else "transactions"
            return f"Recorded {total} {noun}"
        if self.asset_update_count == total:
            return "Asset details updated"
        if self.credit_card_count == total:
            return "Credit card details updated"
        if self.holding_count == total:
            return "Holdings updated"
        if self.budget_count == total:
            return "Budget set"
        return f"Saved {total} records"


@dataclass(frozen=True)
class FixedIncomeHint:
    event: TransactionEvent
    account_id: Optional[str]


def is_fixed_income_category(category: str) -> bool:
    key = category.upper()
    if key.startswith("INCOME_"):
        key = key[len("INCOME_"):]
    return key in FIXED_INCOME_CATEGORIES


def find_fixed_income(
    events: Iterable[FinancialEventBase], account_map: Mapping[str, str]
) -> Optional[FixedIncomeHint]:
    """Return the first income transaction that looks like recurring income.

    An income counts when the parser flagged it as fixed, or when its category
    or income type is salary, housing fund, pension or rental.
    """
    for event in events:
        if not isinstance(event, TransactionEvent):
            continue
        if event.direction is not TransactionDirection.income:
            continue
        if (
            event.is_fixed_income
            or is_fixed_income_category(event.category)
            or (event.income_type and is_fixed_income_category(event.income_type))
        ):
            account_id = account_map.get(event.account_name) if event.account_name else None
            return FixedIncomeHint(event=event, account_id=account_id)
    return None


__all__ = ["CommitSummary", "FixedIncomeHint", "find_fixed_income", "is_fixed_income_category"]
