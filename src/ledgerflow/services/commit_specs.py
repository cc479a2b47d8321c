"""
Builders turning typed events into store write specs.

Kept apart from the orchestrator so the field mapping can be checked without
running a commit.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Mapping, Optional

from ledgerflow.model.entities import (
    AssetSpec,
    BudgetSpec,
    CreditCard,
    CreditCardSpec,
    CreditCardTransactionSpec,
    HoldingTradeSpec,
    NewHoldingSpec,
    RecordSpec,
)
from ledgerflow.model.events import (
    AssetUpdateEvent,
    BudgetEvent,
    CreditCardUpdateEvent,
    HoldingUpdateEvent,
    TransactionDirection,
    TransactionEvent,
)


def asset_spec(event: AssetUpdateEvent, account_map: Mapping[str, str]) -> AssetSpec:
    terms = event.loan_terms
    source_account_id = None
    if terms is not None and terms.repayment_source_account:
        source_account_id = account_map.get(terms.repayment_source_account)
    return AssetSpec(
        name=event.asset_name,
        type=event.asset_type,
        balance=event.total_value,
        currency=event.currency,
        institution_name=event.institution_name,
        quantity=event.quantity,
        apy=event.apy,
        maturity_date=event.maturity_date,
        cost_basis=event.cost_basis,
        repayment_amount=event.repayment_amount,
        loan_term_months=terms.term_months if terms else None,
        interest_rate=terms.interest_rate if terms else None,
        monthly_payment=terms.monthly_payment if terms else None,
        repayment_day=terms.repayment_day if terms else None,
        auto_repayment=terms.auto_repayment if terms else None,
        source_account_id=source_account_id,
    )


def credit_card_spec(event: CreditCardUpdateEvent, account_map: Mapping[str, str]) -> CreditCardSpec:
    auto = event.auto_repayment
    source_id = None
    if auto is not None and auto.source_account:
        source_id = account_map.get(auto.source_account)
    return CreditCardSpec(
        name=event.name,
        institution_name=event.institution_name,
        card_identifier=event.card_identifier or "",
        credit_limit=event.credit_limit,
        current_balance=event.outstanding_balance,
        repayment_due_date=event.repayment_due_day,
        currency=event.currency,
        auto_repayment=auto.enabled if auto else None,
        repayment_source_account_id=source_id,
    )


def budget_spec(event: BudgetEvent, now: Callable[[], datetime] = datetime.now) -> BudgetSpec:
    return BudgetSpec(
        month=event.target_date or now().strftime("%Y-%m"),
        category=event.category or event.name or None,
        amount=float(event.target_amount),
        name=event.name or None,
        action=event.action.value,
        currency=event.currency,
        priority=event.priority,
        is_recurring=event.is_recurring,
    )


def new_holding_spec(event: HoldingUpdateEvent, account_id: str) -> NewHoldingSpec:
    return NewHoldingSpec(
        investment_id=account_id,
        name=event.name,
        type=event.holding_type,
        market=event.market,
        quantity=event.quantity,
        price=event.unit_price,
        ticker_code=event.ticker_code,
        fee=event.fee,
        date=event.date,
        note=event.note,
        currency=event.currency,
    )


def trade_spec(event: HoldingUpdateEvent) -> HoldingTradeSpec:
    return HoldingTradeSpec(
        quantity=event.quantity,
        price=event.unit_price,
        fee=event.fee,
        date=event.date,
        note=event.note,
    )


def record_spec(
    event: TransactionEvent, account_id: Optional[str], target_account_id: Optional[str] = None
) -> RecordSpec:
    return RecordSpec(
        amount=event.amount,
        type=event.direction.value,
        category=event.category,
        account_id=account_id,
        target_account_id=target_account_id,
        description=event.description or None,
        date=event.date,
        currency=event.currency,
    )


def card_transaction_spec(event: TransactionEvent, card: CreditCard) -> CreditCardTransactionSpec:
    # Anything other than spending on the card reduces what is owed.
    kind = "EXPENSE" if event.direction is TransactionDirection.expense else "PAYMENT"
    return CreditCardTransactionSpec(
        card_identifier=card.card_identifier,
        amount=float(event.amount),
        type=kind,
        category=event.category,
        description=event.description or None,
        date=event.date,
    )


__all__ = [
    "asset_spec",
    "budget_spec",
    "card_transaction_spec",
    "credit_card_spec",
    "new_holding_spec",
    "record_spec",
    "trade_spec",
]
