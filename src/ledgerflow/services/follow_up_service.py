"""
Follow-up Service - detects events that need one more answer from the user.

The parser may already emit NEED_MORE_INFO records. On top of those, a
transaction that names neither an account nor a card, and a holding trade that
names no investment account, each produce a follow-up question asking the
user to pick one. Once the user answers, apply_account fills the account in on
every event that was missing it.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from ledgerflow.model.events import (
    EventType,
    FinancialEventBase,
    HoldingUpdateEvent,
    NeedMoreInfoEvent,
    PickerType,
    TransactionDirection,
    TransactionEvent,
)


def _missing_account(event: FinancialEventBase) -> bool:
    if isinstance(event, TransactionEvent):
        return not event.account_name and not event.card_identifier
    if isinstance(event, HoldingUpdateEvent):
        return not event.account_name
    return False


def follow_up_for(event: FinancialEventBase) -> Optional[NeedMoreInfoEvent]:
    """Return the account question for a single event, or None if complete."""
    if not _missing_account(event):
        return None

    if isinstance(event, HoldingUpdateEvent):
        return NeedMoreInfoEvent(
            original_intent=EventType.holding_update,
            missing_fields=["account"],
            question="Which investment account was this trade in?",
            picker_type=PickerType.investment_account,
            partial_data=event.model_dump(mode="json", exclude={"event_id"}),
        )

    income = event.direction is TransactionDirection.income
    return NeedMoreInfoEvent(
        original_intent=EventType.transaction,
        missing_fields=["source_account"],
        question="Which account received this income?" if income else "Which account paid for this?",
        picker_type=PickerType.income_account if income else PickerType.expense_account,
        partial_data=event.model_dump(mode="json", exclude={"event_id"}),
    )


def find_follow_ups(events: Iterable[FinancialEventBase]) -> List[NeedMoreInfoEvent]:
    """Collect follow-up questions for a batch.

    Parser-issued NEED_MORE_INFO events come first, in input order, followed by
    one question per event missing its account.
    """
    events = list(events)
    questions = [e for e in events if isinstance(e, NeedMoreInfoEvent)]
    for event in events:
        question = follow_up_for(event)
        if question is not None:
            questions.append(question)
    return questions


def apply_account(
    events: Iterable[FinancialEventBase], account_name: str
) -> List[FinancialEventBase]:
    """Return the batch with account_name set on every event that lacked one.

    Events that already had an account (or a card) are returned unchanged.
    """
    updated: List[FinancialEventBase] = []
    for event in events:
        if _missing_account(event):
            updated.append(event.model_copy(update={"account_name": account_name}))
        else:
            updated.append(event)
    return updated


__all__ = ["apply_account", "find_follow_ups", "follow_up_for"]
