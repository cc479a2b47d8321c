from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import TypeAdapter, ValidationError

from ledgerflow.model.events import (
    BudgetEvent,
    FinancialEvent,
    HoldingAction,
    HoldingUpdateEvent,
    NeedMoreInfoEvent,
    NullStatementEvent,
    QueryResponseEvent,
    TransactionDirection,
    TransactionEvent,
    is_committable,
)

_adapter = TypeAdapter(FinancialEvent)


class DescribeTransactionEvent:
    def it_should_parse_amount_as_decimal(self):
        event = TransactionEvent(amount="35.10")

        assert event.amount == Decimal("35.10")
        assert event.direction == TransactionDirection.expense
        assert event.category == "OTHER"

    def it_should_reject_negative_amounts(self):
        with pytest.raises(ValidationError):
            TransactionEvent(amount=-1)

    def it_should_serialize_amount_as_string(self):
        event = TransactionEvent(amount=Decimal("8000.00"), direction=TransactionDirection.income)

        data = event.model_dump(mode="json")

        assert data["amount"] == "8000.00"
        assert data["event_type"] == "TRANSACTION"

    def it_should_generate_distinct_event_ids(self):
        assert TransactionEvent(amount=1).event_id != TransactionEvent(amount=1).event_id


class DescribeHoldingUpdateEvent:
    def it_should_require_positive_quantity(self):
        with pytest.raises(ValidationError):
            HoldingUpdateEvent(name="AAPL", action=HoldingAction.buy, quantity=0, unit_price=100)

    def it_should_label_with_ticker(self):
        event = HoldingUpdateEvent(
            name="Apple", ticker_code="AAPL", action=HoldingAction.sell, quantity=5, unit_price=180.5
        )

        assert event.label == "SELL 5 AAPL @ 180.5"


class DescribeFinancialEventUnion:
    def it_should_select_variant_by_event_type(self):
        event = _adapter.validate_python({"event_type": "BUDGET", "target_amount": "2000", "name": "Food"})

        assert isinstance(event, BudgetEvent)
        assert event.target_amount == Decimal("2000")

    def it_should_round_trip_through_json(self):
        original = TransactionEvent(amount=Decimal("12.5"), category="FOOD", account_name="Wallet")

        restored = _adapter.validate_json(original.model_dump_json())

        assert isinstance(restored, TransactionEvent)
        assert restored == original

    def it_should_reject_unknown_event_type(self):
        with pytest.raises(ValidationError):
            _adapter.validate_python({"event_type": "MYSTERY"})


class DescribeIsCommittable:
    def it_should_be_true_for_transactions_and_entity_updates(self):
        assert is_committable(TransactionEvent(amount=1))
        assert is_committable(BudgetEvent(target_amount=1))

    def it_should_be_false_for_informational_variants(self):
        assert not is_committable(QueryResponseEvent(message="You spent 300"))
        assert not is_committable(NeedMoreInfoEvent(question="Which account?"))
        assert not is_committable(NullStatementEvent(reason="noise"))
