from __future__ import annotations

from ledgerflow.model.events import (
    BudgetEvent,
    EventType,
    HoldingAction,
    HoldingUpdateEvent,
    NeedMoreInfoEvent,
    PickerType,
    TransactionDirection,
    TransactionEvent,
)
from ledgerflow.services.follow_up_service import apply_account, find_follow_ups, follow_up_for


class DescribeFollowUpFor:
    def it_should_ask_where_income_landed(self):
        salary = TransactionEvent(amount=8000, direction=TransactionDirection.income)

        question = follow_up_for(salary)

        assert question.picker_type == PickerType.income_account
        assert question.missing_fields == ["source_account"]
        assert question.original_intent == EventType.transaction
        assert question.partial_data["amount"] == "8000"

    def it_should_ask_which_account_paid(self):
        question = follow_up_for(TransactionEvent(amount=35))

        assert question.picker_type == PickerType.expense_account
        assert question.question == "Which account paid for this?"

    def it_should_not_ask_when_a_card_is_named(self):
        assert follow_up_for(TransactionEvent(amount=35, card_identifier="6225")) is None

    def it_should_ask_for_the_investment_account_of_a_trade(self):
        trade = HoldingUpdateEvent(name="AAPL", action=HoldingAction.buy, quantity=1, unit_price=180)

        question = follow_up_for(trade)

        assert question.picker_type == PickerType.investment_account
        assert question.missing_fields == ["account"]

    def it_should_ignore_other_variants(self):
        assert follow_up_for(BudgetEvent(target_amount=100)) is None


class DescribeFindFollowUps:
    def it_should_list_parser_questions_first(self):
        parser_question = NeedMoreInfoEvent(question="Which month?")
        missing = TransactionEvent(amount=12)
        complete = TransactionEvent(amount=12, account_name="Wallet")

        questions = find_follow_ups([missing, parser_question, complete])

        assert questions[0] is parser_question
        assert len(questions) == 2
        assert questions[1].picker_type == PickerType.expense_account


class DescribeApplyAccount:
    def it_should_fill_only_events_missing_an_account(self):
        missing = TransactionEvent(amount=12)
        complete = TransactionEvent(amount=5, account_name="Cash")

        updated = apply_account([missing, complete], "Wallet")

        assert updated[0].account_name == "Wallet"
        assert updated[0].event_id == missing.event_id
        assert updated[1] is complete
        assert missing.account_name is None
