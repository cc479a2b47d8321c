from __future__ import annotations

from ledgerflow.model.events import (
    AssetUpdateEvent,
    BudgetEvent,
    QueryResponseEvent,
    TransactionDirection,
    TransactionEvent,
)
from ledgerflow.services.commit_summary import (
    CommitSummary,
    find_fixed_income,
    is_fixed_income_category,
)


class DescribeCommitSummary:
    def it_should_count_committed_variants_and_ignore_the_rest(self):
        summary = CommitSummary.from_events(
            [
                TransactionEvent(amount=1),
                TransactionEvent(amount=2),
                BudgetEvent(target_amount=3),
                QueryResponseEvent(message="hi"),
            ]
        )

        assert summary.transaction_count == 2
        assert summary.budget_count == 1
        assert summary.total_count == 3

    def it_should_be_specific_for_a_single_kind(self):
        assert CommitSummary.from_events([TransactionEvent(amount=1)]).confirmation_message == "Recorded 1 transaction"
        assert (
            CommitSummary.from_events([AssetUpdateEvent(asset_name="Cash", total_value=1)]).confirmation_message
            == "Asset details updated"
        )

    def it_should_be_generic_for_mixed_batches(self):
        summary = CommitSummary.from_events([TransactionEvent(amount=1), BudgetEvent(target_amount=3)])

        assert summary.confirmation_message == "Saved 2 records"

    def it_should_say_when_nothing_was_saved(self):
        assert CommitSummary.from_events([]).confirmation_message == "Nothing was saved"


class DescribeFindFixedIncome:
    def it_should_pick_flagged_income_with_its_account(self):
        bonus = TransactionEvent(
            amount=8000,
            direction=TransactionDirection.income,
            category="BONUS",
            account_name="Payroll",
            is_fixed_income=True,
        )

        hint = find_fixed_income([TransactionEvent(amount=30), bonus], {"Payroll": "acc-payroll"})

        assert hint.event is bonus
        assert hint.account_id == "acc-payroll"

    def it_should_recognize_fixed_income_categories(self):
        salary = TransactionEvent(amount=8000, direction=TransactionDirection.income, category="INCOME_SALARY")

        hint = find_fixed_income([salary], {})

        assert hint.event is salary
        assert hint.account_id is None

    def it_should_ignore_expenses_in_income_categories(self):
        refund = TransactionEvent(amount=100, direction=TransactionDirection.expense, category="SALARY")

        assert find_fixed_income([refund], {}) is None

    def it_should_match_categories_case_insensitively(self):
        assert is_fixed_income_category("pension")
        assert is_fixed_income_category("INCOME_RENTAL")
        assert not is_fixed_income_category("GIFT")
