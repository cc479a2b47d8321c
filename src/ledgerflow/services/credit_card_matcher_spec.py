from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from ledgerflow.model.entities import CreditCard, DefaultAccountType, UserDefaults
from ledgerflow.model.events import TransactionDirection
from ledgerflow.services.credit_card_matcher import (
    CreditCardMatcher,
    MatchStatus,
    institution_hint,
)
from ledgerflow.storage.store import TransportFailure

CMB_CARD = CreditCard(id="cc-1", name="CMB Visa", institution_name="招商银行", card_identifier="6225")
CHASE_CARD = CreditCard(id="cc-2", name="Sapphire", institution_name="Chase", card_identifier="4111")
CARDS = [CMB_CARD, CHASE_CARD]


class DescribeInstitutionHint:
    def it_should_strip_the_chinese_suffix(self):
        assert institution_hint("招商银行信用卡") == "招商银行"

    def it_should_strip_the_english_suffix_case_insensitively(self):
        assert institution_hint("Chase Credit Card") == "Chase"

    def it_should_return_none_without_a_suffix(self):
        assert institution_hint("Chase Checking") is None
        assert institution_hint("信用卡") is None
        assert institution_hint(None) is None


class DescribeMatch:
    @pytest.mark.asyncio
    async def it_should_match_by_identifier(self):
        matcher = CreditCardMatcher()

        match = await matcher.match("4111", None, CARDS)

        assert match.status == MatchStatus.matched
        assert match.card == CHASE_CARD
        assert match.committable

    @pytest.mark.asyncio
    async def it_should_require_manual_selection_for_unknown_identifier(self):
        recommender = AsyncMock(return_value=CMB_CARD)
        matcher = CreditCardMatcher(recommender=recommender)

        match = await matcher.match("9999", "招商银行信用卡", CARDS)

        assert match.status == MatchStatus.no_match
        assert match.requires_manual_selection
        recommender.assert_not_awaited()

    @pytest.mark.asyncio
    async def it_should_recommend_by_institution_without_committing(self):
        recommender = AsyncMock(return_value=CMB_CARD)
        matcher = CreditCardMatcher(recommender=recommender)

        match = await matcher.match(None, "招商银行信用卡", CARDS)

        assert match.status == MatchStatus.recommended
        assert match.card == CMB_CARD
        assert match.institution_hint == "招商银行"
        assert not match.committable
        recommender.assert_awaited_once_with("招商银行")

    @pytest.mark.asyncio
    async def it_should_treat_recommender_errors_as_no_recommendation(self):
        recommender = AsyncMock(side_effect=TransportFailure("timeout"))
        matcher = CreditCardMatcher(recommender=recommender)

        match = await matcher.match(None, "Chase credit card", CARDS)

        assert match.status == MatchStatus.no_match
        assert not match.requires_manual_selection

    @pytest.mark.asyncio
    async def it_should_not_match_plain_account_names(self):
        recommender = AsyncMock()
        matcher = CreditCardMatcher(recommender=recommender)

        match = await matcher.match(None, "Wallet", CARDS)

        assert match.status == MatchStatus.no_match
        recommender.assert_not_awaited()


class DescribeDefaultCard:
    def it_should_return_the_default_expense_card(self):
        defaults = UserDefaults(expense_account_id="cc-2", expense_account_type=DefaultAccountType.credit_card)

        match = CreditCardMatcher().default_card(TransactionDirection.expense, defaults, CARDS)

        assert match.status == MatchStatus.default
        assert match.card == CHASE_CARD
        assert match.default_used

    def it_should_not_apply_to_income(self):
        defaults = UserDefaults(expense_account_id="cc-2", expense_account_type=DefaultAccountType.credit_card)

        match = CreditCardMatcher().default_card(TransactionDirection.income, defaults, CARDS)

        assert match.status == MatchStatus.no_match

    def it_should_ignore_defaults_pointing_at_missing_cards(self):
        defaults = UserDefaults(expense_account_id="cc-gone", expense_account_type=DefaultAccountType.credit_card)

        match = CreditCardMatcher().default_card(TransactionDirection.expense, defaults, CARDS)

        assert match.status == MatchStatus.no_match
