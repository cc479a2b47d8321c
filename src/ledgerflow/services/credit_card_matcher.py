"""
Credit Card Matcher - binds a transaction to one of the user's credit cards.

Tiers:
1. Card identifier present: exact identifier match, or NO_MATCH flagged for
   manual selection. Never falls back silently.
2. Account name ends with a credit-card suffix ("招商银行信用卡", "Chase credit
   card"): ask the store for its best card at that institution. A hit is
   RECOMMENDED, which is a suggestion and not committable until the user
   accepts it.
3. Otherwise NO_MATCH and the transaction goes through plain account resolution.

A user's default expense card is looked up separately (default_card) because
it only applies once plain account resolution has found nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional

from ledgerflow.config import CREDIT_CARD_SUFFIXES
from ledgerflow.model.entities import CreditCard, DefaultAccountType, UserDefaults
from ledgerflow.model.events import TransactionDirection
from ledgerflow.storage.store import StoreError

logger = logging.getLogger(__name__)

Recommender = Callable[[str], Awaitable[Optional[CreditCard]]]


class MatchStatus(str, Enum):
    matched = "MATCHED"
    recommended = "RECOMMENDED"
    default = "DEFAULT"
    no_match = "NO_MATCH"


@dataclass(frozen=True)
class CardMatch:
    status: MatchStatus
    card: Optional[CreditCard] = None
    requires_manual_selection: bool = False
    institution_hint: Optional[str] = None

    @property
    def committable(self) -> bool:
        """Only exact and default matches may be written without confirmation."""
        return self.status in (MatchStatus.matched, MatchStatus.default)

    @property
    def default_used(self) -> bool:
        return self.status is MatchStatus.default


NO_MATCH = CardMatch(status=MatchStatus.no_match)


def institution_hint(account_name: Optional[str]) -> Optional[str]:
    """Strip a credit-card suffix from an account name.

    Returns None when the name has no such suffix or nothing is left after
    stripping it.
    """
    if not account_name:
        return None
    name = account_name.strip()
    lowered = name.lower()
    for suffix in CREDIT_CARD_SUFFIXES:
        if lowered.endswith(suffix.lower()):
            remainder = name[: len(name) - len(suffix)].strip()
            return remainder or None
    return None


def match_by_identifier(identifier: str, cards: Iterable[CreditCard]) -> Optional[CreditCard]:
    return next((card for card in cards if card.card_identifier == identifier), None)


class CreditCardMatcher:
    """Resolve transactions to credit cards.

    Args:
        recommender: Coroutine returning the store's best card for an
            institution name (usually LedgerStore.get_recommended_credit_card).
            Without one, the recommendation tier is skipped.
    """

    def __init__(self, recommender: Optional[Recommender] = None):
        self.recommender = recommender

    async def match(
        self,
        card_identifier: Optional[str],
        account_name: Optional[str],
        cards: Iterable[CreditCard],
    ) -> CardMatch:
        if card_identifier:
            card = match_by_identifier(card_identifier, cards)
            if card is not None:
                return CardMatch(status=MatchStatus.matched, card=card)
            logger.info("No credit card with identifier %s; manual selection needed", card_identifier)
            return CardMatch(status=MatchStatus.no_match, requires_manual_selection=True)

        hint = institution_hint(account_name)
        if hint and self.recommender is not None:
            try:
                recommended = await self.recommender(hint)
            except StoreError as e:
                logger.warning("Credit card recommendation for %r failed: %s", hint, e)
                recommended = None
            if recommended is not None:
                return CardMatch(
                    status=MatchStatus.recommended,
                    card=recommended,
                    institution_hint=hint,
                )
            return CardMatch(status=MatchStatus.no_match, institution_hint=hint)

        return NO_MATCH

    def default_card(
        self,
        direction: TransactionDirection,
        defaults: Optional[UserDefaults],
        cards: Iterable[CreditCard],
    ) -> CardMatch:
        """Return the user's default expense card, if one is configured and exists."""
        if direction is not TransactionDirection.expense or defaults is None:
            return NO_MATCH
        if defaults.expense_account_type is not DefaultAccountType.credit_card:
            return NO_MATCH
        card = next((c for c in cards if c.id == defaults.expense_account_id), None)
        if card is None:
            return NO_MATCH
        return CardMatch(status=MatchStatus.default, card=card)


__all__ = [
    "CardMatch",
    "CreditCardMatcher",
    "MatchStatus",
    "NO_MATCH",
    "Recommender",
    "institution_hint",
    "match_by_identifier",
]
