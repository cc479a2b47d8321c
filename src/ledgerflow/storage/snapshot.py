"""
Read-side view of the ledger used while resolving references.

A LedgerSnapshot is loaded once per commit (or built by hand in specs) and
handed to the orchestrator. It replaces process-wide account/card/holding
caches: nothing here is refreshed behind the caller's back, and the only
mid-pipeline update is the orchestrator rebuilding the account map after
Phase 1.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from ledgerflow.model.entities import Account, CreditCard, Holding, UserDefaults
from ledgerflow.storage.store import LedgerStore

logger = logging.getLogger(__name__)

AccountMap = Dict[str, str]


def build_account_map(accounts: Iterable[Account]) -> AccountMap:
    """Map account display name to id.

    Built from scratch on every call; when two accounts share a name the last
    one listed wins.
    """
    return {account.name: account.id for account in accounts}


@dataclass
class LedgerSnapshot:
    accounts: List[Account] = field(default_factory=list)
    credit_cards: List[CreditCard] = field(default_factory=list)
    holdings: List[Holding] = field(default_factory=list)
    defaults: UserDefaults = field(default_factory=UserDefaults)

    @property
    def account_map(self) -> AccountMap:
        return build_account_map(self.accounts)

    def holdings_of(self, account_id: str) -> List[Holding]:
        return [h for h in self.holdings if h.account_id == account_id]


async def load_snapshot(store: LedgerStore) -> LedgerSnapshot:
    """Fetch accounts, cards, holdings and user defaults concurrently."""
    accounts, cards, holdings, defaults = await asyncio.gather(
        store.list_accounts(),
        store.list_credit_cards(),
        store.list_holdings(),
        store.get_user_defaults(),
    )
    logger.info(
        "Loaded snapshot: %d accounts, %d credit cards, %d holdings",
        len(accounts),
        len(cards),
        len(holdings),
    )
    return LedgerSnapshot(
        accounts=list(accounts),
        credit_cards=list(cards),
        holdings=list(holdings),
        defaults=defaults,
    )


__all__ = ["AccountMap", "LedgerSnapshot", "build_account_map", "load_snapshot"]
