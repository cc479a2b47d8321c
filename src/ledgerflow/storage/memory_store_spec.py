"""
In-memory LedgerStore shared by the service and command specs.

Keeps accounts, cards and holdings in lists and records every call made to it,
in order. Created accounts show up in later list_accounts() calls, the way
the real ledger behaves.

fail_on keys are either a method name (every call to it fails) or a
(method, n) pair that fails only the nth call to that method, counted from 1.
Siblings in one gather start in submission order, so (method, 2) is the second
event of a phase.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import uuid4

import pytest

from ledgerflow.model.entities import (
    Account,
    AssetSpec,
    AssetType,
    BudgetSpec,
    CreditCard,
    CreditCardSpec,
    CreditCardTransactionSpec,
    Holding,
    HoldingTradeSpec,
    NewHoldingSpec,
    RecordSpec,
    UserDefaults,
)
from ledgerflow.storage.store import StoreError, StoreRejection

FailKey = Union[str, Tuple[str, int]]


class InMemoryLedgerStore:
    def __init__(
        self,
        accounts: Optional[List[Account]] = None,
        credit_cards: Optional[List[CreditCard]] = None,
        holdings: Optional[List[Holding]] = None,
        defaults: Optional[UserDefaults] = None,
        recommendations: Optional[Dict[str, CreditCard]] = None,
        fail_on: Optional[Dict[FailKey, StoreError]] = None,
    ):
        self.accounts = list(accounts or [])
        self.credit_cards = list(credit_cards or [])
        self.holdings = list(holdings or [])
        self.defaults = defaults or UserDefaults()
        self.recommendations = dict(recommendations or {})
        self.fail_on = dict(fail_on or {})
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def calls_to(self, method: str) -> List[Tuple[Any, ...]]:
        return [args for name, args in self.calls if name == method]

    @property
    def write_count(self) -> int:
        reads = {
            "list_accounts",
            "list_credit_cards",
            "list_holdings",
            "get_user_defaults",
            "get_recommended_credit_card",
        }
        return sum(1 for name, _ in self.calls if name not in reads)

    async def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        nth = len(self.calls_to(method))
        # Let sibling calls in the same gather get scheduled before this one settles.
        await asyncio.sleep(0)
        error = self.fail_on.get((method, nth)) or self.fail_on.get(method)
        if error is not None:
            raise error

    # --- writes ---

    async def create_asset(self, spec: AssetSpec) -> Account:
        await self._record("create_asset", spec)
        account = Account(
            id=f"acc-{uuid4().hex[:8]}",
            name=spec.name,
            type=spec.type,
            balance=spec.balance,
            currency=spec.currency,
        )
        self.accounts.append(account)
        return account

    async def create_or_update_credit_card(
        self, spec: CreditCardSpec, card_id: Optional[str] = None
    ) -> CreditCard:
        await self._record("create_or_update_credit_card", spec, card_id)
        card = CreditCard(
            id=card_id or f"cc-{uuid4().hex[:8]}",
            name=spec.name,
            institution_name=spec.institution_name,
            card_identifier=spec.card_identifier,
            credit_limit=spec.credit_limit or 0.0,
            current_balance=spec.current_balance or 0.0,
            currency=spec.currency,
        )
        self.credit_cards = [c for c in self.credit_cards if c.id != card.id] + [card]
        return card

    async def create_budget(self, spec: BudgetSpec) -> Dict[str, Any]:
        await self._record("create_budget", spec)
        return {"id": f"budget-{uuid4().hex[:8]}"}

    async def buy_new_holding(self, spec: NewHoldingSpec) -> Dict[str, Any]:
        await self._record("buy_new_holding", spec)
        return {"id": f"h-{uuid4().hex[:8]}"}

    async def buy(self, holding_id: str, spec: HoldingTradeSpec) -> Dict[str, Any]:
        await self._record("buy", holding_id, spec)
        return {"holdingId": holding_id}

    async def sell(self, holding_id: str, spec: HoldingTradeSpec) -> Dict[str, Any]:
        await self._record("sell", holding_id, spec)
        return {"holdingId": holding_id}

    async def create_transaction(self, spec: RecordSpec) -> Dict[str, Any]:
        await self._record("create_transaction", spec)
        return {"id": f"rec-{uuid4().hex[:8]}"}

    async def create_credit_card_transaction(
        self, spec: CreditCardTransactionSpec
    ) -> Dict[str, Any]:
        await self._record("create_credit_card_transaction", spec)
        return {"id": f"cct-{uuid4().hex[:8]}"}

    # --- reads ---

    async def list_accounts(self) -> List[Account]:
        await self._record("list_accounts")
        return list(self.accounts)

    async def list_credit_cards(self) -> List[CreditCard]:
        await self._record("list_credit_cards")
        return list(self.credit_cards)

    async def list_holdings(self) -> List[Holding]:
        await self._record("list_holdings")
        return list(self.holdings)

    async def get_user_defaults(self) -> UserDefaults:
        await self._record("get_user_defaults")
        return self.defaults

    async def get_recommended_credit_card(self, institution_name: str) -> Optional[CreditCard]:
        await self._record("get_recommended_credit_card", institution_name)
        return self.recommendations.get(institution_name)


class DescribeInMemoryLedgerStore:
    @pytest.mark.asyncio
    async def it_should_fail_only_the_targeted_call(self):
        store = InMemoryLedgerStore(fail_on={("create_asset", 2): StoreRejection("duplicate account")})
        specs = [
            AssetSpec(name=name, type=AssetType.cash, balance=Decimal("1"), currency="CNY")
            for name in ("A", "B", "C")
        ]

        results = await asyncio.gather(*(store.create_asset(s) for s in specs), return_exceptions=True)

        assert isinstance(results[1], StoreRejection)
        assert [a.name for a in store.accounts] == ["A", "C"]

    @pytest.mark.asyncio
    async def it_should_make_created_accounts_listable(self):
        store = InMemoryLedgerStore()

        await store.create_asset(
            AssetSpec(name="Wallet", type=AssetType.cash, balance=Decimal("0"), currency="CNY")
        )

        assert [a.name for a in await store.list_accounts()] == ["Wallet"]
        assert store.write_count == 1
