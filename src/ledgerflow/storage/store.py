"""
Remote ledger store interface.

The pipeline never talks HTTP directly; it depends on the LedgerStore protocol
below. ledgerflow.storage.remote_store.RemoteLedgerStore implements it against
the REST API, and specs substitute in-memory fakes.

Each write method corresponds to exactly one committed event. None of them
retry: a failure is reported once and left to the caller.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from ledgerflow.model.entities import (
    Account,
    AssetSpec,
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


class StoreError(Exception):
    """Base exception for remote store operations."""

    pass


class TransportFailure(StoreError):
    """Raised on connectivity problems or timeouts."""

    pass


class StoreRejection(StoreError):
    """Raised when the store answers with a structured error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class Unauthorized(StoreRejection):
    """Raised on HTTP 401; the session token is missing or expired."""

    pass


class MalformedResponse(StoreError):
    """Raised when a response body cannot be decoded."""

    pass


class LedgerStore(Protocol):
    async def create_asset(self, spec: AssetSpec) -> Account: ...

    async def create_or_update_credit_card(
        self, spec: CreditCardSpec, card_id: Optional[str] = None
    ) -> CreditCard: ...

    async def create_budget(self, spec: BudgetSpec) -> Dict[str, Any]: ...

    async def buy_new_holding(self, spec: NewHoldingSpec) -> Dict[str, Any]: ...

    async def buy(self, holding_id: str, spec: HoldingTradeSpec) -> Dict[str, Any]: ...

    async def sell(self, holding_id: str, spec: HoldingTradeSpec) -> Dict[str, Any]: ...

    async def create_transaction(self, spec: RecordSpec) -> Dict[str, Any]: ...

    async def create_credit_card_transaction(
        self, spec: CreditCardTransactionSpec
    ) -> Dict[str, Any]: ...

    async def list_accounts(self) -> List[Account]: ...

    async def list_credit_cards(self) -> List[CreditCard]: ...

    async def list_holdings(self) -> List[Holding]: ...

    async def get_user_defaults(self) -> UserDefaults: ...

    async def get_recommended_credit_card(self, institution_name: str) -> Optional[CreditCard]: ...


__all__ = [
    "LedgerStore",
    "MalformedResponse",
    "StoreError",
    "StoreRejection",
    "TransportFailure",
    "Unauthorized",
]
