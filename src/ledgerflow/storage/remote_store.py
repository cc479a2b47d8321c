"""REST implementation of the LedgerStore protocol."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

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
    to_wire,
)
from ledgerflow.model.settings import Settings
from ledgerflow.storage.store import (
    MalformedResponse,
    StoreRejection,
    TransportFailure,
    Unauthorized,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse_model(model: Type[M], data: Any, endpoint: str) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedResponse(f"Unexpected {model.__name__} payload from {endpoint}: {e}") from e


def _parse_list(model: Type[M], data: Any, endpoint: str) -> List[M]:
    if not isinstance(data, list):
        raise MalformedResponse(f"Expected a list from {endpoint}, got {type(data).__name__}")
    return [_parse_model(model, item, endpoint) for item in data]


def decode_response(resp: requests.Response, endpoint: str) -> Any:
    """Unwrap the {code, message, data} envelope or raise a StoreError.

    Bodies without an envelope are returned as-is.

    Raises:
        Unauthorized: HTTP 401
        StoreRejection: other 4xx/5xx, or an envelope with a non-zero code
        MalformedResponse: body is not JSON, or an envelope without data
    """
    status = resp.status_code
    if status == 401:
        logger.warning("Unauthorized access: %s", endpoint)
        raise Unauthorized("Session expired or missing, please log in again", status_code=401)

    try:
        body = resp.json()
    except ValueError as e:
        if status >= 400:
            raise StoreRejection(f"Server error [{status}] on {endpoint}", status_code=status) from e
        raise MalformedResponse(f"Response from {endpoint} is not JSON") from e

    if status >= 400:
        message = body.get("message") if isinstance(body, dict) else None
        logger.error("Server error [%s] on %s: %s", status, endpoint, message)
        raise StoreRejection(message or f"Server error [{status}] on {endpoint}", status_code=status)

    if not isinstance(body, dict) or "code" not in body:
        return body

    if body["code"] != 0:
        message = body.get("message") or f"Request to {endpoint} rejected"
        logger.error("Store rejected %s: %s", endpoint, message)
        raise StoreRejection(message, status_code=status)

    if "data" not in body:
        raise MalformedResponse(f"Response from {endpoint} has no data")
    return body["data"]


class RemoteLedgerStore:
    """LedgerStore backed by the ledger REST API.

    Requests go through a shared requests.Session. Blocking calls run in worker
    threads so that a phase can keep several of them in flight at once; the
    per-request timeout is the only timeout in the pipeline.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> RemoteLedgerStore:
        return cls(
            base_url=settings.api_base_url,
            token=settings.api_token,
            timeout=settings.timeout_seconds,
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> RemoteLedgerStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- transport ---

    def _request(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
            logger.debug("%s %s (token %s...)", method, url, self.token[:6])
        else:
            logger.debug("%s %s", method, url)

        try:
            resp = self.session.request(
                method,
                url,
                json=body,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise TransportFailure(f"{method} {endpoint} failed: {e}") from e

        return decode_response(resp, endpoint)

    async def _call(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        return await asyncio.to_thread(self._request, method, endpoint, body, params)

    # --- writes ---

    async def create_asset(self, spec: AssetSpec) -> Account:
        data = await self._call("POST", "/accounts", to_wire(spec))
        return _parse_model(Account, data, "/accounts")

    async def create_or_update_credit_card(
        self, spec: CreditCardSpec, card_id: Optional[str] = None
    ) -> CreditCard:
        if card_id:
            endpoint = f"/credit-cards/{card_id}"
            data = await self._call("PATCH", endpoint, to_wire(spec))
        else:
            endpoint = "/credit-cards"
            data = await self._call("POST", endpoint, to_wire(spec))
        return _parse_model(CreditCard, data, endpoint)

    async def create_budget(self, spec: BudgetSpec) -> Dict[str, Any]:
        return await self._call("POST", "/budgets", to_wire(spec))

    async def buy_new_holding(self, spec: NewHoldingSpec) -> Dict[str, Any]:
        return await self._call("POST", "/holdings/buy-new", to_wire(spec))

    async def buy(self, holding_id: str, spec: HoldingTradeSpec) -> Dict[str, Any]:
        body = {"holdingId": holding_id, "type": "BUY", **to_wire(spec)}
        return await self._call("POST", "/holdings/buy", body)

    async def sell(self, holding_id: str, spec: HoldingTradeSpec) -> Dict[str, Any]:
        body = {"holdingId": holding_id, "type": "SELL", **to_wire(spec)}
        return await self._call("POST", "/holdings/sell", body)

    async def create_transaction(self, spec: RecordSpec) -> Dict[str, Any]:
        return await self._call("POST", "/records", to_wire(spec))

    async def create_credit_card_transaction(
        self, spec: CreditCardTransactionSpec
    ) -> Dict[str, Any]:
        return await self._call("POST", "/credit-cards/transactions", to_wire(spec))

    # --- reads ---

    async def list_accounts(self) -> List[Account]:
        data = await self._call("GET", "/accounts")
        return _parse_list(Account, data, "/accounts")

    async def list_credit_cards(self) -> List[CreditCard]:
        data = await self._call("GET", "/credit-cards")
        return _parse_list(CreditCard, data, "/credit-cards")

    async def list_holdings(self) -> List[Holding]:
        data = await self._call("GET", "/holdings")
        return _parse_list(Holding, data, "/holdings")

    async def get_user_defaults(self) -> UserDefaults:
        data = await self._call("GET", "/auth/me")
        return _parse_model(UserDefaults, data, "/auth/me")

    async def get_recommended_credit_card(self, institution_name: str) -> Optional[CreditCard]:
        endpoint = "/auth/recommended-account"
        data = await self._call("GET", endpoint, params={"institutionName": institution_name})
        recommended = data.get("recommended") if isinstance(data, dict) else None
        if not recommended:
            return None
        return _parse_model(CreditCard, recommended, endpoint)


__all__ = ["RemoteLedgerStore", "decode_response"]
