from __future__ import annotations

from decimal import Decimal
from unittest.mock import Mock

import pytest
import requests

from ledgerflow.model.entities import AssetSpec, AssetType, CreditCardSpec, HoldingTradeSpec
from ledgerflow.storage.remote_store import RemoteLedgerStore, decode_response
from ledgerflow.storage.store import (
    MalformedResponse,
    StoreRejection,
    TransportFailure,
    Unauthorized,
)


def _response(status: int = 200, body=None, json_error: bool = False) -> Mock:
    resp = Mock(spec=requests.Response)
    resp.status_code = status
    if json_error:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = body
    return resp


def _store(*responses: Mock) -> tuple[RemoteLedgerStore, Mock]:
    session = Mock(spec=requests.Session)
    session.request.side_effect = list(responses)
    return RemoteLedgerStore("https://ledger.example.com/api/", token="tok-123456", session=session), session


class DescribeDecodeResponse:
    def it_should_unwrap_envelope_data(self):
        resp = _response(body={"code": 0, "message": "ok", "data": {"id": "a1"}})

        assert decode_response(resp, "/accounts") == {"id": "a1"}

    def it_should_return_bodies_without_envelope_as_is(self):
        resp = _response(body=[{"id": "a1"}])

        assert decode_response(resp, "/accounts") == [{"id": "a1"}]

    def it_should_raise_unauthorized_on_401(self):
        with pytest.raises(Unauthorized) as exc:
            decode_response(_response(status=401, json_error=True), "/auth/me")

        assert exc.value.status_code == 401

    def it_should_raise_rejection_with_server_message(self):
        resp = _response(status=422, body={"code": 1, "message": "balance required"})

        with pytest.raises(StoreRejection) as exc:
            decode_response(resp, "/accounts")

        assert exc.value.message == "balance required"
        assert exc.value.status_code == 422

    def it_should_raise_rejection_on_non_zero_code(self):
        resp = _response(body={"code": 40001, "message": "duplicate card"})

        with pytest.raises(StoreRejection, match="duplicate card"):
            decode_response(resp, "/credit-cards")

    def it_should_raise_malformed_on_envelope_without_data(self):
        with pytest.raises(MalformedResponse):
            decode_response(_response(body={"code": 0, "message": "ok"}), "/records")

    def it_should_raise_malformed_on_non_json_success(self):
        with pytest.raises(MalformedResponse):
            decode_response(_response(json_error=True), "/records")

    def it_should_raise_rejection_on_non_json_error(self):
        with pytest.raises(StoreRejection):
            decode_response(_response(status=502, json_error=True), "/records")


class DescribeRemoteLedgerStore:
    @pytest.mark.asyncio
    async def it_should_post_asset_with_bearer_token(self):
        store, session = _store(
            _response(body={"code": 0, "data": {"id": "a9", "name": "Savings", "type": "SAVINGS", "balance": "500"}})
        )
        spec = AssetSpec(name="Savings", type=AssetType.savings, balance=Decimal("500"), currency="CNY")

        account = await store.create_asset(spec)

        assert account.id == "a9"
        args, kwargs = session.request.call_args
        assert args == ("POST", "https://ledger.example.com/api/accounts")
        assert kwargs["json"]["balance"] == "500"
        assert kwargs["headers"]["Authorization"] == "Bearer tok-123456"
        assert kwargs["timeout"] == 30.0

    @pytest.mark.asyncio
    async def it_should_patch_existing_credit_card(self):
        store, session = _store(_response(body={"code": 0, "data": {"id": "cc-1", "name": "Visa"}}))

        card = await store.create_or_update_credit_card(CreditCardSpec(name="Visa"), "cc-1")

        assert card.id == "cc-1"
        args, _ = session.request.call_args
        assert args == ("PATCH", "https://ledger.example.com/api/credit-cards/cc-1")

    @pytest.mark.asyncio
    async def it_should_send_holding_id_and_side_on_sell(self):
        store, session = _store(_response(body={"code": 0, "data": {}}))

        await store.sell("h-7", HoldingTradeSpec(quantity=2, price=10))

        args, kwargs = session.request.call_args
        assert args[1].endswith("/holdings/sell")
        assert kwargs["json"]["holdingId"] == "h-7"
        assert kwargs["json"]["type"] == "SELL"

    @pytest.mark.asyncio
    async def it_should_wrap_connection_errors(self):
        session = Mock(spec=requests.Session)
        session.request.side_effect = requests.ConnectionError("refused")
        store = RemoteLedgerStore("http://localhost", session=session)

        with pytest.raises(TransportFailure):
            await store.list_accounts()

    @pytest.mark.asyncio
    async def it_should_reject_non_list_account_payload(self):
        store, _ = _store(_response(body={"code": 0, "data": {"id": "a1"}}))

        with pytest.raises(MalformedResponse):
            await store.list_accounts()

    @pytest.mark.asyncio
    async def it_should_return_none_without_recommendation(self):
        store, session = _store(_response(body={"code": 0, "data": {"recommended": None}}))

        card = await store.get_recommended_credit_card("Chase")

        assert card is None
        _, kwargs = session.request.call_args
        assert kwargs["params"] == {"institutionName": "Chase"}

    @pytest.mark.asyncio
    async def it_should_parse_recommended_card(self):
        store, _ = _store(
            _response(body={"code": 0, "data": {"recommended": {"id": "cc-2", "cardIdentifier": "8888"}}})
        )

        card = await store.get_recommended_credit_card("CMB")

        assert card.card_identifier == "8888"
