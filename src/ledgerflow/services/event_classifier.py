"""
Event Classifier - turns parser output into typed FinancialEvent variants.

The external parser returns records shaped as {"event_type": str, "data": {...}}
where data is an open bag of fields. Several field names are shared between
variants and mean different things depending on the discriminant: `amount` is
the money moved for a TRANSACTION, the account value for an ASSET_UPDATE, and
the credit limit for a CREDIT_CARD_UPDATE. This module is the only place that
knows about the bag shape; everything downstream works with typed events.

Records that cannot be classified are not errors. They come back as
NullStatementEvent (with a reason) and the phase planner drops them.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from ledgerflow.config import DEFAULT_BASE_CURRENCY, DEFAULT_CATEGORY, DEFAULT_CONFIDENCE
from ledgerflow.model.entities import AssetType, HoldingType, MarketType
from ledgerflow.model.events import (
    AssetUpdateEvent,
    AutoRepayment,
    BudgetAction,
    BudgetEvent,
    CreditCardUpdateEvent,
    EventType,
    FinancialEventBase,
    HoldingAction,
    HoldingUpdateEvent,
    LoanTerms,
    NeedMoreInfoEvent,
    NullStatementEvent,
    PickerType,
    QueryResponseEvent,
    TransactionDirection,
    TransactionEvent,
)

logger = logging.getLogger(__name__)


class MalformedRecord(ValueError):
    """A recognized record whose fields cannot be interpreted."""

    pass


_DIRECTION_ALIASES = {
    "EXPENSE": TransactionDirection.expense,
    "INCOME": TransactionDirection.income,
    "TRANSFER": TransactionDirection.transfer,
    "PAYMENT": TransactionDirection.payment,
    "REPAYMENT": TransactionDirection.payment,
}

_ASSET_TYPE_ALIASES = {
    "BANK_BALANCE": AssetType.bank,
    "STOCK": AssetType.investment,
    "PHYSICAL_ASSET": AssetType.real_property,
    "LIABILITY": AssetType.loan,
}

_HOLDING_ACTION_ALIASES = {
    "BUY": HoldingAction.buy,
    "INVEST_BUY": HoldingAction.buy,
    "SELL": HoldingAction.sell,
    "INVEST_SELL": HoldingAction.sell,
}


# --- field coercion helpers ---


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the first value under keys that is neither None nor blank."""
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip()


def _decimal(value: Any, field: str) -> Decimal:
    if isinstance(value, bool):
        raise MalformedRecord(f"{field} is not a number: {value!r}")
    try:
        if isinstance(value, str):
            number = Decimal(value.replace(",", "").strip())
        else:
            number = Decimal(str(value))
    except (ArithmeticError, ValueError) as e:
        raise MalformedRecord(f"{field} is not a number: {value!r}") from e
    if not number.is_finite():
        raise MalformedRecord(f"{field} is not a finite number: {value!r}")
    return number


def _float(value: Any, field: str) -> Optional[float]:
    if value is None:
        return None
    return float(_decimal(value, field))


def _int(value: Any, field: str) -> Optional[int]:
    if value is None:
        return None
    return int(_decimal(value, field))


def _confidence(value: Any) -> float:
    """Read a 0..1 confidence; percentages (95) are scaled down, the rest clamped."""
    if value is None:
        return DEFAULT_CONFIDENCE
    try:
        confidence = _float(value, "confidence")
    except MalformedRecord:
        logger.debug("Unusable confidence %r, using default", value)
        return DEFAULT_CONFIDENCE
    if confidence > 1.0:
        confidence = confidence / 100.0
    return min(max(confidence, 0.0), 1.0)


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "y")
    return bool(value)


def parse_date(value: Any) -> Optional[datetime]:
    """Parse YYYY-MM-DD or ISO-8601; return None when the value is unusable."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.strptime(text, "%Y-%m-%d")
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable date %r, using now", text)
        return None


def _month(value: Any) -> Optional[str]:
    """Normalize a budget target date to YYYY-MM."""
    text = _text(value)
    if not text:
        return None
    parsed = parse_date(text)
    if parsed is not None:
        return parsed.strftime("%Y-%m")
    return text[:7]


class EventClassifier:
    """Classify raw parser records into FinancialEvent variants.

    Args:
        base_currency: Currency used when a record carries none
        now: Clock used for missing dates (injectable for tests)
    """

    def __init__(
        self,
        base_currency: str = DEFAULT_BASE_CURRENCY,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.base_currency = base_currency
        self.now = now
        self._builders: Dict[str, Callable[[Mapping[str, Any]], FinancialEventBase]] = {
            EventType.transaction.value: self._transaction,
            EventType.asset_update.value: self._asset_update,
            EventType.credit_card_update.value: self._credit_card_update,
            EventType.holding_update.value: self._holding_update,
            EventType.budget.value: self._budget,
            EventType.query_response.value: self._query_response,
            EventType.need_more_info.value: self._need_more_info,
        }

    def classify_payload(self, payload: Any) -> List[FinancialEventBase]:
        """Classify a parser response: either {"events": [...]} or a bare list."""
        if isinstance(payload, Mapping):
            records = payload.get("events") or []
        elif isinstance(payload, list):
            records = payload
        else:
            raise ValueError(f"Unsupported parser payload: {type(payload).__name__}")
        return self.classify(records)

    def classify(self, records: Iterable[Any]) -> List[FinancialEventBase]:
        events = [self.classify_record(record) for record in records]
        skipped = sum(1 for e in events if isinstance(e, NullStatementEvent))
        logger.info("Classified %d records (%d skipped)", len(events), skipped)
        return events

    def classify_record(self, record: Any) -> FinancialEventBase:
        if not isinstance(record, Mapping):
            logger.warning("Skipping record that is not an object: %r", record)
            return NullStatementEvent(reason="malformed: record is not an object")

        raw_type = record.get("event_type")
        key = (_text(raw_type) or "").upper()
        data = record.get("data")
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            logger.warning("Skipping %s record with non-object data", key or "untyped")
            return NullStatementEvent(reason="malformed: data is not an object", raw_event_type=key)

        if key == EventType.null_statement.value:
            logger.info("Null statement, skipping")
            return NullStatementEvent(reason="null statement", raw_event_type=key)

        builder = self._builders.get(key)
        if builder is None:
            logger.info("Skipping unrecognized event type %r", raw_type)
            return NullStatementEvent(reason="unrecognized event type", raw_event_type=key or None)

        try:
            event = builder(data)
        except (MalformedRecord, ValidationError) as e:
            logger.warning("Skipping malformed %s record: %s", key, e)
            return NullStatementEvent(reason=f"malformed: {e}", raw_event_type=key)

        logger.debug("Classified %s: %s", key, event.label)
        return event

    # --- per-variant builders ---

    def _date(self, data: Mapping[str, Any]) -> datetime:
        return parse_date(_first(data, "date")) or self.now()

    def _transaction(self, data: Mapping[str, Any]) -> TransactionEvent:
        raw_amount = _first(data, "amount")
        if raw_amount is None:
            raise MalformedRecord("transaction has no amount")
        amount = _decimal(raw_amount, "amount")

        raw_type = _text(_first(data, "transaction_type", "type"))
        direction = _DIRECTION_ALIASES.get((raw_type or "").upper(), TransactionDirection.expense)

        return TransactionEvent(
            amount=abs(amount),
            direction=direction,
            category=_text(_first(data, "category")) or DEFAULT_CATEGORY,
            account_name=_text(_first(data, "source_account", "account_name")),
            target_account_name=_text(_first(data, "target_account")),
            card_identifier=_text(_first(data, "card_identifier")),
            description=_text(_first(data, "note", "description")) or "",
            date=self._date(data),
            currency=_text(_first(data, "currency")) or self.base_currency,
            confidence=_confidence(_first(data, "confidence")),
            is_fixed_income=_bool(_first(data, "is_fixed_income")),
            income_type=_text(_first(data, "income_type")),
        )

    def _asset_update(self, data: Mapping[str, Any]) -> AssetUpdateEvent:
        name = _text(_first(data, "asset_name", "source_account", "name"))
        if not name:
            raise MalformedRecord("asset update has no name")
        raw_value = _first(data, "total_value", "amount")
        if raw_value is None:
            raise MalformedRecord("asset update has no value")

        raw_type = (_text(_first(data, "asset_type", "category")) or "").upper()
        asset_type = _ASSET_TYPE_ALIASES.get(raw_type)
        if asset_type is None:
            try:
                asset_type = AssetType(raw_type)
            except ValueError:
                asset_type = AssetType.other_asset

        loan_terms = None
        if _first(data, "loan_term_months", "interest_rate", "monthly_payment", "repayment_day") is not None:
            loan_terms = LoanTerms(
                term_months=_int(_first(data, "loan_term_months"), "loan_term_months"),
                interest_rate=_float(_first(data, "interest_rate"), "interest_rate"),
                monthly_payment=_float(_first(data, "monthly_payment"), "monthly_payment"),
                repayment_day=_int(_first(data, "repayment_day"), "repayment_day"),
                auto_repayment=_bool(_first(data, "auto_repayment")),
                repayment_source_account=_text(_first(data, "repayment_source_account")),
            )

        return AssetUpdateEvent(
            asset_type=asset_type,
            asset_name=name,
            total_value=_decimal(raw_value, "total_value"),
            currency=_text(_first(data, "currency")) or self.base_currency,
            institution_name=_text(_first(data, "institution_name", "target_account")),
            date=self._date(data),
            quantity=_float(_first(data, "quantity"), "quantity"),
            apy=_float(_first(data, "apy"), "apy"),
            maturity_date=_text(_first(data, "maturity_date")),
            cost_basis=_float(_first(data, "cost_basis"), "cost_basis"),
            repayment_amount=_float(_first(data, "repayment_amount"), "repayment_amount"),
            loan_terms=loan_terms,
        )

    def _credit_card_update(self, data: Mapping[str, Any]) -> CreditCardUpdateEvent:
        name = _text(_first(data, "name", "source_account", "institution_name"))
        if not name:
            raise MalformedRecord("credit card update has no name")

        auto_repayment = None
        if _bool(_first(data, "auto_repayment")):
            full = _first(data, "full_repayment")
            auto_repayment = AutoRepayment(
                enabled=True,
                source_account=_text(_first(data, "repayment_source_account")),
                repayment_day=_int(_first(data, "repayment_day"), "repayment_day"),
                full_amount=True if full is None else _bool(full),
            )

        return CreditCardUpdateEvent(
            name=name,
            institution_name=_text(_first(data, "institution_name")) or "",
            outstanding_balance=_float(
                _first(data, "outstanding_balance", "current_balance"), "outstanding_balance"
            ),
            credit_limit=_float(_first(data, "credit_limit", "amount"), "credit_limit"),
            repayment_due_day=_text(_first(data, "repayment_due_date", "repayment_due_day")),
            card_identifier=_text(_first(data, "card_identifier")),
            currency=_text(_first(data, "currency")) or self.base_currency,
            auto_repayment=auto_repayment,
        )

    def _holding_update(self, data: Mapping[str, Any]) -> HoldingUpdateEvent:
        name = _text(_first(data, "name", "holding_name", "ticker_code"))
        if not name:
            raise MalformedRecord("holding update has no name")

        raw_action = (_text(_first(data, "holding_action", "action", "transaction_type")) or "").upper()
        action = _HOLDING_ACTION_ALIASES.get(raw_action)
        if action is None:
            raise MalformedRecord(f"unknown holding action {raw_action!r}")

        quantity = _first(data, "quantity")
        price = _first(data, "price", "unit_price")
        if quantity is None or price is None:
            raise MalformedRecord("holding update needs quantity and price")

        try:
            holding_type = HoldingType((_text(_first(data, "holding_type", "asset_type")) or "STOCK").upper())
        except ValueError:
            holding_type = HoldingType.other

        raw_market = (_text(_first(data, "market")) or "").upper()
        try:
            market = MarketType(raw_market)
        except ValueError:
            market = MarketType.crypto if holding_type is HoldingType.crypto else MarketType.us

        return HoldingUpdateEvent(
            name=name,
            holding_type=holding_type,
            action=action,
            quantity=_float(quantity, "quantity"),
            unit_price=_float(price, "price"),
            currency=_text(_first(data, "currency")) or market.currency_code,
            market=market,
            ticker_code=_text(_first(data, "ticker_code", "ticker")),
            account_name=_text(_first(data, "account_name", "source_account")),
            fee=_float(_first(data, "fee"), "fee"),
            note=_text(_first(data, "note")),
            date=self._date(data),
        )

    def _budget(self, data: Mapping[str, Any]) -> BudgetEvent:
        raw_amount = _first(data, "target_amount", "amount")
        if raw_amount is None:
            raise MalformedRecord("budget has no target amount")

        raw_action = (_text(_first(data, "budget_action", "action")) or "").upper()
        action = BudgetAction.update if raw_action.startswith("UPDATE") else BudgetAction.create

        return BudgetEvent(
            action=action,
            name=_text(_first(data, "budget_name", "name")) or "",
            category=_text(_first(data, "category")),
            target_amount=_decimal(raw_amount, "target_amount"),
            currency=_text(_first(data, "currency")) or self.base_currency,
            target_date=_month(_first(data, "target_date")),
            priority=_text(_first(data, "priority")),
            is_recurring=_bool(_first(data, "is_recurring")),
        )

    def _query_response(self, data: Mapping[str, Any]) -> QueryResponseEvent:
        return QueryResponseEvent(
            query_type=_text(_first(data, "query_type")),
            message=_text(_first(data, "message", "answer", "response", "note")) or "",
        )

    def _need_more_info(self, data: Mapping[str, Any]) -> NeedMoreInfoEvent:
        try:
            intent = EventType((_text(_first(data, "original_intent")) or "").upper())
        except ValueError:
            intent = None
        try:
            picker = PickerType((_text(_first(data, "picker_type")) or "").upper())
        except ValueError:
            picker = None

        missing = data.get("missing_fields") or []
        if not isinstance(missing, (list, tuple)):
            missing = [missing]
        partial = data.get("partial_data")

        return NeedMoreInfoEvent(
            original_intent=intent,
            missing_fields=[str(m) for m in missing],
            question=_text(_first(data, "question")) or "",
            picker_type=picker,
            partial_data=dict(partial) if isinstance(partial, Mapping) else {},
        )


__all__ = ["EventClassifier", "MalformedRecord", "parse_date"]
