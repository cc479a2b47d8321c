"""
Financial event models produced by the classifier.

A single utterance ("paid 35 for lunch with my savings card, got salary 8000")
is turned by the external parser into several loosely typed records. The
classifier converts each one into exactly one of the variants below; from that
point on nothing in the pipeline looks at the raw field bag again.

All events inherit from the base FinancialEventBase and include:
- Automatic event_id generation (UUID) so reports can reference them
- A literal event_type discriminant
- JSON serialization/deserialization via Pydantic v2

FinancialEvent is the discriminated union over all variants.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field, field_serializer, field_validator

from ledgerflow.config import DEFAULT_CATEGORY, DEFAULT_CONFIDENCE
from ledgerflow.model.entities import AssetType, HoldingType, MarketType


class EventType(str, Enum):
    transaction = "TRANSACTION"
    asset_update = "ASSET_UPDATE"
    credit_card_update = "CREDIT_CARD_UPDATE"
    holding_update = "HOLDING_UPDATE"
    budget = "BUDGET"
    query_response = "QUERY_RESPONSE"
    need_more_info = "NEED_MORE_INFO"
    null_statement = "NULL_STATEMENT"


class TransactionDirection(str, Enum):
    expense = "EXPENSE"
    income = "INCOME"
    transfer = "TRANSFER"
    payment = "PAYMENT"


class HoldingAction(str, Enum):
    buy = "BUY"
    sell = "SELL"


class BudgetAction(str, Enum):
    create = "CREATE"
    update = "UPDATE"


class PickerType(str, Enum):
    income_account = "INCOME_ACCOUNT"
    expense_account = "EXPENSE_ACCOUNT"
    investment_account = "INVESTMENT_ACCOUNT"
    credit_card = "CREDIT_CARD"


def _parse_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class FinancialEventBase(BaseModel):
    """Base class for all event variants."""

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: str

    @property
    def label(self) -> str:
        """Short human-readable description used in logs and CLI tables."""
        return self.event_type


class TransactionEvent(FinancialEventBase):
    """A single income/expense/transfer/payment. Committed in Phase 2."""

    event_type: Literal["TRANSACTION"] = "TRANSACTION"

    amount: Decimal = Field(ge=0)  # magnitude; sign lives in direction
    direction: TransactionDirection = TransactionDirection.expense
    category: str = DEFAULT_CATEGORY
    account_name: Optional[str] = None
    target_account_name: Optional[str] = None
    card_identifier: Optional[str] = None
    description: str = ""
    date: datetime = Field(default_factory=datetime.now)
    currency: str = "CNY"
    confidence: float = Field(default=DEFAULT_CONFIDENCE, ge=0.0, le=1.0)
    is_fixed_income: bool = False
    income_type: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Decimal:
        return _parse_decimal(value)

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return str(value)

    @property
    def label(self) -> str:
        return f"{self.direction.value} {self.amount} {self.category}"


class LoanTerms(BaseModel):
    term_months: Optional[int] = None
    interest_rate: Optional[float] = None
    monthly_payment: Optional[float] = None
    repayment_day: Optional[int] = None
    auto_repayment: bool = False
    repayment_source_account: Optional[str] = None


class AssetUpdateEvent(FinancialEventBase):
    """Snapshot of an account/asset value. Creates an account in Phase 1."""

    event_type: Literal["ASSET_UPDATE"] = "ASSET_UPDATE"

    asset_type: AssetType = AssetType.other_asset
    asset_name: str
    total_value: Decimal
    currency: str = "CNY"
    institution_name: Optional[str] = None
    date: datetime = Field(default_factory=datetime.now)
    quantity: Optional[float] = None
    apy: Optional[float] = None
    maturity_date: Optional[str] = None
    cost_basis: Optional[float] = None
    repayment_amount: Optional[float] = None
    loan_terms: Optional[LoanTerms] = None

    @field_validator("total_value", mode="before")
    @classmethod
    def parse_total_value(cls, value: Any) -> Decimal:
        return _parse_decimal(value)

    @field_serializer("total_value")
    def serialize_total_value(self, value: Decimal) -> str:
        return str(value)

    @property
    def label(self) -> str:
        return f"{self.asset_type.value} {self.asset_name} = {self.total_value}"


class AutoRepayment(BaseModel):
    enabled: bool = False
    source_account: Optional[str] = None
    repayment_day: Optional[int] = None
    full_amount: bool = True


class CreditCardUpdateEvent(FinancialEventBase):
    """Create or update a credit card. Committed in Phase 1."""

    event_type: Literal["CREDIT_CARD_UPDATE"] = "CREDIT_CARD_UPDATE"

    name: str
    institution_name: str = ""
    outstanding_balance: Optional[float] = None
    credit_limit: Optional[float] = None
    repayment_due_day: Optional[str] = None
    card_identifier: Optional[str] = None
    currency: str = "CNY"
    auto_repayment: Optional[AutoRepayment] = None

    @property
    def label(self) -> str:
        ident = f" ({self.card_identifier})" if self.card_identifier else ""
        return f"credit card {self.name}{ident}"


class HoldingUpdateEvent(FinancialEventBase):
    """Buy or sell of a security/crypto position. Committed in Phase 1."""

    event_type: Literal["HOLDING_UPDATE"] = "HOLDING_UPDATE"

    name: str
    holding_type: HoldingType = HoldingType.stock
    action: HoldingAction
    quantity: float = Field(gt=0)
    unit_price: float = Field(ge=0)
    currency: str = "USD"
    market: MarketType = MarketType.us
    ticker_code: Optional[str] = None
    account_name: Optional[str] = None
    fee: Optional[float] = None
    note: Optional[str] = None
    date: datetime = Field(default_factory=datetime.now)

    @property
    def label(self) -> str:
        ticker = self.ticker_code or self.name
        return f"{self.action.value} {self.quantity:g} {ticker} @ {self.unit_price:g}"


class BudgetEvent(FinancialEventBase):
    """Create or update a budget target. Committed in Phase 1."""

    event_type: Literal["BUDGET"] = "BUDGET"

    action: BudgetAction = BudgetAction.create
    name: str = ""
    category: Optional[str] = None
    target_amount: Decimal
    currency: str = "CNY"
    target_date: Optional[str] = None  # YYYY-MM
    priority: Optional[str] = None
    is_recurring: bool = False

    @field_validator("target_amount", mode="before")
    @classmethod
    def parse_target_amount(cls, value: Any) -> Decimal:
        return _parse_decimal(value)

    @field_serializer("target_amount")
    def serialize_target_amount(self, value: Decimal) -> str:
        return str(value)

    @property
    def label(self) -> str:
        return f"budget {self.name or self.category or ''} {self.target_amount}".strip()


class QueryResponseEvent(FinancialEventBase):
    """Answer to a question ("how much did I spend?"). Never committed."""

    event_type: Literal["QUERY_RESPONSE"] = "QUERY_RESPONSE"

    query_type: Optional[str] = None
    message: str = ""


class NeedMoreInfoEvent(FinancialEventBase):
    """Follow-up question for the user. Never committed."""

    event_type: Literal["NEED_MORE_INFO"] = "NEED_MORE_INFO"

    original_intent: Optional[EventType] = None
    missing_fields: List[str] = Field(default_factory=list)
    question: str = ""
    picker_type: Optional[PickerType] = None
    partial_data: Dict[str, Any] = Field(default_factory=dict)


class NullStatementEvent(FinancialEventBase):
    """Unrecognized or malformed record. Never committed."""

    event_type: Literal["NULL_STATEMENT"] = "NULL_STATEMENT"

    reason: str = ""
    raw_event_type: Optional[str] = None


FinancialEvent = Annotated[
    Union[
        TransactionEvent,
        AssetUpdateEvent,
        CreditCardUpdateEvent,
        HoldingUpdateEvent,
        BudgetEvent,
        QueryResponseEvent,
        NeedMoreInfoEvent,
        NullStatementEvent,
    ],
    Field(discriminator="event_type"),
]

PHASE1_EVENT_TYPES = (AssetUpdateEvent, CreditCardUpdateEvent, BudgetEvent, HoldingUpdateEvent)
PHASE2_EVENT_TYPES = (TransactionEvent,)


def is_committable(event: FinancialEventBase) -> bool:
    """True for variants that result in a write to the store."""
    return isinstance(event, PHASE1_EVENT_TYPES + PHASE2_EVENT_TYPES)


__all__ = [
    "AssetUpdateEvent",
    "AutoRepayment",
    "BudgetAction",
    "BudgetEvent",
    "CreditCardUpdateEvent",
    "EventType",
    "FinancialEvent",
    "FinancialEventBase",
    "HoldingAction",
    "HoldingUpdateEvent",
    "LoanTerms",
    "NeedMoreInfoEvent",
    "NullStatementEvent",
    "PHASE1_EVENT_TYPES",
    "PHASE2_EVENT_TYPES",
    "PickerType",
    "QueryResponseEvent",
    "TransactionDirection",
    "TransactionEvent",
    "is_committable",
]
