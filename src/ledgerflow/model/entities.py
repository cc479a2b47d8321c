from __future__ import annotations

"""
Remote store entities and write specs.

Scope
- Pure Pydantic v2 models; no I/O.
- Entities (Account, CreditCard, Holding, UserDefaults) mirror what the remote
  ledger returns. They are read-through references: balances shown here are
  whatever the store said at fetch time and are never updated locally.
- Specs (AssetSpec, RecordSpec, ...) are the request bodies sent by
  ledgerflow.storage.remote_store. They serialize with camelCase aliases to
  match the REST contract.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


# ------------------------------
# Enumerations shared with events
# ------------------------------


class AssetType(str, Enum):
    bank = "BANK"
    investment = "INVESTMENT"
    cash = "CASH"
    credit_card = "CREDIT_CARD"
    digital_wallet = "DIGITAL_WALLET"
    loan = "LOAN"
    mortgage = "MORTGAGE"
    savings = "SAVINGS"
    retirement = "RETIREMENT"
    crypto = "CRYPTO"
    real_property = "PROPERTY"
    vehicle = "VEHICLE"
    other_asset = "OTHER_ASSET"
    other_liability = "OTHER_LIABILITY"

    @property
    def is_liability(self) -> bool:
        return self in (
            AssetType.credit_card,
            AssetType.loan,
            AssetType.mortgage,
            AssetType.other_liability,
        )


class HoldingType(str, Enum):
    stock = "STOCK"
    etf = "ETF"
    fund = "FUND"
    bond = "BOND"
    crypto = "CRYPTO"
    option = "OPTION"
    other = "OTHER"


class MarketType(str, Enum):
    us = "US"
    hk = "HK"
    cn = "CN"
    crypto = "CRYPTO"
    global_ = "GLOBAL"

    @property
    def currency_code(self) -> str:
        if self is MarketType.hk:
            return "HKD"
        if self is MarketType.cn:
            return "CNY"
        return "USD"


class DefaultAccountType(str, Enum):
    account = "ACCOUNT"
    credit_card = "CREDIT_CARD"


class _CamelModel(BaseModel):
    """Base for models exchanged with the REST store (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


# ------------------------------
# Entities
# ------------------------------


class Account(_CamelModel):
    """A plain account (bank, wallet, loan, ...) as listed by GET /accounts."""

    id: str
    name: str
    type: AssetType = AssetType.bank
    balance: Decimal = Decimal("0")
    currency: str = "CNY"

    @field_validator("balance", mode="before")
    @classmethod
    def parse_balance(cls, value: Any) -> Decimal:
        return _to_decimal(value)


class CreditCard(_CamelModel):
    id: str
    name: str = ""
    institution_name: str = Field(default="", alias="institutionName")
    card_identifier: str = Field(default="", alias="cardIdentifier")
    credit_limit: float = Field(default=0.0, alias="creditLimit")
    current_balance: float = Field(default=0.0, alias="currentBalance")
    repayment_due_date: Optional[str] = Field(default=None, alias="repaymentDueDate")
    currency: str = "CNY"

    @property
    def display_name(self) -> str:
        base = self.name or self.institution_name
        if self.card_identifier:
            return f"{base} ({self.card_identifier})"
        return base


class Holding(_CamelModel):
    id: str
    account_id: str = Field(alias="accountId")
    name: str
    display_name: Optional[str] = Field(default=None, alias="displayName")
    type: HoldingType = HoldingType.other
    market: MarketType = MarketType.global_
    ticker_code: Optional[str] = Field(default=None, alias="tickerCode")
    quantity: float = 0.0
    avg_cost_price: float = Field(default=0.0, alias="avgCostPrice")
    currency: str = "USD"


class UserDefaults(_CamelModel):
    """Per-user fallback accounts (from GET /auth/me).

    Income defaults may only point at plain accounts; expense defaults may point
    at a plain account or a credit card.
    """

    expense_account_id: Optional[str] = Field(default=None, alias="defaultExpenseAccountId")
    expense_account_type: Optional[DefaultAccountType] = Field(
        default=None, alias="defaultExpenseAccountType"
    )
    income_account_id: Optional[str] = Field(default=None, alias="defaultIncomeAccountId")
    income_account_type: Optional[DefaultAccountType] = Field(
        default=None, alias="defaultIncomeAccountType"
    )


# ------------------------------
# Write specs (request bodies)
# ------------------------------


class AssetSpec(_CamelModel):
    name: str
    type: AssetType
    balance: Decimal
    currency: str
    institution_name: Optional[str] = Field(default=None, alias="institutionName")
    quantity: Optional[float] = None
    apy: Optional[float] = None
    maturity_date: Optional[str] = Field(default=None, alias="maturityDate")
    cost_basis: Optional[float] = Field(default=None, alias="costBasis")
    repayment_amount: Optional[float] = Field(default=None, alias="repaymentAmount")
    loan_term_months: Optional[int] = Field(default=None, alias="loanTermMonths")
    interest_rate: Optional[float] = Field(default=None, alias="interestRate")
    monthly_payment: Optional[float] = Field(default=None, alias="monthlyPayment")
    repayment_day: Optional[int] = Field(default=None, alias="repaymentDay")
    auto_repayment: Optional[bool] = Field(default=None, alias="autoRepayment")
    source_account_id: Optional[str] = Field(default=None, alias="sourceAccountId")

    @field_serializer("balance")
    def serialize_balance(self, value: Decimal) -> str:
        return str(value)


class CreditCardSpec(_CamelModel):
    name: str
    institution_name: str = Field(default="", alias="institutionName")
    card_identifier: str = Field(default="", alias="cardIdentifier")
    credit_limit: Optional[float] = Field(default=None, alias="creditLimit")
    current_balance: Optional[float] = Field(default=None, alias="currentBalance")
    repayment_due_date: Optional[str] = Field(default=None, alias="repaymentDueDate")
    currency: str = "CNY"
    auto_repayment: Optional[bool] = Field(default=None, alias="autoRepayment")
    repayment_source_account_id: Optional[str] = Field(
        default=None, alias="repaymentSourceAccountId"
    )


class BudgetSpec(_CamelModel):
    month: str  # YYYY-MM
    category: Optional[str] = None
    amount: float
    name: Optional[str] = None
    action: str = "CREATE"
    currency: str = "CNY"
    priority: Optional[str] = None
    is_recurring: bool = Field(default=False, alias="isRecurring")


class NewHoldingSpec(_CamelModel):
    investment_id: str = Field(alias="investmentId")
    name: str
    type: HoldingType
    market: MarketType
    quantity: float
    price: float
    ticker_code: Optional[str] = Field(default=None, alias="tickerCode")
    fee: Optional[float] = None
    date: Optional[datetime] = None
    note: Optional[str] = None
    currency: Optional[str] = None


class HoldingTradeSpec(_CamelModel):
    quantity: float
    price: float
    fee: Optional[float] = None
    date: Optional[datetime] = None
    note: Optional[str] = None


class RecordSpec(_CamelModel):
    amount: Decimal
    type: str
    category: str
    account_id: Optional[str] = Field(default=None, alias="accountId")
    target_account_id: Optional[str] = Field(default=None, alias="targetAccountId")
    description: Optional[str] = None
    date: datetime
    currency: Optional[str] = None

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return str(value)


class CreditCardTransactionSpec(_CamelModel):
    card_identifier: str = Field(alias="cardIdentifier")
    amount: float
    type: str  # EXPENSE or PAYMENT
    category: str
    description: Optional[str] = None
    date: Optional[datetime] = None


def to_wire(spec: BaseModel) -> Dict[str, Any]:
    """Serialize a spec as the JSON body the store expects."""
    return spec.model_dump(by_alias=True, mode="json", exclude_none=True)


__all__: List[str] = [
    "Account",
    "AssetSpec",
    "AssetType",
    "BudgetSpec",
    "CreditCard",
    "CreditCardSpec",
    "CreditCardTransactionSpec",
    "DefaultAccountType",
    "Holding",
    "HoldingTradeSpec",
    "HoldingType",
    "MarketType",
    "NewHoldingSpec",
    "RecordSpec",
    "UserDefaults",
    "to_wire",
]
