from .entities import (
    Account,
    AssetSpec,
    AssetType,
    BudgetSpec,
    CreditCard,
    CreditCardSpec,
    CreditCardTransactionSpec,
    DefaultAccountType,
    Holding,
    HoldingTradeSpec,
    HoldingType,
    MarketType,
    NewHoldingSpec,
    RecordSpec,
    UserDefaults,
)
from .events import (
    AssetUpdateEvent,
    BudgetEvent,
    CreditCardUpdateEvent,
    EventType,
    FinancialEvent,
    FinancialEventBase,
    HoldingAction,
    HoldingUpdateEvent,
    NeedMoreInfoEvent,
    NullStatementEvent,
    QueryResponseEvent,
    TransactionDirection,
    TransactionEvent,
    is_committable,
)

__all__ = [
    # entities
    "Account",
    "CreditCard",
    "Holding",
    "UserDefaults",
    "AssetType",
    "HoldingType",
    "MarketType",
    "DefaultAccountType",
    # write specs
    "AssetSpec",
    "BudgetSpec",
    "CreditCardSpec",
    "CreditCardTransactionSpec",
    "HoldingTradeSpec",
    "NewHoldingSpec",
    "RecordSpec",
    # events
    "FinancialEvent",
    "FinancialEventBase",
    "EventType",
    "TransactionDirection",
    "HoldingAction",
    "TransactionEvent",
    "AssetUpdateEvent",
    "CreditCardUpdateEvent",
    "HoldingUpdateEvent",
    "BudgetEvent",
    "QueryResponseEvent",
    "NeedMoreInfoEvent",
    "NullStatementEvent",
    "is_committable",
]
