from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ledgerflow.model.entities import (
    Account,
    AssetType,
    CreditCard,
    DefaultAccountType,
    Holding,
    MarketType,
    RecordSpec,
    UserDefaults,
    to_wire,
)


class DescribeStoreEntities:
    def it_should_read_camel_case_fields(self):
        card = CreditCard.model_validate(
            {
                "id": "cc-1",
                "name": "Sapphire",
                "institutionName": "Chase",
                "cardIdentifier": "1234",
                "creditLimit": 20000,
            }
        )

        assert card.institution_name == "Chase"
        assert card.card_identifier == "1234"
        assert card.display_name == "Sapphire (1234)"

    def it_should_ignore_unknown_fields(self):
        account = Account.model_validate({"id": "a1", "name": "Cash", "type": "CASH", "icon": "x"})

        assert account.type == AssetType.cash
        assert account.balance == Decimal("0")

    def it_should_parse_holdings_and_defaults(self):
        holding = Holding.model_validate({"id": "h1", "accountId": "inv-1", "name": "Apple", "tickerCode": "AAPL"})
        defaults = UserDefaults.model_validate(
            {"defaultExpenseAccountId": "cc-1", "defaultExpenseAccountType": "CREDIT_CARD"}
        )

        assert holding.account_id == "inv-1"
        assert holding.ticker_code == "AAPL"
        assert defaults.expense_account_type == DefaultAccountType.credit_card
        assert defaults.income_account_id is None


class DescribeEnums:
    def it_should_flag_liabilities(self):
        assert AssetType.loan.is_liability
        assert AssetType.mortgage.is_liability
        assert not AssetType.savings.is_liability
        assert not AssetType.real_property.is_liability

    def it_should_keep_the_wire_value_for_property(self):
        assert AssetType("PROPERTY") is AssetType.real_property
        assert Account(id="a1", name="Flat", type="PROPERTY").type is AssetType.real_property

    def it_should_map_markets_to_currencies(self):
        assert MarketType.hk.currency_code == "HKD"
        assert MarketType.cn.currency_code == "CNY"
        assert MarketType.us.currency_code == "USD"


class DescribeToWire:
    def it_should_use_aliases_and_drop_missing_fields(self):
        spec = RecordSpec(
            amount=Decimal("35.00"),
            type="EXPENSE",
            category="FOOD",
            account_id="acc-1",
            date=datetime(2025, 3, 1, 12, 0),
        )

        body = to_wire(spec)

        assert body["accountId"] == "acc-1"
        assert body["amount"] == "35.00"
        assert "targetAccountId" not in body
        assert body["date"].startswith("2025-03-01T12:00")
