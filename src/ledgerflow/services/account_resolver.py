"""
Account Resolver - maps an account name hint to an account id.

Three tiers, first hit wins:
1. Exact key match in the account map
2. The user's default account for the direction (plain accounts only)
3. Unresolved: the transaction is committed without an account

Tier 2 results are flagged default_used so the caller can present them as an
editable pre-fill rather than a decision. Credit-card defaults belong to the
credit card matcher and are never returned here.

Pure functions only; no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Tuple

from ledgerflow.model.entities import DefaultAccountType, UserDefaults
from ledgerflow.model.events import TransactionDirection


class ResolutionSource(str, Enum):
    exact = "EXACT"
    default = "DEFAULT"
    unresolved = "UNRESOLVED"


@dataclass(frozen=True)
class AccountResolution:
    account_id: Optional[str]
    source: ResolutionSource

    @property
    def default_used(self) -> bool:
        return self.source is ResolutionSource.default

    @property
    def is_resolved(self) -> bool:
        return self.account_id is not None


UNRESOLVED = AccountResolution(account_id=None, source=ResolutionSource.unresolved)


def default_for(
    direction: TransactionDirection, defaults: UserDefaults
) -> Tuple[Optional[str], Optional[DefaultAccountType]]:
    """Return the (id, type) default configured for a direction.

    Income uses the income default; every other direction draws from the
    expense default.
    """
    if direction is TransactionDirection.income:
        return defaults.income_account_id, defaults.income_account_type
    return defaults.expense_account_id, defaults.expense_account_type


def resolve(
    name_hint: Optional[str],
    direction: TransactionDirection,
    account_map: Mapping[str, str],
    defaults: Optional[UserDefaults] = None,
) -> AccountResolution:
    """Resolve an account name to an id using the tiered fallback.

    Args:
        name_hint: Account name as spoken/parsed, may be empty
        direction: Transaction direction, selects the income or expense default
        account_map: Display name -> account id
        defaults: The user's configured default accounts

    Returns:
        AccountResolution; account_id is None when nothing applies
    """
    if name_hint and name_hint in account_map:
        return AccountResolution(account_id=account_map[name_hint], source=ResolutionSource.exact)

    if defaults is not None:
        default_id, default_type = default_for(direction, defaults)
        if default_id and default_type is DefaultAccountType.account:
            return AccountResolution(account_id=default_id, source=ResolutionSource.default)

    return UNRESOLVED


__all__ = ["AccountResolution", "ResolutionSource", "UNRESOLVED", "default_for", "resolve"]
