"""
Storage layer for ledgerflow.

The remote ledger is the only persistent store. This package holds the
LedgerStore protocol with its error hierarchy and the REST client implementing
it. The snapshot loader gathers read-side state before a commit.
"""

from ledgerflow.storage.snapshot import (
    AccountMap,
    LedgerSnapshot,
    build_account_map,
    load_snapshot,
)
from ledgerflow.storage.store import (
    LedgerStore,
    MalformedResponse,
    StoreError,
    StoreRejection,
    TransportFailure,
    Unauthorized,
)

__all__ = [
    "AccountMap",
    "LedgerSnapshot",
    "LedgerStore",
    "MalformedResponse",
    "StoreError",
    "StoreRejection",
    "TransportFailure",
    "Unauthorized",
    "build_account_map",
    "load_snapshot",
]
