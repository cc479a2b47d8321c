"""
Service layer for ledgerflow.

This package holds the pipeline's business logic, separated from the CLI
shell. Everything except the commit orchestrator is pure: no I/O, no global
state. The orchestrator talks to the remote ledger only through an injected
LedgerStore.

Principles:
- No UI framework imports (Rich, Typer)
- All dependencies injected through constructors or arguments
- Functions return data structures, not void
- Fully testable with simple unit tests and in-memory fakes
"""

from ledgerflow.services.account_resolver import (
    AccountResolution,
    ResolutionSource,
    resolve,
)
from ledgerflow.services.commit_orchestrator import (
    CommitOrchestrator,
    CommitReport,
    CommitState,
    PendingEvent,
    PendingReason,
    PhaseCommitError,
    RejectedEvent,
)
from ledgerflow.services.commit_summary import (
    CommitSummary,
    FixedIncomeHint,
    find_fixed_income,
)
from ledgerflow.services.credit_card_matcher import (
    CardMatch,
    CreditCardMatcher,
    MatchStatus,
)
from ledgerflow.services.event_classifier import EventClassifier
from ledgerflow.services.follow_up_service import apply_account, find_follow_ups
from ledgerflow.services.holding_reconciler import (
    CreateNew,
    ExistingHolding,
    HoldingAccountUnresolved,
    NoHoldingToSell,
    ReconciliationError,
    reconcile,
)
from ledgerflow.services.phase_planner import PhasePlan, plan_phases

__all__ = [
    "AccountResolution",
    "ResolutionSource",
    "resolve",
    "CommitOrchestrator",
    "CommitReport",
    "CommitState",
    "PendingEvent",
    "PendingReason",
    "PhaseCommitError",
    "RejectedEvent",
    "CommitSummary",
    "FixedIncomeHint",
    "find_fixed_income",
    "CardMatch",
    "CreditCardMatcher",
    "MatchStatus",
    "EventClassifier",
    "apply_account",
    "find_follow_ups",
    "CreateNew",
    "ExistingHolding",
    "HoldingAccountUnresolved",
    "NoHoldingToSell",
    "ReconciliationError",
    "reconcile",
    "PhasePlan",
    "plan_phases",
]
