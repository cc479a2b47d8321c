"""
Commit Orchestrator - writes a classified batch to the store in two phases.

    PLANNING -> PHASE1_COMMIT -> (refresh) -> PHASE2_COMMIT -> DONE
                     \\                            \\
                      -> FAILED                     -> FAILED

Phase 1 creates entities (accounts, cards, budgets, holding trades), all calls
in flight at once. When every call has settled and at least one write landed,
the account list is re-fetched so transactions in Phase 2 can name accounts
created moments earlier. Cards returned by phase 1 writes are overlaid on the
known card list by id for the same reason. Phase 2 then writes the
transactions, again all at once.

Failure policy: fail-fast without rollback. If any call in a phase fails, the
phase is reported as failed once all its calls have settled, and the next
phase is not started. Sibling calls that succeeded stay applied; callers must
re-fetch state before resubmitting. Nothing is retried here.

Events rejected for structural reasons (a sell with no holding, a trade with
no account) are dropped from their phase before any call is made and do not
fail the phase.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, List, Mapping, Optional, Tuple

from ledgerflow.model.entities import CreditCard
from ledgerflow.model.events import (
    AssetUpdateEvent,
    BudgetEvent,
    CreditCardUpdateEvent,
    FinancialEventBase,
    HoldingAction,
    HoldingUpdateEvent,
    NullStatementEvent,
    TransactionDirection,
    TransactionEvent,
)
from ledgerflow.services import commit_specs
from ledgerflow.services.account_resolver import resolve
from ledgerflow.services.credit_card_matcher import (
    CreditCardMatcher,
    MatchStatus,
    institution_hint,
    match_by_identifier,
)
from ledgerflow.services.holding_reconciler import (
    ExistingHolding,
    HoldingAccountUnresolved,
    ReconciliationError,
    reconcile,
)
from ledgerflow.services.phase_planner import plan_phases
from ledgerflow.storage.snapshot import AccountMap, LedgerSnapshot, build_account_map
from ledgerflow.storage.store import LedgerStore, StoreError

logger = logging.getLogger(__name__)


class CommitState(str, Enum):
    planning = "PLANNING"
    phase1_commit = "PHASE1_COMMIT"
    phase2_commit = "PHASE2_COMMIT"
    done = "DONE"
    failed = "FAILED"


class PendingReason(str, Enum):
    card_recommended = "CARD_RECOMMENDED"
    card_selection_required = "CARD_SELECTION_REQUIRED"


@dataclass
class RejectedEvent:
    event: FinancialEventBase
    error: ReconciliationError

    @property
    def reason(self) -> str:
        return str(self.error)


@dataclass
class PendingEvent:
    """A transaction held back until the user confirms which card it used."""

    event: TransactionEvent
    reason: PendingReason
    suggested_card: Optional[CreditCard] = None

    def accept(self) -> TransactionEvent:
        """Return the transaction bound to the suggested card, ready to resubmit."""
        if self.suggested_card is None:
            raise ValueError("No suggested card to accept; use choose() instead")
        return self.choose(self.suggested_card)

    def choose(self, card: CreditCard) -> TransactionEvent:
        return self.event.model_copy(update={"card_identifier": card.card_identifier})


@dataclass
class CommitReport:
    state: CommitState = CommitState.planning
    committed: List[FinancialEventBase] = field(default_factory=list)
    rejected: List[RejectedEvent] = field(default_factory=list)
    pending: List[PendingEvent] = field(default_factory=list)
    informational: List[FinancialEventBase] = field(default_factory=list)
    skipped: List[NullStatementEvent] = field(default_factory=list)
    default_used: List[str] = field(default_factory=list)  # event ids
    account_map_refreshed: bool = False

    @property
    def committed_count(self) -> int:
        return len(self.committed)


class PhaseCommitError(Exception):
    """Raised when at least one call in a phase failed.

    Attributes:
        phase: 1 or 2
        cause: First failure, in submission order
        event: Event whose call raised cause
        succeeded: Calls in the phase that completed (and stay applied)
        failed: Calls in the phase that raised
        report: Report as it stood when the phase failed
    """

    def __init__(
        self,
        phase: int,
        cause: BaseException,
        event: FinancialEventBase,
        succeeded: int,
        failed: int,
        report: CommitReport,
    ):
        super().__init__(
            f"Phase {phase} failed: {failed} of {succeeded + failed} writes failed "
            f"({event.event_type}: {cause})"
        )
        self.phase = phase
        self.cause = cause
        self.event = event
        self.succeeded = succeeded
        self.failed = failed
        self.report = report


_Call = Tuple[FinancialEventBase, Callable[[], Awaitable[Any]]]


def merge_cards(known: Iterable[CreditCard], written: Iterable[CreditCard]) -> List[CreditCard]:
    """Overlay cards written in phase 1 onto the known list, replacing by id."""
    merged = {card.id: card for card in known}
    for card in written:
        merged[card.id] = card
    return list(merged.values())


@dataclass
class _TransactionOutcome:
    event: TransactionEvent
    committed: bool = False
    default_used: bool = False
    pending: Optional[PendingEvent] = None


class CommitOrchestrator:
    """Run the two-phase commit for a batch of classified events.

    Args:
        store: Remote ledger store
        matcher: Credit card matcher; defaults to one that asks the store for
            institution recommendations
        now: Clock for defaults such as the budget month
    """

    def __init__(
        self,
        store: LedgerStore,
        matcher: Optional[CreditCardMatcher] = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.matcher = matcher or CreditCardMatcher(
            recommender=getattr(store, "get_recommended_credit_card", None)
        )
        self.now = now

    async def commit(
        self,
        events: Iterable[FinancialEventBase],
        snapshot: Optional[LedgerSnapshot] = None,
        account_map: Optional[Mapping[str, str]] = None,
    ) -> CommitReport:
        """Commit events and return what happened to each of them.

        Args:
            events: Classified events (any variants; non-committing ones are
                passed through to the report)
            snapshot: Accounts, cards, holdings and defaults known before the
                commit
            account_map: Name -> id map to start from; defaults to the one
                derived from the snapshot

        Raises:
            PhaseCommitError: a store call failed; later phases were not run
        """
        snapshot = snapshot or LedgerSnapshot()
        report = CommitReport()
        plan = plan_phases(events)
        report.informational = list(plan.informational)
        report.skipped = list(plan.skipped)
        current_map: AccountMap = dict(account_map) if account_map is not None else snapshot.account_map

        logger.info(
            "Planned commit: %d in phase 1, %d in phase 2, %d informational, %d skipped",
            len(plan.phase1),
            len(plan.phase2),
            len(plan.informational),
            len(plan.skipped),
        )

        self._transition(report, CommitState.phase1_commit)
        phase1_calls = self._prepare_phase1(plan.phase1, current_map, snapshot, report)
        phase1_done, failures = await self._settle(1, phase1_calls)
        report.committed.extend(event for event, _ in phase1_done)
        self._fail_if_any(1, phase1_done, failures, report)

        if phase1_done and plan.phase2:
            fresh = await self._refresh_account_map()
            if fresh is not None:
                current_map = fresh
                report.account_map_refreshed = True

        written_cards = [result for _, result in phase1_done if isinstance(result, CreditCard)]
        if written_cards:
            snapshot = replace(snapshot, credit_cards=merge_cards(snapshot.credit_cards, written_cards))

        self._transition(report, CommitState.phase2_commit)
        phase2_calls: List[_Call] = [
            (event, self._transaction_call(event, current_map, snapshot)) for event in plan.phase2
        ]
        phase2_done, failures = await self._settle(2, phase2_calls)
        for _, outcome in phase2_done:
            if outcome.pending is not None:
                report.pending.append(outcome.pending)
                continue
            report.committed.append(outcome.event)
            if outcome.default_used:
                report.default_used.append(outcome.event.event_id)
        self._fail_if_any(2, phase2_done, failures, report)

        self._transition(report, CommitState.done)
        logger.info(
            "Commit done: %d committed, %d rejected, %d pending confirmation",
            report.committed_count,
            len(report.rejected),
            len(report.pending),
        )
        return report

    # --- phases ---

    def _transition(self, report: CommitReport, state: CommitState) -> None:
        logger.debug("Commit state %s -> %s", report.state.value, state.value)
        report.state = state

    async def _settle(
        self, phase: int, calls: List[_Call]
    ) -> Tuple[List[Tuple[FinancialEventBase, Any]], List[Tuple[FinancialEventBase, BaseException]]]:
        """Issue every call at once and wait for all of them to settle."""
        if not calls:
            logger.debug("Phase %d has nothing to commit", phase)
            return [], []

        logger.info("Phase %d: issuing %d writes", phase, len(calls))
        results = await asyncio.gather(*(factory() for _, factory in calls), return_exceptions=True)

        done: List[Tuple[FinancialEventBase, Any]] = []
        failures: List[Tuple[FinancialEventBase, BaseException]] = []
        for (event, _), result in zip(calls, results):
            if isinstance(result, BaseException):
                logger.error("Phase %d write for %s failed: %s", phase, event.label, result)
                failures.append((event, result))
            else:
                done.append((event, result))
        return done, failures

    def _fail_if_any(
        self,
        phase: int,
        done: List[Tuple[FinancialEventBase, Any]],
        failures: List[Tuple[FinancialEventBase, BaseException]],
        report: CommitReport,
    ) -> None:
        if not failures:
            return
        self._transition(report, CommitState.failed)
        event, cause = failures[0]
        raise PhaseCommitError(
            phase=phase,
            cause=cause,
            event=event,
            succeeded=len(done),
            failed=len(failures),
            report=report,
        ) from cause

    async def _refresh_account_map(self) -> Optional[AccountMap]:
        """Re-fetch accounts; None means keep using the previous map."""
        list_accounts = getattr(self.store, "list_accounts", None)
        if list_accounts is None:
            logger.warning("Store cannot list accounts; phase 2 uses the previous account map")
            return None
        try:
            accounts = await list_accounts()
        except StoreError as e:
            logger.warning("Account refresh failed, phase 2 uses the previous account map: %s", e)
            return None
        fresh = build_account_map(accounts)
        logger.info("Refreshed account map: %d accounts", len(fresh))
        return fresh

    # --- phase 1 ---

    def _prepare_phase1(
        self,
        events: List[FinancialEventBase],
        account_map: AccountMap,
        snapshot: LedgerSnapshot,
        report: CommitReport,
    ) -> List[_Call]:
        calls: List[_Call] = []
        for event in events:
            try:
                calls.append((event, self._phase1_call(event, account_map, snapshot)))
            except ReconciliationError as e:
                logger.warning("Rejected %s: %s", event.label, e)
                report.rejected.append(RejectedEvent(event=event, error=e))
        return calls

    def _phase1_call(
        self, event: FinancialEventBase, account_map: AccountMap, snapshot: LedgerSnapshot
    ) -> Callable[[], Awaitable[Any]]:
        store = self.store

        if isinstance(event, AssetUpdateEvent):
            spec = commit_specs.asset_spec(event, account_map)
            return lambda: store.create_asset(spec)

        if isinstance(event, CreditCardUpdateEvent):
            spec = commit_specs.credit_card_spec(event, account_map)
            existing = None
            if event.card_identifier:
                existing = match_by_identifier(event.card_identifier, snapshot.credit_cards)
            card_id = existing.id if existing is not None else None
            return lambda: store.create_or_update_credit_card(spec, card_id)

        if isinstance(event, BudgetEvent):
            spec = commit_specs.budget_spec(event, self.now)
            return lambda: store.create_budget(spec)

        if isinstance(event, HoldingUpdateEvent):
            return self._holding_call(event, account_map, snapshot)

        raise TypeError(f"{type(event).__name__} is not a phase 1 event")

    def _holding_call(
        self, event: HoldingUpdateEvent, account_map: AccountMap, snapshot: LedgerSnapshot
    ) -> Callable[[], Awaitable[Any]]:
        store = self.store
        account_id = account_map.get(event.account_name) if event.account_name else None
        if account_id is None:
            raise HoldingAccountUnresolved(
                f"No investment account named {event.account_name!r} for {event.label}"
            )

        target = reconcile(event, account_id, snapshot.holdings_of(account_id))
        if isinstance(target, ExistingHolding):
            holding_id = target.holding.id
            trade = commit_specs.trade_spec(event)
            if event.action is HoldingAction.buy:
                return lambda: store.buy(holding_id, trade)
            return lambda: store.sell(holding_id, trade)

        spec = commit_specs.new_holding_spec(event, account_id)
        return lambda: store.buy_new_holding(spec)

    # --- phase 2 ---

    def _transaction_call(
        self, event: TransactionEvent, account_map: AccountMap, snapshot: LedgerSnapshot
    ) -> Callable[[], Awaitable[_TransactionOutcome]]:
        return lambda: self._commit_transaction(event, account_map, snapshot)

    async def _commit_transaction(
        self, event: TransactionEvent, account_map: AccountMap, snapshot: LedgerSnapshot
    ) -> _TransactionOutcome:
        cards = snapshot.credit_cards

        if event.card_identifier or institution_hint(event.account_name):
            match = await self.matcher.match(event.card_identifier, event.account_name, cards)
            if match.status is MatchStatus.matched:
                await self.store.create_credit_card_transaction(
                    commit_specs.card_transaction_spec(event, match.card)
                )
                return _TransactionOutcome(event=event, committed=True)
            if match.status is MatchStatus.recommended:
                logger.info("Holding %s for confirmation of card %s", event.label, match.card.display_name)
                return _TransactionOutcome(
                    event=event,
                    pending=PendingEvent(
                        event=event,
                        reason=PendingReason.card_recommended,
                        suggested_card=match.card,
                    ),
                )
            if match.requires_manual_selection:
                return _TransactionOutcome(
                    event=event,
                    pending=PendingEvent(event=event, reason=PendingReason.card_selection_required),
                )

        resolution = resolve(event.account_name, event.direction, account_map, snapshot.defaults)
        if not resolution.is_resolved:
            default_card = self.matcher.default_card(event.direction, snapshot.defaults, cards)
            if default_card.committable:
                await self.store.create_credit_card_transaction(
                    commit_specs.card_transaction_spec(event, default_card.card)
                )
                return _TransactionOutcome(event=event, committed=True, default_used=True)
            logger.info("No account for %s; committing without one", event.label)

        target_id = None
        if event.direction is TransactionDirection.transfer and event.target_account_name:
            target_id = account_map.get(event.target_account_name)

        await self.store.create_transaction(
            commit_specs.record_spec(event, resolution.account_id, target_id)
        )
        return _TransactionOutcome(event=event, committed=True, default_used=resolution.default_used)


__all__ = [
    "CommitOrchestrator",
    "CommitReport",
    "CommitState",
    "PendingEvent",
    "PendingReason",
    "PhaseCommitError",
    "RejectedEvent",
    "merge_cards",
]
