"""
Phase Planner - orders a batch of events by data dependency.

Phase 1 holds events that create or change entities and depend on nothing else
in the batch (asset updates, credit cards, budgets, holding trades). Phase 2
holds transactions, which may name an account created in Phase 1.
Informational variants go to neither phase and are handed back to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from ledgerflow.model.events import (
    PHASE1_EVENT_TYPES,
    PHASE2_EVENT_TYPES,
    FinancialEventBase,
    NullStatementEvent,
)


@dataclass
class PhasePlan:
    phase1: List[FinancialEventBase] = field(default_factory=list)
    phase2: List[FinancialEventBase] = field(default_factory=list)
    informational: List[FinancialEventBase] = field(default_factory=list)
    skipped: List[NullStatementEvent] = field(default_factory=list)

    @property
    def committable_count(self) -> int:
        return len(self.phase1) + len(self.phase2)

    @property
    def is_empty(self) -> bool:
        return self.committable_count == 0


def plan_phases(events: Iterable[FinancialEventBase]) -> PhasePlan:
    """Partition events into Phase 1, Phase 2, informational and skipped.

    Input order is preserved within each bucket.
    """
    plan = PhasePlan()
    for event in events:
        if isinstance(event, PHASE1_EVENT_TYPES):
            plan.phase1.append(event)
        elif isinstance(event, PHASE2_EVENT_TYPES):
            plan.phase2.append(event)
        elif isinstance(event, NullStatementEvent):
            plan.skipped.append(event)
        else:
            plan.informational.append(event)
    return plan


__all__ = ["PhasePlan", "plan_phases"]
