"""
Closure Orchestrator

Closes an open pool in one all-or-nothing pass:
1. Allocation plan from confirmed funds
2. Auto-generated picks for confirmed participants without a selection
3. Reverse index number -> voters
4. Wagers per plan entry, largest size first (first wager = flagship)
5. Quality report per wager (audit only)
6. Closure record + SHA-256 fingerprint
7. Atomic commit (status, fingerprint, snapshot, wagers)

Nothing is written unless step 7 succeeds.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .fsm import PoolStatus, require_open
from .record import (
    ClosureRecord, FinalWager, ParticipantSelection, build_number_to_voters,
    compute_fingerprint, validate_participant_selection, wager_label
)
from .store import ClosureCommit, ClosureStore, WagerRow
from ..config import (
    CLOSURE_CONFIG, LOTTERY_CONFIG, SELECTION_CONFIG, ClosureConfig, SelectionConfig
)
from ..engines.allocation_interface import AllocationPlan, AllocationSolver
from ..engines.dp_allocation import DPAllocationSolver
from ..errors import BolaoNotClosed
from ..selection.consolidation import ConsolidationEngine
from ..selection.greedy import SelectionResult
from ..selection.patterns import QualityReport
from ..selection.weighted import generate_weighted_numbers
from ..tickets import TicketSizeLevel

SEVERITY_MARKERS = {'high': '[HIGH]', 'medium': '[MED]', 'low': '[LOW]'}


@dataclass
class QualitySummary:
    """Aggregate quality of the generated wagers"""
    average: int
    high: int        # score >= HIGH_QUALITY
    medium: int      # VALID_QUALITY <= score < HIGH_QUALITY
    low: int         # score < VALID_QUALITY
    total: int

    @classmethod
    def from_reports(
        cls,
        reports: Sequence[QualityReport],
        config: Optional[ClosureConfig] = None
    ) -> 'QualitySummary':
        config = config or CLOSURE_CONFIG
        scores = [r.score for r in reports]
        if not scores:
            return cls(0, 0, 0, 0, 0)
        return cls(
            average=int(round(float(np.mean(scores)))),
            high=sum(1 for s in scores if s >= config.HIGH_QUALITY),
            medium=sum(1 for s in scores if config.VALID_QUALITY <= s < config.HIGH_QUALITY),
            low=sum(1 for s in scores if s < config.VALID_QUALITY),
            total=len(scores)
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            'average': self.average,
            'high': self.high,
            'medium': self.medium,
            'low': self.low,
            'total': self.total,
        }


@dataclass
class ClosureResult:
    """Everything produced by a successful closure"""
    pool_id: str
    fingerprint: str
    record: ClosureRecord
    selections: List[SelectionResult]
    quality_summary: QualitySummary
    auto_generated: List[ParticipantSelection] = field(default_factory=list)
    event_log: List[str] = field(default_factory=list)

    @property
    def plan(self) -> AllocationPlan:
        return self.record.allocation_plan

    @property
    def wagers(self) -> Tuple[FinalWager, ...]:
        return self.record.final_wagers

    @property
    def quality_reports(self) -> List[QualityReport]:
        return [s.report for s in self.selections]

    def wagers_dataframe(self) -> pd.DataFrame:
        """One row per generated wager"""
        records = []
        for i, (wager, sel) in enumerate(zip(self.wagers, self.selections), 1):
            records.append({
                'wager': i,
                'type': wager.label,
                'number_count': wager.number_count,
                'numbers': ' '.join(f"{n:02d}" for n in wager.numbers),
                'cost': float(wager.cost),
                'method': sel.method,
                'quality': sel.quality,
            })
        return pd.DataFrame(records)

    def quality_dataframe(self) -> pd.DataFrame:
        """One row per quality issue found"""
        records = []
        for i, report in enumerate(self.quality_reports, 1):
            for issue in report.issues:
                records.append({
                    'wager': i,
                    'score': report.score,
                    'type': issue.type,
                    'severity': issue.severity,
                    'message': issue.message,
                })
        return pd.DataFrame(
            records, columns=['wager', 'score', 'type', 'severity', 'message']
        )


@dataclass
class ClosureInfo:
    """Stored closure of a closed pool"""
    pool_id: str
    status: PoolStatus
    fingerprint: str
    closed_at: datetime
    snapshot: Dict


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ClosureOrchestrator:
    """
    Runs pool closures against a ClosureStore.

    Randomness (auto-picks and selection fallbacks) comes from the injected
    generator and the timestamp from the injected clock; with both fixed,
    identical inputs give identical records and fingerprints.
    """

    def __init__(
        self,
        store: ClosureStore,
        levels: Optional[Sequence[TicketSizeLevel]] = None,
        solver: Optional[AllocationSolver] = None,
        rng: Optional[np.random.Generator] = None,
        clock: Optional[Callable[[], datetime]] = None,
        config: Optional[ClosureConfig] = None,
        selection_config: Optional[SelectionConfig] = None,
        verbose: bool = False
    ):
        self.store = store
        self.levels = list(levels) if levels is not None else list(LOTTERY_CONFIG.ticket_table())
        self.solver = solver or DPAllocationSolver()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.clock = clock or _utc_now
        self.config = config or CLOSURE_CONFIG
        self.selection_config = selection_config or SELECTION_CONFIG
        self.verbose = verbose
        self.event_log: List[str] = []

    def close(self, pool_id: str, closed_by: str) -> ClosureResult:
        """
        Close an open pool.

        Raises:
            BolaoNotFound: unknown pool
            BolaoNotOpen: pool not open (checked at start and again at commit)
            InsufficientFunds: funds below the cheapest wager
            AllocationInfeasible: ticket table cannot cover the funds
            ValueError: a participant pick is not a valid wager
        """
        log: List[str] = []
        try:
            return self._run_closure(pool_id, closed_by, log)
        finally:
            self.event_log = log

    def _run_closure(self, pool_id: str, closed_by: str, log: List[str]) -> ClosureResult:
        pool = self.store.get_pool(pool_id)
        require_open(pool.pool_id, pool.status)
        self._log(log, f"Closing bolao {pool.pool_id} ({pool.name})")

        # 1. Allocation
        total_funds = self.store.get_total_funds(pool_id)
        plan = self.solver.solve(total_funds, self.levels)
        self._log_plan(log, plan)

        # 2. Auto-picks
        scores = self.store.get_scores(pool_id)
        participants, auto_generated = self._complete_selections(
            self.store.get_confirmed_participants(pool_id), scores, log
        )

        # 3. Reverse index
        number_to_voters = build_number_to_voters(participants)
        votes = {n: len(names) for n, names in number_to_voters.items()}

        # 4-5. Wagers and their quality
        wagers, selections = self._generate_wagers(plan, votes, scores, log)
        summary = QualitySummary.from_reports([s.report for s in selections], self.config)
        self._log_summary(log, summary)

        # 6. Record + fingerprint
        record = ClosureRecord.build(
            pool_id=pool.pool_id,
            pool_name=pool.name,
            total_funds=total_funds,
            quota_value=pool.quota_value,
            allocation_plan=plan,
            participant_selections=participants,
            number_to_voters=number_to_voters,
            number_scores=scores,
            final_wagers=wagers,
            generated_at=self.clock(),
            closed_by=closed_by
        )
        snapshot = record.to_dict()
        fingerprint = compute_fingerprint(snapshot)
        self._log(log, f"Fingerprint: {fingerprint}")

        # 7. Commit
        commit = ClosureCommit(
            fingerprint=fingerprint,
            snapshot=snapshot,
            closed_at=record.generated_at,
            wagers=tuple(
                WagerRow(pool.pool_id, w.label, w.numbers) for w in wagers
            ),
            auto_selections=tuple(auto_generated)
        )
        self.store.commit_closure(pool.pool_id, commit)
        self._log(log, f"Bolao {pool.pool_id} closed by {closed_by}")

        return ClosureResult(
            pool_id=pool.pool_id,
            fingerprint=fingerprint,
            record=record,
            selections=selections,
            quality_summary=summary,
            auto_generated=auto_generated,
            event_log=list(log)
        )

    def _complete_selections(
        self,
        participants: Sequence[ParticipantSelection],
        scores: Mapping[int, float],
        log: List[str]
    ) -> Tuple[List[ParticipantSelection], List[ParticipantSelection]]:
        """Validate manual picks and auto-generate the missing ones"""
        completed = []
        generated = []
        for p in participants:
            if p.numbers:
                numbers = validate_participant_selection(p.numbers, self.config.AUTO_PICK_COUNT)
                completed.append(replace(p, numbers=numbers))
                continue
            numbers = generate_weighted_numbers(scores, self.config.AUTO_PICK_COUNT, self.rng)
            filled = replace(p, numbers=tuple(numbers), auto_generated=True)
            self._log(log, f"Auto-generated numbers for {p.name}: {self._fmt(filled.numbers)}")
            completed.append(filled)
            generated.append(filled)
        return completed, generated

    def _generate_wagers(
        self,
        plan: AllocationPlan,
        votes: Mapping[int, int],
        scores: Mapping[int, float],
        log: List[str]
    ) -> Tuple[List[FinalWager], List[SelectionResult]]:
        engine = ConsolidationEngine(rng=self.rng, config=self.selection_config)
        wagers: List[FinalWager] = []
        selections: List[SelectionResult] = []

        for entry in plan.entries:
            self._log(log, f"Generating {entry.count} wager(s) of {entry.number_count} numbers")
            for i in range(entry.count):
                if not wagers:
                    result = engine.flagship(entry.number_count, votes, scores)
                    kind = 'flagship'
                else:
                    result = engine.subsequent(entry.number_count, scores)
                    kind = 'subsequent'

                if result.pool_reset:
                    self._log(log, "  Unused numbers exhausted, pool reset")

                wagers.append(FinalWager(
                    label=wager_label(entry.number_count),
                    number_count=entry.number_count,
                    numbers=result.numbers,
                    cost=entry.cost
                ))
                selections.append(result)
                self._log_wager(log, i + 1, entry.count, kind, result)

        return wagers, selections

    # ----- event log -----

    def _log(self, log: List[str], message: str):
        log.append(message)
        if self.verbose:
            print(message)

    @staticmethod
    def _fmt(numbers) -> str:
        return ', '.join(str(n) for n in numbers)

    def _log_plan(self, log: List[str], plan: AllocationPlan):
        self._log(log, f"Total funds: ${plan.total_funds:.2f}")
        for e in plan.entries:
            self._log(log, f"  - {e.count}x {e.number_count} numbers (${e.cost:.2f} each)")
        self._log(log, f"Total wagers: {plan.total_bets}")
        self._log(log, f"Remaining funds: ${plan.remaining_funds:.2f}")

    def _log_wager(
        self,
        log: List[str],
        index: int,
        total: int,
        kind: str,
        result: SelectionResult
    ):
        self._log(
            log,
            f"  Wager {index}/{total} ({kind}, {result.method}): "
            f"{self._fmt(result.numbers)}"
        )
        self._log(log, f"    Quality: {result.quality}/100")
        for issue in result.report.issues:
            self._log(log, f"      {SEVERITY_MARKERS.get(issue.severity, '')} {issue.message}")

    def _log_summary(self, log: List[str], summary: QualitySummary):
        self._log(log, "Quality analysis:")
        self._log(log, f"  Average quality: {summary.average}/100")
        self._log(log, f"  High quality wagers: {summary.high}/{summary.total}")
        self._log(log, f"  Medium quality wagers: {summary.medium}/{summary.total}")
        self._log(log, f"  Low quality wagers: {summary.low}/{summary.total}")

    def generate_event_log(self) -> List[str]:
        """Human-readable log of the last closure"""
        return list(self.event_log)


def get_closure_info(store: ClosureStore, pool_id: str) -> ClosureInfo:
    """Stored closure of a closed pool; BolaoNotClosed while it is open"""
    stored = store.get_closure(pool_id)
    if stored.status is not PoolStatus.CLOSED:
        raise BolaoNotClosed(pool_id)
    return ClosureInfo(
        pool_id=stored.pool_id,
        status=stored.status,
        fingerprint=stored.fingerprint,
        closed_at=stored.closed_at,
        snapshot=stored.snapshot
    )


def verify_closure(store: ClosureStore, pool_id: str) -> bool:
    """Recompute the fingerprint of the stored snapshot and compare"""
    info = get_closure_info(store, pool_id)
    return compute_fingerprint(info.snapshot) == info.fingerprint
