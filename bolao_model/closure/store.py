"""
Storage boundary for pool closure

ClosureStore is what the orchestrator needs from persistence. The commit is
all-or-nothing and only succeeds while the pool is still open at write time,
so a losing concurrent closure persists nothing.

InMemoryClosureStore is a lock-guarded implementation for the CLI and tests.
"""
import copy
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .fsm import PoolStatus, transition
from .record import ParticipantSelection
from ..engines.financials import total_confirmed_funds
from ..errors import BolaoNotFound


@dataclass
class PoolRecord:
    """Stored pool row"""
    pool_id: str
    name: str
    quota_value: Decimal
    status: PoolStatus = PoolStatus.OPEN
    fingerprint: Optional[str] = None
    closure_snapshot: Optional[Dict[str, Any]] = None
    closed_at: Optional[datetime] = None


@dataclass
class Participation:
    """A participant in a pool and whether their payment is confirmed"""
    selection: ParticipantSelection
    payment_confirmed: bool = True


@dataclass(frozen=True)
class WagerRow:
    """One persisted wager"""
    pool_id: str
    wager_type: str
    numbers: Tuple[int, ...]


@dataclass(frozen=True)
class ClosureCommit:
    """Everything written when a pool closes"""
    fingerprint: str
    snapshot: Dict[str, Any]
    closed_at: datetime
    wagers: Tuple[WagerRow, ...]
    auto_selections: Tuple[ParticipantSelection, ...] = ()


@dataclass
class StoredClosure:
    """Closure state as read back from storage"""
    pool_id: str
    status: PoolStatus
    fingerprint: Optional[str]
    snapshot: Optional[Dict[str, Any]]
    closed_at: Optional[datetime]
    wagers: List[WagerRow] = field(default_factory=list)


class ClosureStore(ABC):
    """Persistence collaborator of the closure orchestrator"""

    @abstractmethod
    def get_pool(self, pool_id: str) -> PoolRecord:
        """Raises BolaoNotFound for an unknown pool"""
        pass

    @abstractmethod
    def get_total_funds(self, pool_id: str) -> Decimal:
        """Confirmed pooled funds"""
        pass

    @abstractmethod
    def get_confirmed_participants(self, pool_id: str) -> List[ParticipantSelection]:
        pass

    @abstractmethod
    def get_scores(self, pool_id: str) -> Dict[int, float]:
        """Historical score per number"""
        pass

    @abstractmethod
    def commit_closure(self, pool_id: str, commit: ClosureCommit):
        """
        Atomically close the pool.

        Transitions status Open -> Closed together with fingerprint and
        snapshot, records auto-generated selections, and inserts the wager
        rows. Raises BolaoNotOpen if the pool is no longer open; on any
        failure nothing is written.
        """
        pass

    @abstractmethod
    def get_closure(self, pool_id: str) -> StoredClosure:
        pass


class InMemoryClosureStore(ClosureStore):
    """Thread-safe in-memory store"""

    def __init__(self):
        self._lock = threading.Lock()
        self._pools: Dict[str, PoolRecord] = {}
        self._participations: Dict[str, List[Participation]] = {}
        self._scores: Dict[str, Dict[int, float]] = {}
        self._wagers: Dict[str, List[WagerRow]] = {}

    # ----- setup -----

    def add_pool(self, pool_id: str, name: str, quota_value: Decimal) -> PoolRecord:
        with self._lock:
            pool = PoolRecord(str(pool_id), name, Decimal(str(quota_value)))
            self._pools[pool.pool_id] = pool
            self._participations[pool.pool_id] = []
            self._scores[pool.pool_id] = {}
            self._wagers[pool.pool_id] = []
            return replace(pool)

    def add_participant(
        self,
        pool_id: str,
        selection: ParticipantSelection,
        payment_confirmed: bool = True
    ):
        with self._lock:
            self._require_pool(pool_id)
            self._participations[pool_id].append(Participation(selection, payment_confirmed))

    def set_scores(self, pool_id: str, scores: Mapping[int, float]):
        with self._lock:
            self._require_pool(pool_id)
            self._scores[pool_id] = {int(n): float(s) for n, s in scores.items()}

    # ----- reads -----

    def get_pool(self, pool_id: str) -> PoolRecord:
        with self._lock:
            pool = self._require_pool(pool_id)
            return replace(pool, closure_snapshot=copy.deepcopy(pool.closure_snapshot))

    def get_total_funds(self, pool_id: str) -> Decimal:
        with self._lock:
            pool = self._require_pool(pool_id)
            quantities = [
                p.selection.quota_quantity
                for p in self._participations[pool_id] if p.payment_confirmed
            ]
            return total_confirmed_funds(quantities, pool.quota_value)

    def get_confirmed_participants(self, pool_id: str) -> List[ParticipantSelection]:
        with self._lock:
            self._require_pool(pool_id)
            return [p.selection for p in self._participations[pool_id] if p.payment_confirmed]

    def get_scores(self, pool_id: str) -> Dict[int, float]:
        with self._lock:
            self._require_pool(pool_id)
            return dict(self._scores[pool_id])

    def get_wagers(self, pool_id: str) -> List[WagerRow]:
        with self._lock:
            self._require_pool(pool_id)
            return list(self._wagers[pool_id])

    def get_closure(self, pool_id: str) -> StoredClosure:
        with self._lock:
            pool = self._require_pool(pool_id)
            return StoredClosure(
                pool_id=pool.pool_id,
                status=pool.status,
                fingerprint=pool.fingerprint,
                snapshot=copy.deepcopy(pool.closure_snapshot),
                closed_at=pool.closed_at,
                wagers=list(self._wagers[pool_id])
            )

    # ----- writes -----

    def commit_closure(self, pool_id: str, commit: ClosureCommit):
        with self._lock:
            pool = self._require_pool(pool_id)
            status = transition(pool.pool_id, pool.status, PoolStatus.CLOSED)

            # Stage every change first; publish only if all of them succeed
            closed = replace(
                pool,
                status=status,
                fingerprint=commit.fingerprint,
                closure_snapshot=copy.deepcopy(commit.snapshot),
                closed_at=commit.closed_at
            )
            participations = self._stage_selections(pool_id, commit.auto_selections)
            wagers = self._stage_wagers(pool_id, commit.wagers)

            self._pools[pool_id] = closed
            self._participations[pool_id] = participations
            self._wagers[pool_id] = wagers

    def _stage_selections(
        self,
        pool_id: str,
        auto_selections: Tuple[ParticipantSelection, ...]
    ) -> List[Participation]:
        generated = {s.participant_id: s for s in auto_selections}
        staged = []
        for p in self._participations[pool_id]:
            selection = generated.pop(p.selection.participant_id, p.selection)
            staged.append(Participation(selection, p.payment_confirmed))
        if generated:
            raise KeyError(f"Unknown participants in pool {pool_id}: {sorted(generated)}")
        return staged

    def _stage_wagers(self, pool_id: str, rows: Tuple[WagerRow, ...]) -> List[WagerRow]:
        for row in rows:
            if row.pool_id != pool_id:
                raise ValueError(f"Wager row for pool {row.pool_id} committed to {pool_id}")
        return list(self._wagers[pool_id]) + list(rows)

    def _require_pool(self, pool_id: str) -> PoolRecord:
        pool = self._pools.get(pool_id)
        if pool is None:
            raise BolaoNotFound(pool_id)
        return pool
