"""
Closure Record and Fingerprint

The record is the auditable, immutable result of closing a pool. Its
fingerprint is the SHA-256 digest of a canonical JSON serialization:
sorted keys, compact separators, money as two-decimal strings, timestamps
in ISO-8601.
"""
import hashlib
import json
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from ..engines.allocation_interface import AllocationPlan
from ..selection.patterns import normalize


@dataclass(frozen=True)
class ParticipantSelection:
    """A confirmed participant and the numbers they picked"""
    participant_id: str
    name: str
    numbers: Tuple[int, ...] = ()
    quota_quantity: int = 1
    auto_generated: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'numbers', tuple(sorted(self.numbers)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': str(self.participant_id),
            'name': self.name,
            'selectedNumbers': list(self.numbers),
            'autoGenerated': self.auto_generated,
        }


def validate_participant_selection(numbers: Iterable[int], count: int = 6) -> Tuple[int, ...]:
    """A manual pick must be exactly `count` distinct numbers in [1, 60]"""
    ordered = normalize(numbers)
    if len(ordered) != count:
        raise ValueError(f"Select exactly {count} numbers (got {len(ordered)})")
    return tuple(ordered)


@dataclass(frozen=True)
class FinalWager:
    """One generated wager"""
    label: str
    number_count: int
    numbers: Tuple[int, ...]
    cost: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.label,
            'numberCount': self.number_count,
            'numbers': list(self.numbers),
            'cost': f"{self.cost:.2f}",
        }


def wager_label(number_count: int) -> str:
    return f"{number_count} numbers"


def build_number_to_voters(
    participants: Sequence[ParticipantSelection]
) -> Dict[int, List[str]]:
    """Reverse index: number -> names of participants who picked it"""
    index: Dict[int, List[str]] = {}
    for p in participants:
        for n in p.numbers:
            index.setdefault(n, []).append(p.name)
    return dict(sorted(index.items()))


@dataclass(frozen=True)
class ClosureRecord:
    """Immutable snapshot of a pool closure"""
    pool_id: str
    pool_name: str
    total_funds: Decimal
    quota_value: Decimal
    allocation_plan: AllocationPlan
    participant_selections: Tuple[ParticipantSelection, ...]
    number_to_voters: Tuple[Tuple[int, Tuple[str, ...]], ...]
    number_scores: Tuple[Tuple[int, float], ...]
    final_wagers: Tuple[FinalWager, ...]
    generated_at: datetime
    closed_by: str

    @classmethod
    def build(
        cls,
        pool_id: str,
        pool_name: str,
        total_funds: Decimal,
        quota_value: Decimal,
        allocation_plan: AllocationPlan,
        participant_selections: Sequence[ParticipantSelection],
        number_to_voters: Mapping[int, Sequence[str]],
        number_scores: Mapping[int, float],
        final_wagers: Sequence[FinalWager],
        generated_at: datetime,
        closed_by: str
    ) -> 'ClosureRecord':
        return cls(
            pool_id=str(pool_id),
            pool_name=pool_name,
            total_funds=Decimal(str(total_funds)),
            quota_value=Decimal(str(quota_value)),
            allocation_plan=allocation_plan,
            participant_selections=tuple(participant_selections),
            number_to_voters=tuple(
                (int(n), tuple(names)) for n, names in sorted(number_to_voters.items())
            ),
            number_scores=tuple(
                (int(n), float(s)) for n, s in sorted(number_scores.items())
            ),
            final_wagers=tuple(final_wagers),
            generated_at=generated_at,
            closed_by=str(closed_by)
        )

    @property
    def participant_count(self) -> int:
        return len(self.participant_selections)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable document stored as the closure snapshot"""
        return {
            'poolId': self.pool_id,
            'poolName': self.pool_name,
            'closedAt': self.generated_at.isoformat(),
            'closedBy': self.closed_by,
            'totalFunds': f"{self.total_funds:.2f}",
            'quotaValue': f"{self.quota_value:.2f}",
            'participantCount': self.participant_count,
            'participants': [p.to_dict() for p in self.participant_selections],
            'numberToVoters': {str(n): list(names) for n, names in self.number_to_voters},
            'numberScores': {str(n): s for n, s in self.number_scores},
            'allocationPlan': self.allocation_plan.to_dict(),
            'finalWagers': [w.to_dict() for w in self.final_wagers],
        }

    def fingerprint(self) -> str:
        return compute_fingerprint(self.to_dict())


def canonical_json(document: Mapping[str, Any]) -> str:
    return json.dumps(document, sort_keys=True, separators=(',', ':'), ensure_ascii=False)


def compute_fingerprint(document: Mapping[str, Any]) -> str:
    """64-character hex SHA-256 of the canonical serialization"""
    return hashlib.sha256(canonical_json(document).encode('utf-8')).hexdigest()
