# Closure Module: pool lifecycle, closure record, storage boundary
from .fsm import PoolStatus, can_transition
from .record import (
    ClosureRecord, FinalWager, ParticipantSelection,
    build_number_to_voters, compute_fingerprint, validate_participant_selection
)
from .store import ClosureStore, InMemoryClosureStore, ClosureCommit, WagerRow
from .orchestrator import (
    ClosureOrchestrator, ClosureResult, QualitySummary,
    get_closure_info, verify_closure
)

__all__ = [
    'PoolStatus',
    'can_transition',
    'ClosureRecord',
    'FinalWager',
    'ParticipantSelection',
    'build_number_to_voters',
    'compute_fingerprint',
    'validate_participant_selection',
    'ClosureStore',
    'InMemoryClosureStore',
    'ClosureCommit',
    'WagerRow',
    'ClosureOrchestrator',
    'ClosureResult',
    'QualitySummary',
    'get_closure_info',
    'verify_closure'
]
