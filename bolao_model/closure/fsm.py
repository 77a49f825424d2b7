"""
Pool Finite State Machine

States:
- Open: collecting funds and number selections
- Closed: wagers generated and fingerprinted (terminal)
"""
from enum import Enum
from typing import Dict, Set

from ..errors import BolaoNotOpen


class PoolStatus(Enum):
    """Pool lifecycle states"""
    OPEN = 'open'
    CLOSED = 'closed'


ALLOWED_TRANSITIONS: Dict[PoolStatus, Set[PoolStatus]] = {
    PoolStatus.OPEN: {PoolStatus.CLOSED},
    PoolStatus.CLOSED: set(),
}


def can_transition(current: PoolStatus, target: PoolStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def require_open(pool_id: str, status: PoolStatus):
    """Closure may only start while the pool is open"""
    if status is not PoolStatus.OPEN:
        raise BolaoNotOpen(pool_id, status.value)


def transition(pool_id: str, current: PoolStatus, target: PoolStatus) -> PoolStatus:
    """Validate a status change and return the new status"""
    if not can_transition(current, target):
        raise BolaoNotOpen(pool_id, current.value)
    return target
