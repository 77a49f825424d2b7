from datetime import datetime, timezone
from decimal import Decimal

import numpy as np
import pytest

from bolao_model.closure import InMemoryClosureStore, ParticipantSelection
from bolao_model.config import LOTTERY_CONFIG
from bolao_model.tickets import TicketSizeTable

FIXED_TIME = datetime(2026, 10, 16, 20, 0, tzinfo=timezone.utc)

BASE_PARTICIPANTS = [
    ('p1', 'Ana', 3, (4, 17, 23, 38, 45, 59)),
    ('p2', 'Bruno', 2, (5, 17, 28, 33, 41, 52)),
    ('p3', 'Carla', 5, (9, 17, 23, 36, 44, 58)),
    ('p4', 'Elisa', 5, (2, 13, 23, 31, 45, 53)),
]


def sample_scores():
    """Deterministic, uneven score per number"""
    return {n: round(0.30 + ((n * 37) % 61) / 100, 2) for n in range(1, 61)}


def build_store(
    participants=BASE_PARTICIPANTS,
    scores=None,
    quota_value=Decimal("10.00"),
    pool_id='pool-1',
    store=None
):
    store = store if store is not None else InMemoryClosureStore()
    store.add_pool(pool_id, 'Test Pool', quota_value)
    for pid, name, quotas, numbers in participants:
        store.add_participant(
            pool_id, ParticipantSelection(pid, name, numbers, quota_quantity=quotas)
        )
    store.set_scores(pool_id, scores if scores is not None else sample_scores())
    return store


@pytest.fixture
def small_levels():
    return list(TicketSizeTable.from_mapping({6: 6, 7: 42, 8: 168}))


@pytest.fixture
def default_levels():
    return list(LOTTERY_CONFIG.ticket_table())


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def scores():
    return sample_scores()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIME
