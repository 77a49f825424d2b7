import numpy as np
import pytest

from bolao_model.config import SelectionConfig
from bolao_model.errors import SelectionQualityWarning
from bolao_model.selection import ConsolidationEngine, rank_by_votes
from bolao_model.selection.greedy import METHOD_WEIGHTED_FALLBACK

UNIFORM = {n: 0.5 for n in range(1, 61)}


def test_rank_by_votes_then_score():
    ranked = rank_by_votes({5: 3, 7: 3, 2: 1}, {7: 0.9, 5: 0.1, 40: 0.8})
    assert [c.value for c in ranked[:4]] == [7, 5, 2, 40]
    assert len(ranked) == 60


def test_flagship_follows_votes(rng):
    votes = {4: 5, 17: 5, 23: 5, 38: 5, 45: 5, 59: 5, 8: 4, 30: 4}
    engine = ConsolidationEngine(rng=rng)
    result = engine.flagship(6, votes, UNIFORM)
    assert result.numbers == (4, 17, 23, 38, 45, 59)
    assert result.quality == 100
    assert engine.used_numbers == {4, 17, 23, 38, 45, 59}


def test_flagship_below_floor_warns(rng):
    engine = ConsolidationEngine(rng=rng, config=SelectionConfig(FLAGSHIP_MIN_QUALITY=101))
    with pytest.warns(SelectionQualityWarning):
        engine.flagship(6, {}, UNIFORM)


def test_subsequent_avoids_used_numbers(rng, scores):
    engine = ConsolidationEngine(rng=rng)
    engine.mark_used(range(1, 31))
    result = engine.subsequent(6, scores)
    assert min(result.numbers) > 30
    assert not result.pool_reset


def test_subsequent_wagers_do_not_overlap(rng, scores):
    engine = ConsolidationEngine(rng=rng)
    first = engine.subsequent(6, scores)
    second = engine.subsequent(6, scores)
    assert not set(first.numbers) & set(second.numbers)
    assert engine.used_numbers == set(first.numbers) | set(second.numbers)


def test_subsequent_resets_exhausted_pool(rng, scores):
    engine = ConsolidationEngine(rng=rng)
    engine.mark_used(range(1, 57))
    result = engine.subsequent(6, scores)
    assert result.pool_reset
    assert engine.used_numbers == set(result.numbers)


@pytest.mark.filterwarnings("ignore::bolao_model.errors.SelectionQualityWarning")
def test_subsequent_weighted_fallback_on_sparse_scores(rng):
    engine = ConsolidationEngine(rng=rng)
    sparse = {1: 0.5, 2: 0.5, 3: 0.5}
    result = engine.subsequent(6, sparse)
    assert result.method == METHOD_WEIGHTED_FALLBACK
    assert {1, 2, 3} <= set(result.numbers)
    assert len(set(result.numbers)) == 6


def test_pool_size_capped():
    engine = ConsolidationEngine(rng=np.random.default_rng(0))
    assert engine.pool_size(6) == 24
    assert engine.pool_size(20) == 60
