import numpy as np
import pytest

from bolao_model.selection import CandidateNumber, GreedySelector, Strictness
from bolao_model.selection.greedy import (
    METHOD_DECADE_FALLBACK, METHOD_GREEDY, decade_targets
)
from bolao_model.selection.patterns import analyze_decades


def candidates(values):
    return [CandidateNumber(v, score=1.0) for v in values]


def test_strictness_cascade():
    assert not Strictness.LOW.checks_runs
    assert Strictness.MEDIUM.checks_runs and Strictness.MEDIUM.checks_decades
    assert not Strictness.MEDIUM.checks_parity
    assert Strictness.HIGH.checks_parity
    assert Strictness.parse('HIGH') is Strictness.HIGH


def test_low_strictness_takes_candidates_in_order(rng):
    result = GreedySelector(rng=rng).select(candidates(range(1, 10)), 6, Strictness.LOW)
    assert result.numbers == (1, 2, 3, 4, 5, 6)
    assert result.method == METHOD_GREEDY
    assert result.report.score < 60


def test_medium_skips_runs(rng):
    pool = candidates([10, 11, 12, 25, 40, 55, 3, 33])
    result = GreedySelector(rng=rng).select(pool, 6, Strictness.MEDIUM)
    assert result.numbers == (3, 10, 11, 25, 40, 55)
    assert (12, 'consecutive') in result.skipped
    assert not result.used_fallback


def test_medium_skips_second_adjacent_pair(rng):
    pool = candidates([10, 11, 20, 21, 35, 50, 57, 44])
    result = GreedySelector(rng=rng).select(pool, 6, Strictness.MEDIUM)
    assert (21, 'consecutive') in result.skipped
    assert len(result.numbers) == 6
    assert len(set(result.numbers)) == 6


def test_medium_ignores_parity(rng):
    pool = candidates([2, 14, 26, 38, 50, 58, 7, 21, 33, 45, 51])
    result = GreedySelector(rng=rng).select(pool, 6, Strictness.MEDIUM)
    assert result.numbers == (2, 14, 26, 38, 50, 58)


def test_high_enforces_parity_after_half(rng):
    pool = candidates([2, 14, 26, 38, 50, 58, 7, 21, 33, 45, 51])
    result = GreedySelector(rng=rng).select(pool, 6, Strictness.HIGH)
    assert result.numbers == (2, 14, 21, 26, 33, 45)
    assert (38, 'parity') in result.skipped
    assert (7, 'distribution') in result.skipped
    assert result.method == METHOD_GREEDY


def test_concentrated_start_accepts_diluting_numbers(rng):
    pool = candidates([2, 5, 9, 13, 16, 19, 25, 33, 44, 51, 38, 57])
    result = GreedySelector(rng=rng).select(pool, 6, Strictness.HIGH)
    assert result.numbers == (2, 5, 9, 25, 33, 44)
    assert result.method == METHOD_GREEDY
    assert [v for v, reason in result.skipped if reason == 'distribution'] == [13, 16, 19]


def test_accepts_plain_integers(rng):
    result = GreedySelector(rng=rng).select([5, 18, 27, 39, 44, 58], 6, 'high')
    assert result.numbers == (5, 18, 27, 39, 44, 58)


def test_decade_fallback_fills_short_pool(rng):
    result = GreedySelector(rng=rng).select(candidates([1, 2, 3]), 6, Strictness.HIGH)
    assert result.method == METHOD_DECADE_FALLBACK
    assert {1, 2} <= set(result.numbers)
    assert 3 not in result.numbers
    assert analyze_decades(result.numbers).counts == (2, 2, 2)


@pytest.mark.parametrize('count,expected', [
    (6, (2, 2, 2)),
    (7, (2, 2, 3)),
    (8, (3, 3, 2)),
    (9, (3, 3, 3)),
])
def test_fallback_split_by_size(count, expected):
    selector = GreedySelector(rng=np.random.default_rng(count))
    result = selector.select([], count, Strictness.HIGH)
    assert decade_targets(count) == expected
    assert analyze_decades(result.numbers).counts == expected


def test_fallback_tops_up_large_wagers(rng):
    result = GreedySelector(rng=rng).select([], 10, Strictness.HIGH)
    assert len(result.numbers) == 10
    assert list(result.numbers) == sorted(set(result.numbers))


def test_fallback_respects_exclusions(rng):
    excluded = set(range(1, 11)) | set(range(41, 51))
    result = GreedySelector(rng=rng).select([], 6, Strictness.HIGH, exclude=excluded)
    assert not excluded & set(result.numbers)


def test_same_seed_same_selection():
    a = GreedySelector(rng=np.random.default_rng(11)).select([], 8, Strictness.HIGH)
    b = GreedySelector(rng=np.random.default_rng(11)).select([], 8, Strictness.HIGH)
    assert a.numbers == b.numbers


@pytest.mark.parametrize('count', [0, 61])
def test_invalid_count(rng, count):
    with pytest.raises(ValueError):
        GreedySelector(rng=rng).select(candidates([1, 2]), count)


def test_candidate_out_of_range():
    with pytest.raises(ValueError):
        CandidateNumber(61)
