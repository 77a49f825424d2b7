import random

import pytest

from bolao_model.config import CLOSURE_CONFIG, LotteryConfig
from bolao_model.selection import PatternAnalyzer
from bolao_model.selection.patterns import (
    VALID_SCORE, analyze_decades, analyze_runs, decade_requirements, normalize
)


@pytest.fixture
def analyzer():
    return PatternAnalyzer()


def issue(report, kind):
    return next(i for i in report.issues if i.type == kind)


def test_run_of_three_is_penalized(analyzer):
    report = analyzer.evaluate([10, 11, 12, 30, 31, 45])
    assert report.score == 85
    assert report.issue_types() == ['consecutive', 'multiples']
    assert issue(report, 'consecutive').severity == 'medium'
    assert issue(report, 'consecutive').data['maxRun'] == 3
    assert issue(report, 'multiples').severity == 'low'


def test_invariant_under_permutation(analyzer):
    numbers = [10, 11, 12, 30, 31, 45]
    shuffled = numbers[:]
    random.Random(3).shuffle(shuffled)
    assert analyzer.evaluate(shuffled) == analyzer.evaluate(numbers)


def test_run_of_four_is_high_severity(analyzer):
    report = analyzer.evaluate([3, 4, 5, 6, 25, 47])
    assert issue(report, 'consecutive').severity == 'high'
    assert report.score == 75


def test_run_of_five_and_single_heavy_decade(analyzer):
    report = analyzer.evaluate([1, 2, 3, 4, 5, 40])
    # -40 run, -20 two ranges with concentration above 0.70
    assert report.score == 40
    assert issue(report, 'distribution').severity == 'low'
    assert not report.is_valid


def test_two_adjacent_pairs_flagged_but_valid(analyzer):
    report = analyzer.evaluate([3, 4, 15, 16, 33, 52])
    assert report.issue_types() == ['consecutive_pairs']
    assert issue(report, 'consecutive_pairs').severity == 'medium'
    assert report.score == 85
    assert report.is_valid


def test_three_adjacent_pairs(analyzer):
    report = analyzer.evaluate([3, 4, 15, 16, 33, 34])
    # -30 for two extra pairs, -10 for two ranges at 0.67 concentration
    assert report.score == 60
    assert 'consecutive' not in report.issue_types()


def test_single_pair_is_fine(analyzer):
    report = analyzer.evaluate([7, 8, 22, 35, 49, 56])
    assert report.issues == ()
    assert report.score == 100


def test_extreme_parity(analyzer):
    report = analyzer.evaluate([1, 13, 25, 37, 49, 59])
    assert report.issue_types() == ['parity']
    assert issue(report, 'parity').severity == 'medium'
    assert report.score == 80


def test_mild_parity(analyzer):
    report = analyzer.evaluate([2, 13, 25, 28, 37, 43, 49, 59])
    assert issue(report, 'parity').severity == 'low'
    assert report.score == 90


def test_single_decade(analyzer):
    report = analyzer.evaluate([2, 5, 9, 13, 16, 19])
    assert issue(report, 'distribution').severity == 'high'
    assert report.score == 60


def test_multiples_of_ten(analyzer):
    report = analyzer.evaluate([10, 20, 30, 43, 51, 55])
    assert issue(report, 'multiples').severity == 'medium'
    assert report.score == 75


def test_large_wager_needs_all_three_ranges(analyzer):
    report = analyzer.evaluate([2, 7, 13, 19, 24, 31, 36, 39])
    assert report.issue_types() == ['distribution']
    assert issue(report, 'distribution').severity == 'low'
    assert report.score == 95


def test_seven_number_wager_needs_two_per_used_range(analyzer):
    report = analyzer.evaluate([3, 14, 19, 27, 33, 38, 52])
    assert report.issue_types() == ['distribution']
    # All three ranges used: no score penalty
    assert report.score == 100


def test_score_is_clamped(analyzer):
    report = analyzer.evaluate([1, 2, 3, 4, 5, 6, 7, 8, 9, 10])
    assert report.score >= 0


@pytest.mark.parametrize('numbers', [[], [0, 5, 9], [5, 5, 9], [61]])
def test_invalid_sets_rejected(analyzer, numbers):
    with pytest.raises(ValueError):
        analyzer.evaluate(numbers)


def test_fractional_numbers_rejected(analyzer):
    with pytest.raises(ValueError):
        analyzer.evaluate([10.7, 20, 33, 41, 52, 59])
    assert normalize([10.0, 3]) == [3, 10]


def test_number_space_follows_config():
    small = PatternAnalyzer(LotteryConfig(NUMBER_MAX=50))
    with pytest.raises(ValueError):
        small.evaluate([4, 17, 23, 38, 45, 55])
    assert PatternAnalyzer().evaluate([4, 17, 23, 38, 45, 55]).score >= 0
    assert VALID_SCORE == CLOSURE_CONFIG.VALID_QUALITY


def test_analyze_runs_structure():
    runs = analyze_runs([1, 2, 3, 10, 11, 20, 21, 40])
    assert runs.max_run == 3
    assert runs.runs == ((1, 3, 3),)
    assert runs.pairs == ((10, 11), (20, 21))
    assert runs.has_issue


def test_decade_requirements_by_size():
    assert decade_requirements(9) == (3, 2, 0.60)
    assert decade_requirements(8) == (3, 2, 0.60)
    assert decade_requirements(7) == (2, 2, 0.65)
    assert decade_requirements(6) == (2, 1, 0.70)


def test_decade_counts():
    decades = analyze_decades([1, 20, 21, 40, 41, 60])
    assert decades.counts == (2, 2, 2)
    assert decades.ranges() == {'1-20': 2, '21-40': 2, '41-60': 2}
