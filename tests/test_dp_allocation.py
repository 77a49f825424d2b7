from decimal import Decimal
from itertools import product

import numpy as np
import pytest

from bolao_model.engines import DPAllocationSolver
from bolao_model.engines.dp_allocation import UNREACHABLE
from bolao_model.errors import InsufficientFunds
from bolao_model.tickets import TicketSizeTable


def brute_force(funds, costs):
    """(best cost, fewest bets) by enumeration"""
    best = (0, 0)
    ranges = [range(funds // c + 1) for c in costs]
    for combo in product(*ranges):
        cost = sum(n * c for n, c in zip(combo, costs))
        if cost > funds or cost == 0:
            continue
        bets = sum(combo)
        if cost > best[0] or (cost == best[0] and bets < best[1]):
            best = (cost, bets)
    return best


def test_prefers_fewer_wagers_at_same_spend(small_levels):
    plan = DPAllocationSolver().solve(Decimal("48"), small_levels)
    assert plan.counts() == {7: 1, 6: 1}
    assert plan.total_cost == Decimal("48")
    assert plan.total_bets == 2
    assert plan.remaining_funds == 0


def test_maximizes_spend_before_minimizing_count(small_levels):
    plan = DPAllocationSolver().solve(Decimal("206"), small_levels)
    assert plan.counts() == {8: 1, 6: 6}
    assert plan.total_cost == Decimal("204")
    assert plan.total_bets == 7
    assert plan.remaining_funds == Decimal("2")


def test_entries_sorted_by_size_descending(small_levels):
    plan = DPAllocationSolver().solve(Decimal("222"), small_levels)
    sizes = [e.number_count for e in plan.entries]
    assert sizes == sorted(sizes, reverse=True)
    assert plan.largest.number_count == 8


def test_matches_brute_force(small_levels):
    solver = DPAllocationSolver()
    for funds in range(6, 420, 7):
        plan = solver.solve(Decimal(funds), small_levels)
        best_cost, best_bets = brute_force(funds, [6, 42, 168])
        assert plan.total_cost == best_cost, funds
        assert plan.total_bets == best_bets, funds
        assert plan.total_cost <= funds


def test_default_table_plan(default_levels):
    plan = DPAllocationSolver().solve(Decimal("180"), default_levels)
    assert plan.counts() == {8: 1, 6: 2}
    assert plan.method == 'dp'


def test_fractional_funds_keep_exact_remainder(small_levels):
    plan = DPAllocationSolver().solve(Decimal("50.50"), small_levels)
    assert plan.total_cost == Decimal("48")
    assert plan.remaining_funds == Decimal("2.50")


def test_sub_unit_costs():
    levels = list(TicketSizeTable.from_mapping({6: "2.50", 7: "17.50"}))
    plan = DPAllocationSolver().solve(Decimal("20"), levels)
    assert plan.counts() == {7: 1, 6: 1}
    assert plan.total_cost == Decimal("20.00")


def test_insufficient_funds(small_levels):
    with pytest.raises(InsufficientFunds) as exc_info:
        DPAllocationSolver().solve(Decimal("5.99"), small_levels)
    assert exc_info.value.minimum_cost == Decimal("6")
    assert "6.00" in exc_info.value.breakdown['message']


def test_zero_funds_are_insufficient(small_levels):
    with pytest.raises(InsufficientFunds):
        DPAllocationSolver().solve(Decimal("0"), small_levels)


def test_negative_funds_rejected(small_levels):
    with pytest.raises(ValueError):
        DPAllocationSolver().solve(Decimal("-1"), small_levels)


def test_best_amount_none_when_nothing_reachable():
    bets = np.array([0, UNREACHABLE, UNREACHABLE], dtype=np.int64)
    assert DPAllocationSolver()._best_amount(bets) is None


def test_plan_dataframe(small_levels):
    df = DPAllocationSolver().solve(Decimal("206"), small_levels).to_dataframe()
    assert list(df.columns) == ['number_count', 'cost', 'count', 'subtotal']
    assert df['subtotal'].sum() == 204.0
