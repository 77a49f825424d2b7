"""
Common Interface for Allocation Engines
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_FLOOR
from functools import reduce
from math import gcd
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from ..errors import InsufficientFunds
from ..tickets import TicketSizeLevel


@dataclass(frozen=True)
class PlanEntry:
    """How many wagers of one size the plan buys"""
    number_count: int
    cost: Decimal
    count: int

    @property
    def subtotal(self) -> Decimal:
        return self.cost * self.count

    def to_dict(self) -> Dict:
        return {
            'numberCount': self.number_count,
            'cost': f"{self.cost:.2f}",
            'count': self.count,
        }


@dataclass(frozen=True)
class AllocationPlan:
    """
    Decomposition of pooled funds into wagers.

    Invariant: total_cost <= total_funds; total_cost is maximal over all
    feasible decompositions, and total_bets is minimal at that cost.
    """
    total_funds: Decimal
    entries: Tuple[PlanEntry, ...]    # Sorted by number_count, descending
    total_cost: Decimal
    total_bets: int
    remaining_funds: Decimal
    method: str = 'dp'

    @property
    def largest(self) -> PlanEntry:
        return self.entries[0]

    def counts(self) -> Dict[int, int]:
        """{number_count: count}"""
        return {e.number_count: e.count for e in self.entries}

    def to_dict(self) -> Dict:
        return {
            'totalFunds': f"{self.total_funds:.2f}",
            'entries': [e.to_dict() for e in self.entries],
            'totalCost': f"{self.total_cost:.2f}",
            'totalBets': self.total_bets,
            'remainingFunds': f"{self.remaining_funds:.2f}",
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Export plan entries to DataFrame"""
        records = []
        for e in self.entries:
            records.append({
                'number_count': e.number_count,
                'cost': float(e.cost),
                'count': e.count,
                'subtotal': float(e.subtotal),
            })
        return pd.DataFrame(
            records, columns=['number_count', 'cost', 'count', 'subtotal']
        )


@dataclass
class CostGrid:
    """
    Integer grid shared by all solvers.

    One unit is the GCD of the level costs (in cents), so every level cost
    is a whole number of units and funds are floored onto the grid.
    """
    unit_cents: int
    funds_units: int
    level_units: List[int] = field(default_factory=list)

    @classmethod
    def build(cls, total_funds: Decimal, levels: Sequence[TicketSizeLevel]) -> 'CostGrid':
        level_cents = [_to_cents(lvl.cost) for lvl in levels]
        unit = reduce(gcd, level_cents)
        funds_cents = int(
            (Decimal(total_funds) * 100).to_integral_value(rounding=ROUND_FLOOR)
        )
        return cls(
            unit_cents=unit,
            funds_units=funds_cents // unit,
            level_units=[c // unit for c in level_cents]
        )

    def to_money(self, units: int) -> Decimal:
        return (Decimal(units) * self.unit_cents / 100).quantize(Decimal("0.01"))


def _to_cents(cost: Decimal) -> int:
    cents = Decimal(cost) * 100
    if cents != cents.to_integral_value():
        raise ValueError(f"Level cost {cost} has sub-cent precision")
    return int(cents)


class AllocationSolver(ABC):
    """Abstract base class for allocation engines"""

    def solve(
        self,
        total_funds: Decimal,
        levels: Sequence[TicketSizeLevel]
    ) -> AllocationPlan:
        """
        Decompose total_funds into wagers of the allowed sizes.

        Args:
            total_funds: Confirmed pooled funds (non-negative)
            levels: Allowed ticket sizes with their costs

        Returns:
            AllocationPlan maximizing spend, then minimizing wager count

        Raises:
            InsufficientFunds: funds below the cheapest level
            AllocationInfeasible: no decomposition found (configuration bug)
        """
        total_funds = Decimal(str(total_funds))
        if total_funds < 0:
            raise ValueError(f"Funds cannot be negative: {total_funds}")

        levels = list(levels)
        if not levels:
            raise ValueError("No ticket size levels configured")

        min_cost = min(lvl.cost for lvl in levels)
        if total_funds < min_cost:
            raise InsufficientFunds(total_funds, min_cost)

        grid = CostGrid.build(total_funds, levels)
        counts = self._solve_grid(grid, levels)
        return self._build_plan(total_funds, levels, counts)

    @abstractmethod
    def _solve_grid(
        self,
        grid: CostGrid,
        levels: Sequence[TicketSizeLevel]
    ) -> List[int]:
        """Return the wager count per level (aligned with levels)"""
        pass

    @abstractmethod
    def get_method_name(self) -> str:
        """Return the name of the allocation method"""
        pass

    def _build_plan(
        self,
        total_funds: Decimal,
        levels: Sequence[TicketSizeLevel],
        counts: Sequence[int]
    ) -> AllocationPlan:
        entries = [
            PlanEntry(lvl.number_count, lvl.cost, int(n))
            for lvl, n in zip(levels, counts) if n > 0
        ]
        entries.sort(key=lambda e: e.number_count, reverse=True)

        total_cost = sum((e.subtotal for e in entries), Decimal("0"))
        return AllocationPlan(
            total_funds=total_funds,
            entries=tuple(entries),
            total_cost=total_cost,
            total_bets=sum(e.count for e in entries),
            remaining_funds=total_funds - total_cost,
            method=self.get_method_name()
        )
