"""
Dynamic Programming Engine for Wager Allocation

Unbounded coin change over the funds grid, minimizing item count:
- State: dp[a] = minimum number of wagers whose costs sum to exactly a
- Transition: dp[a] = min over levels l of dp[a - c_l] + 1
- Predecessor: last level added at a (previous amount is a - c_l)

Selection priority after filling the table:
1. Largest reachable amount <= total funds (maximize spend)
2. Fewest wagers at that amount (guaranteed per amount by the DP)
"""
from typing import List, Sequence

import numpy as np

from .allocation_interface import AllocationSolver, CostGrid
from ..errors import AllocationInfeasible
from ..tickets import TicketSizeLevel

UNREACHABLE = np.iinfo(np.int64).max


class DPAllocationSolver(AllocationSolver):
    """
    Exact allocation by dynamic programming.

    Tables are fixed-size arrays indexed by amount (0..funds on the grid).
    """

    def get_method_name(self) -> str:
        return "dp"

    def _solve_grid(
        self,
        grid: CostGrid,
        levels: Sequence[TicketSizeLevel]
    ) -> List[int]:
        n = grid.funds_units
        bets, last_level = self._fill_table(n, grid.level_units, levels)

        best_amount = self._best_amount(bets)
        if best_amount is None:
            raise AllocationInfeasible(
                f"No wager combination fits {grid.to_money(n)} "
                f"with levels {[lvl.number_count for lvl in levels]}"
            )

        return self._backtrack(best_amount, last_level, grid.level_units, len(levels))

    def _fill_table(
        self,
        n: int,
        level_units: Sequence[int],
        levels: Sequence[TicketSizeLevel]
    ):
        bets = np.full(n + 1, UNREACHABLE, dtype=np.int64)
        last_level = np.full(n + 1, -1, dtype=np.int64)
        bets[0] = 0

        # Larger wagers first: on equal counts the first one found is kept
        order = sorted(range(len(levels)), key=lambda i: levels[i].number_count, reverse=True)

        for amount in range(1, n + 1):
            for idx in order:
                prev = amount - level_units[idx]
                if prev < 0 or bets[prev] == UNREACHABLE:
                    continue
                candidate = bets[prev] + 1
                if candidate < bets[amount]:
                    bets[amount] = candidate
                    last_level[amount] = idx

        return bets, last_level

    def _best_amount(self, bets: np.ndarray):
        """Largest reachable positive amount"""
        reachable = np.nonzero(bets[1:] != UNREACHABLE)[0]
        if len(reachable) == 0:
            return None
        return int(reachable[-1]) + 1

    def _backtrack(
        self,
        amount: int,
        last_level: np.ndarray,
        level_units: Sequence[int],
        n_levels: int
    ) -> List[int]:
        counts = [0] * n_levels
        current = amount
        while current > 0:
            idx = int(last_level[current])
            if idx < 0:
                raise AllocationInfeasible(f"Broken predecessor chain at {current}")
            counts[idx] += 1
            current -= level_units[idx]
        return counts
