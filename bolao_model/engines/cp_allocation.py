"""
Constraint Programming Engine for Wager Allocation

Solves the same two-priority objective as the DP engine with OR-Tools
CP-SAT, lexicographically:
- Phase 1: maximize spend  S = sum_l c_l * x_l  subject to S <= F
- Phase 2: fix S = S*, minimize wagers  sum_l x_l

Variables: x_l in {0, ..., floor(F / c_l)} (wagers of level l)

Used to cross-check the DP engine.
"""
from typing import List, Sequence

from ortools.sat.python import cp_model

from .allocation_interface import AllocationSolver, CostGrid
from ..errors import AllocationInfeasible
from ..tickets import TicketSizeLevel


class CPAllocationSolver(AllocationSolver):
    """CP-SAT allocation engine"""

    def __init__(self, time_limit: int = 10, num_workers: int = 1):
        """
        Args:
            time_limit: CP solver time limit per phase in seconds
            num_workers: Parallel search workers
        """
        self.time_limit = time_limit
        self.num_workers = num_workers

    def get_method_name(self) -> str:
        return "cp"

    def _solve_grid(
        self,
        grid: CostGrid,
        levels: Sequence[TicketSizeLevel]
    ) -> List[int]:
        best_spend = self._maximize_spend(grid)
        if best_spend <= 0:
            raise AllocationInfeasible(
                f"CP-SAT found no wager combination for {grid.to_money(grid.funds_units)}"
            )
        return self._minimize_bets(grid, best_spend)

    def _build_model(self, grid: CostGrid):
        model = cp_model.CpModel()
        x = [
            model.NewIntVar(0, grid.funds_units // units, f'x_{i}')
            for i, units in enumerate(grid.level_units)
        ]
        spend = sum(units * var for units, var in zip(grid.level_units, x))
        model.Add(spend <= grid.funds_units)
        return model, x, spend

    def _new_solver(self) -> cp_model.CpSolver:
        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.time_limit
        solver.parameters.num_workers = self.num_workers
        return solver

    def _maximize_spend(self, grid: CostGrid) -> int:
        model, x, spend = self._build_model(grid)
        model.Maximize(spend)

        solver = self._new_solver()
        status = solver.Solve(model)
        if status != cp_model.OPTIMAL:
            raise AllocationInfeasible(
                f"CP-SAT spend phase ended with status {solver.StatusName(status)}"
            )
        return sum(u * solver.Value(v) for u, v in zip(grid.level_units, x))

    def _minimize_bets(self, grid: CostGrid, best_spend: int) -> List[int]:
        model, x, spend = self._build_model(grid)
        model.Add(spend == best_spend)
        model.Minimize(sum(x))

        solver = self._new_solver()
        status = solver.Solve(model)
        if status != cp_model.OPTIMAL:
            raise AllocationInfeasible(
                f"CP-SAT count phase ended with status {solver.StatusName(status)}"
            )
        return [solver.Value(v) for v in x]
