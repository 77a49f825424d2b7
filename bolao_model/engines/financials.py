"""
Financial summary of a pool's allocation
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, Optional, Sequence

from .allocation_interface import AllocationPlan, AllocationSolver, PlanEntry
from .dp_allocation import DPAllocationSolver
from ..tickets import TicketSizeLevel


@dataclass
class FinancialSummary:
    """Plan plus the headline figures shown to the pool admin"""
    total_funds: Decimal
    plan: AllocationPlan
    bet_level: int                 # Size of the largest wager bought
    bet_cost: Decimal              # Spent on the largest size
    surplus_bets: int              # Wagers of any smaller size
    surplus_funds: Decimal         # Funds not spent on the largest size
    breakdown: Dict[str, str] = field(default_factory=dict)

    @property
    def total_bets(self) -> int:
        return self.plan.total_bets

    @property
    def remaining_funds(self) -> Decimal:
        return self.plan.remaining_funds


def total_confirmed_funds(
    quota_quantities: Iterable[Optional[int]],
    quota_value: Decimal
) -> Decimal:
    """Pooled funds from confirmed participations (missing quantity = 1 quota)"""
    quotas = sum((q if q else 1) for q in quota_quantities)
    return Decimal(quotas) * Decimal(str(quota_value))


def _describe(entry: PlanEntry) -> str:
    noun = 'wager' if entry.count == 1 else 'wagers'
    return f"{entry.count} {noun} of {entry.number_count} numbers (${entry.subtotal:.2f})"


def summarize_financials(
    total_funds: Decimal,
    levels: Sequence[TicketSizeLevel],
    solver: Optional[AllocationSolver] = None
) -> FinancialSummary:
    """
    Solve the allocation and describe it.

    Raises InsufficientFunds (with a breakdown) below the cheapest level.
    """
    solver = solver or DPAllocationSolver()
    plan = solver.solve(total_funds, levels)

    largest = plan.largest
    others = plan.entries[1:]

    remaining = plan.remaining_funds
    remaining_text = f"${remaining:.2f} unused"
    if remaining > 0:
        remaining_text += " (not enough for another wager)"

    breakdown = {
        'main_bet': _describe(largest),
        'surplus': ', '.join(_describe(e) for e in others) if others else 'No additional wagers',
        'remaining': remaining_text,
    }

    return FinancialSummary(
        total_funds=plan.total_funds,
        plan=plan,
        bet_level=largest.number_count,
        bet_cost=largest.subtotal,
        surplus_bets=sum(e.count for e in others),
        surplus_funds=plan.total_funds - largest.subtotal,
        breakdown=breakdown
    )
