# Allocation Engines Module
from .allocation_interface import AllocationPlan, PlanEntry, AllocationSolver
from .dp_allocation import DPAllocationSolver
from .cp_allocation import CPAllocationSolver
from .financials import FinancialSummary, summarize_financials, total_confirmed_funds

__all__ = [
    'AllocationPlan',
    'PlanEntry',
    'AllocationSolver',
    'DPAllocationSolver',
    'CPAllocationSolver',
    'FinancialSummary',
    'summarize_financials',
    'total_confirmed_funds'
]
