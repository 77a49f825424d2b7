"""
Exceptions and warning categories for the closure engine
"""
from decimal import Decimal
from typing import Dict, Optional


class BolaoError(Exception):
    """Base class for closure engine errors"""


class InsufficientFunds(BolaoError):
    """Funds are below the cheapest wager; closure aborts without changes"""

    def __init__(self, total_funds: Decimal, minimum_cost: Decimal):
        self.total_funds = total_funds
        self.minimum_cost = minimum_cost
        self.breakdown: Dict[str, str] = {
            'message': (
                f"Collected: ${total_funds:.2f}. "
                f"Required: ${minimum_cost:.2f} minimum"
            )
        }
        super().__init__(
            f"Insufficient funds for the minimum wager (${minimum_cost:.2f})"
        )


class AllocationInfeasible(BolaoError):
    """No decomposition found even though funds cover the minimum cost"""


class BolaoNotFound(BolaoError):
    """Pool does not exist"""

    def __init__(self, pool_id: str):
        self.pool_id = pool_id
        super().__init__(f"Bolao not found: {pool_id}")


class BolaoNotOpen(BolaoError):
    """Closure requested for a pool that is not open"""

    def __init__(self, pool_id: str, status: Optional[str] = None):
        self.pool_id = pool_id
        self.status = status
        detail = f" (status: {status})" if status else ""
        super().__init__(f"Bolao {pool_id} is not open{detail}")


class BolaoNotClosed(BolaoError):
    """Closure info requested for a pool that has not been closed"""

    def __init__(self, pool_id: str):
        self.pool_id = pool_id
        super().__init__(f"Bolao {pool_id} is not closed")


class SelectionQualityWarning(UserWarning):
    """A wager fell below its advisory quality floor"""
