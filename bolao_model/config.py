"""
Global Configuration for the Bolao Closure Engine
"""
from pathlib import Path
from dataclasses import dataclass
from decimal import Decimal

from .tickets import TicketSizeTable

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
OUTPUT_DIR = PROJECT_ROOT / "outputs"


@dataclass
class LotteryConfig:
    """Number space and ticket pricing of the lottery"""

    NUMBER_MIN: int = 1
    NUMBER_MAX: int = 60

    # Cheapest wager picks 6 numbers; bigger wagers cost C(k, 6) simple ones
    BASE_PICKS: int = 6
    BASE_COST: Decimal = Decimal("6.00")
    MAX_PICKS: int = 10

    def number_space(self) -> range:
        return range(self.NUMBER_MIN, self.NUMBER_MAX + 1)

    def ticket_table(self) -> TicketSizeTable:
        """Default ticket size table (6:$6, 7:$42, 8:$168, ...)"""
        return TicketSizeTable.combinatorial(
            self.BASE_COST, self.BASE_PICKS, self.MAX_PICKS
        )


@dataclass
class SelectionConfig:
    """Number selection hyperparameters"""

    # Candidate pool is this many times the wager size
    POOL_MULTIPLIER: int = 4

    # Soft quality floors (logged, never blocking)
    FLAGSHIP_MIN_QUALITY: int = 70
    SUBSEQUENT_MIN_QUALITY: int = 65

    # Decade-balanced fallback: redraws allowed to avoid runs
    FALLBACK_MAX_ATTEMPTS: int = 10

    # Concentration and parity guards start once this share is filled
    CONSTRAINT_START_FRACTION: float = 0.5

    # Parity guard band used while selecting (strictness=high)
    PARITY_GUARD_MIN: float = 0.20
    PARITY_GUARD_MAX: float = 0.80


@dataclass
class ClosureConfig:
    """Closure orchestration settings"""

    # Numbers auto-generated for a participant without a selection
    AUTO_PICK_COUNT: int = 6

    # Quality bands for the audit summary
    HIGH_QUALITY: int = 80
    VALID_QUALITY: int = 60


# Global instances
LOTTERY_CONFIG = LotteryConfig()
SELECTION_CONFIG = SelectionConfig()
CLOSURE_CONFIG = ClosureConfig()
