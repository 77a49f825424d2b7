"""
Ticket Size Table

Static mapping of wager size (how many numbers are picked) to its fixed cost.
Costs must be strictly increasing with the number of picks.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List

from scipy.special import comb


@dataclass(frozen=True)
class TicketSizeLevel:
    """One allowed wager size"""
    number_count: int
    cost: Decimal

    def __post_init__(self):
        if self.number_count <= 0:
            raise ValueError(f"Invalid number count: {self.number_count}")
        if not isinstance(self.cost, Decimal):
            object.__setattr__(self, 'cost', Decimal(str(self.cost)))
        if self.cost <= 0:
            raise ValueError(f"Cost must be positive for {self.number_count} numbers")


class TicketSizeTable:
    """
    Ordered set of ticket size levels.

    Invariant: cost strictly increasing in number_count.
    """

    def __init__(self, levels: Iterable[TicketSizeLevel]):
        ordered = sorted(levels, key=lambda lvl: lvl.number_count)
        if not ordered:
            raise ValueError("Ticket size table needs at least one level")

        for prev, curr in zip(ordered, ordered[1:]):
            if curr.number_count == prev.number_count:
                raise ValueError(f"Duplicate level for {curr.number_count} numbers")
            if curr.cost <= prev.cost:
                raise ValueError(
                    f"Cost must increase with size: {prev.number_count} -> "
                    f"{curr.number_count} ({prev.cost} -> {curr.cost})"
                )
        self.levels: List[TicketSizeLevel] = ordered

    @classmethod
    def from_mapping(cls, costs: Dict[int, object]) -> 'TicketSizeTable':
        """Build from {number_count: cost}"""
        return cls(
            TicketSizeLevel(int(k), Decimal(str(v))) for k, v in costs.items()
        )

    @classmethod
    def combinatorial(
        cls,
        base_cost: Decimal,
        base_picks: int = 6,
        max_picks: int = 10
    ) -> 'TicketSizeTable':
        """
        Price each size by the number of base-size combinations it covers.

        A k-number wager covers C(k, base_picks) simple wagers.
        """
        return cls(
            TicketSizeLevel(k, base_cost * comb(k, base_picks, exact=True))
            for k in range(base_picks, max_picks + 1)
        )

    @property
    def min_cost(self) -> Decimal:
        return self.levels[0].cost

    def get(self, number_count: int) -> TicketSizeLevel:
        for level in self.levels:
            if level.number_count == number_count:
                return level
        raise KeyError(number_count)

    def __iter__(self):
        return iter(self.levels)

    def __len__(self) -> int:
        return len(self.levels)

    def to_dict(self) -> Dict[int, str]:
        return {lvl.number_count: f"{lvl.cost:.2f}" for lvl in self.levels}
