"""
Consolidation Engine

Turns votes and scores into the numbers of each wager of a closure:
- Flagship wager (largest size, once per closure): democratic ranking by
  participant votes, score as tiebreaker
- Subsequent wagers: score ranking over numbers not yet used in the closure

One engine instance tracks the used numbers of one closure.
"""
import warnings
from typing import Iterable, List, Mapping, Optional, Set

import numpy as np

from .greedy import (
    CandidateNumber, GreedySelector, SelectionResult, Strictness,
    METHOD_WEIGHTED_FALLBACK
)
from .patterns import NUMBER_MIN, NUMBER_MAX, PatternAnalyzer
from .weighted import generate_weighted_numbers
from ..config import SELECTION_CONFIG, SelectionConfig
from ..errors import SelectionQualityWarning


def rank_by_votes(
    votes: Mapping[int, int],
    scores: Mapping[int, float]
) -> List[CandidateNumber]:
    """All numbers ranked by (votes desc, score desc, value asc)"""
    ranked = [
        CandidateNumber(n, float(scores.get(n, 0.0)), int(votes.get(n, 0)))
        for n in range(NUMBER_MIN, NUMBER_MAX + 1)
    ]
    ranked.sort(key=lambda c: (-c.votes, -c.score, c.value))
    return ranked


def rank_by_score(
    scores: Mapping[int, float],
    available: Iterable[int]
) -> List[CandidateNumber]:
    """Available numbers that have a score, ranked by (score desc, value asc)"""
    ranked = [
        CandidateNumber(n, float(scores[n]))
        for n in available if n in scores
    ]
    ranked.sort(key=lambda c: (-c.score, c.value))
    return ranked


class ConsolidationEngine:
    """Generates the wagers of a single closure"""

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        selector: Optional[GreedySelector] = None,
        config: Optional[SelectionConfig] = None
    ):
        self.config = config or SELECTION_CONFIG
        self.rng = rng if rng is not None else np.random.default_rng()
        self.selector = selector or GreedySelector(rng=self.rng, config=self.config)
        self.analyzer: PatternAnalyzer = self.selector.analyzer
        self.used_numbers: Set[int] = set()

    def pool_size(self, count: int) -> int:
        return min(count * self.config.POOL_MULTIPLIER, NUMBER_MAX - NUMBER_MIN + 1)

    def flagship(
        self,
        count: int,
        votes: Mapping[int, int],
        scores: Mapping[int, float]
    ) -> SelectionResult:
        """
        Democratic wager from participant votes, score as tiebreaker.

        Quality below FLAGSHIP_MIN_QUALITY is a warning, not an error.
        """
        ranked = rank_by_votes(votes, scores)
        pool = ranked[:self.pool_size(count)]

        result = self.selector.select(pool, count, Strictness.HIGH)
        self._check_quality(result, self.config.FLAGSHIP_MIN_QUALITY, 'flagship')
        self.mark_used(result.numbers)
        return result

    def subsequent(
        self,
        count: int,
        scores: Mapping[int, float]
    ) -> SelectionResult:
        """
        Score-based wager avoiding numbers already used in this closure.

        The used set is reset when fewer than `count` numbers remain. With too
        few scored candidates, falls back to a score-weighted random draw.
        """
        available = [
            n for n in range(NUMBER_MIN, NUMBER_MAX + 1) if n not in self.used_numbers
        ]
        pool_reset = False
        if len(available) < count:
            self.used_numbers.clear()
            available = list(range(NUMBER_MIN, NUMBER_MAX + 1))
            pool_reset = True

        pool = rank_by_score(scores, available)[:self.pool_size(count)]

        if len(pool) >= count:
            result = self.selector.select(
                pool, count, Strictness.HIGH, exclude=self.used_numbers
            )
        else:
            numbers = tuple(generate_weighted_numbers(scores, count, self.rng))
            result = SelectionResult(
                numbers=numbers,
                report=self.analyzer.evaluate(numbers),
                strictness=Strictness.LOW,
                method=METHOD_WEIGHTED_FALLBACK,
                pool_size=len(pool)
            )

        result.pool_reset = pool_reset
        self._check_quality(result, self.config.SUBSEQUENT_MIN_QUALITY, 'subsequent')
        self.mark_used(result.numbers)
        return result

    def mark_used(self, numbers: Iterable[int]):
        self.used_numbers.update(numbers)

    def _check_quality(self, result: SelectionResult, floor: int, kind: str):
        if result.quality < floor:
            warnings.warn(
                f"{kind.capitalize()} wager {list(result.numbers)} scored "
                f"{result.quality}/100 (floor {floor})",
                SelectionQualityWarning
            )
