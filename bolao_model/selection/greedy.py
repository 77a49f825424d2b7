"""
Greedy Number Selector

Builds one wager from a ranked candidate pool, skipping candidates that would
introduce human-looking patterns. The strictness tier controls the cascade:
- low:    no pattern checks (take candidates in order)
- medium: runs + decade concentration
- high:   runs + decade concentration + parity

Concentration and parity checks only start once half of the wager is filled,
so the first picks follow the ranking freely.

If the greedy pass cannot fill the wager, a decade-balanced random fallback
completes it.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Set, Tuple, Union

import numpy as np

from .patterns import (
    DECADE_RANGES, NUMBER_MIN, NUMBER_MAX, PatternAnalyzer, QualityReport,
    analyze_decades, analyze_parity, analyze_runs, decade_requirements
)
from ..config import SELECTION_CONFIG, SelectionConfig


class Strictness(Enum):
    """How aggressively anti-pattern rules are enforced during selection"""
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'

    @property
    def checks_runs(self) -> bool:
        return self in (Strictness.MEDIUM, Strictness.HIGH)

    @property
    def checks_decades(self) -> bool:
        return self in (Strictness.MEDIUM, Strictness.HIGH)

    @property
    def checks_parity(self) -> bool:
        return self is Strictness.HIGH

    @classmethod
    def parse(cls, value: Union['Strictness', str]) -> 'Strictness':
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


@dataclass(frozen=True)
class CandidateNumber:
    """A number with its historical score and participant vote count"""
    value: int
    score: float = 0.0
    votes: int = 0

    def __post_init__(self):
        if not NUMBER_MIN <= self.value <= NUMBER_MAX:
            raise ValueError(f"Candidate out of range: {self.value}")
        if self.votes < 0:
            raise ValueError(f"Negative vote count for {self.value}")


# Selection methods
METHOD_GREEDY = 'greedy'
METHOD_DECADE_FALLBACK = 'decade_fallback'
METHOD_WEIGHTED_FALLBACK = 'weighted_fallback'


@dataclass
class SelectionResult:
    """Outcome of selecting one wager"""
    numbers: Tuple[int, ...]
    report: QualityReport
    strictness: Strictness
    method: str = METHOD_GREEDY
    skipped: List[Tuple[int, str]] = field(default_factory=list)
    pool_size: int = 0
    pool_reset: bool = False

    @property
    def quality(self) -> int:
        return self.report.score

    @property
    def used_fallback(self) -> bool:
        return self.method != METHOD_GREEDY


def decade_targets(count: int) -> Tuple[int, int, int]:
    """Per-decade split used by the random fallback"""
    if count >= 9:
        return 3, 3, 3
    if count == 8:
        return 3, 3, 2
    if count == 7:
        return 2, 2, 3
    return 2, 2, 2


class GreedySelector:
    """
    Pattern-aware greedy selection.

    Candidates are consumed in the order given (callers rank them by
    votes desc, then score desc).
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        analyzer: Optional[PatternAnalyzer] = None,
        config: Optional[SelectionConfig] = None
    ):
        """
        Args:
            rng: Random source for the fallback (default: fresh generator)
            analyzer: Pattern analyzer used to grade the result
            config: Selection settings (default: SELECTION_CONFIG)
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self.analyzer = analyzer or PatternAnalyzer()
        self.config = config or SELECTION_CONFIG

    def select(
        self,
        candidates: Sequence[Union[CandidateNumber, int]],
        count: int,
        strictness: Union[Strictness, str] = Strictness.MEDIUM,
        exclude: Iterable[int] = ()
    ) -> SelectionResult:
        """
        Select `count` distinct numbers.

        Args:
            candidates: Ranked candidate pool
            count: Wager size
            strictness: Rule tier
            exclude: Numbers never to pick (e.g. already used in this closure)

        Returns:
            SelectionResult with the sorted numbers and their quality report.
            The report is informational and never blocks the result.
        """
        strictness = Strictness.parse(strictness)
        if not 1 <= count <= NUMBER_MAX - NUMBER_MIN + 1:
            raise ValueError(f"Invalid wager size: {count}")

        excluded = set(exclude)
        selected, skipped = self._greedy_pass(candidates, count, strictness, excluded)

        method = METHOD_GREEDY
        if len(selected) < count:
            selected = self._decade_balanced_fill(selected, count, excluded)
            method = METHOD_DECADE_FALLBACK

        numbers = tuple(sorted(selected))
        return SelectionResult(
            numbers=numbers,
            report=self.analyzer.evaluate(numbers),
            strictness=strictness,
            method=method,
            skipped=skipped,
            pool_size=len(candidates)
        )

    def _greedy_pass(
        self,
        candidates: Sequence[Union[CandidateNumber, int]],
        count: int,
        strictness: Strictness,
        excluded: Set[int]
    ) -> Tuple[List[int], List[Tuple[int, str]]]:
        selected: List[int] = []
        skipped: List[Tuple[int, str]] = []
        _, _, max_concentration = decade_requirements(count)
        threshold = count * self.config.CONSTRAINT_START_FRACTION

        for candidate in candidates:
            if len(selected) == count:
                break

            value = candidate.value if isinstance(candidate, CandidateNumber) else int(candidate)
            if value in selected or value in excluded:
                continue

            trial = selected + [value]

            if strictness.checks_runs and analyze_runs(trial).has_issue:
                skipped.append((value, 'consecutive'))
                continue

            # First half of the wager is unconstrained
            constrained = len(selected) >= threshold

            # Over-concentrated sets may still take a number that dilutes them
            if constrained and strictness.checks_decades:
                trial_conc = analyze_decades(trial, count).max_concentration
                current_conc = analyze_decades(selected, count).max_concentration
                if trial_conc > max_concentration and trial_conc >= current_conc:
                    skipped.append((value, 'distribution'))
                    continue

            if constrained and strictness.checks_parity:
                ratio = analyze_parity(trial).ratio
                if not self.config.PARITY_GUARD_MIN <= ratio <= self.config.PARITY_GUARD_MAX:
                    skipped.append((value, 'parity'))
                    continue

            selected.append(value)

        return selected, skipped

    def _decade_balanced_fill(
        self,
        selected: List[int],
        count: int,
        excluded: Set[int]
    ) -> List[int]:
        """Complete a partial wager with random draws spread across decades"""
        chosen = list(selected)
        blocked = set(chosen) | excluded

        for (lo, hi), target in zip(DECADE_RANGES, decade_targets(count)):
            have = sum(1 for n in chosen if lo <= n <= hi)
            while have < target and len(chosen) < count:
                pool = [n for n in range(lo, hi + 1) if n not in blocked]
                if not pool:
                    break
                pick = self._draw_avoiding_runs(pool, chosen)
                chosen.append(pick)
                blocked.add(pick)
                have += 1

        # Sizes beyond the split, or exhausted decades
        while len(chosen) < count:
            pool = [n for n in range(NUMBER_MIN, NUMBER_MAX + 1) if n not in blocked]
            if not pool:
                pool = [n for n in range(NUMBER_MIN, NUMBER_MAX + 1) if n not in chosen]
            pick = self._draw_avoiding_runs(pool, chosen)
            chosen.append(pick)
            blocked.add(pick)

        return chosen

    def _draw_avoiding_runs(self, pool: Sequence[int], chosen: List[int]) -> int:
        """Uniform draw, redrawn while it creates a run; last draw wins"""
        pick = int(self.rng.choice(pool))
        for _ in range(self.config.FALLBACK_MAX_ATTEMPTS - 1):
            if not analyze_runs(chosen + [pick]).has_issue:
                break
            pick = int(self.rng.choice(pool))
        return pick
