"""
Pattern Analyzer

Scores a set of lottery numbers against four "human pattern" rules:
1. Runs: consecutive numbers (3+ in a row, or repeated adjacent pairs)
2. Parity: share of even numbers
3. Decade spread: coverage of 1-20, 21-40, 41-60
4. Multiples: multiples of 5 and 10

Produces a quality score (0-100, higher = less human-looking) and a list of
advisory issues. Pure functions only; the result depends on the sorted set.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import CLOSURE_CONFIG, LOTTERY_CONFIG, LotteryConfig

DECADE_RANGES: Tuple[Tuple[int, int], ...] = ((1, 20), (21, 40), (41, 60))
NUMBER_MIN = LOTTERY_CONFIG.NUMBER_MIN
NUMBER_MAX = LOTTERY_CONFIG.NUMBER_MAX

# Parity: balanced band and extreme band
PARITY_BALANCED = (0.30, 0.70)
PARITY_EXTREME = (0.20, 0.80)

# Multiples
MAX_RATIO_FIVES = 0.40
MAX_TENS = 2
PENALTY_RATIO_FIVES = 0.50

VALID_SCORE = CLOSURE_CONFIG.VALID_QUALITY

SEVERITY_LOW = 'low'
SEVERITY_MEDIUM = 'medium'
SEVERITY_HIGH = 'high'


def _as_number(n) -> int:
    value = int(n)
    if value != n:
        raise ValueError(f"Not an integer number: {n!r}")
    return value


def normalize(numbers: Iterable[int], space: Optional[range] = None) -> List[int]:
    """Sorted list of distinct integers in range; raises ValueError otherwise"""
    space = space if space is not None else LOTTERY_CONFIG.number_space()
    values = [_as_number(n) for n in numbers]
    if not values:
        raise ValueError("Cannot analyze an empty number set")
    if len(set(values)) != len(values):
        raise ValueError(f"Duplicate numbers in {sorted(values)}")
    for n in values:
        if n not in space:
            raise ValueError(f"Number out of range [{space.start}, {space.stop - 1}]: {n}")
    return sorted(values)


def decade_index(n: int) -> int:
    for i, (lo, hi) in enumerate(DECADE_RANGES):
        if lo <= n <= hi:
            return i
    raise ValueError(f"Number outside decade ranges: {n}")


@dataclass(frozen=True)
class RunAnalysis:
    """Consecutive-number structure of a sorted set"""
    max_run: int
    runs: Tuple[Tuple[int, int, int], ...]   # (start, end, length) for length >= 3
    pairs: Tuple[Tuple[int, int], ...]       # runs of length exactly 2

    @property
    def pair_count(self) -> int:
        return len(self.pairs)

    @property
    def has_long_run(self) -> bool:
        return self.max_run >= 3

    @property
    def has_repeated_pairs(self) -> bool:
        return self.pair_count > 1

    @property
    def has_issue(self) -> bool:
        return self.has_long_run or self.has_repeated_pairs


def analyze_runs(numbers: Sequence[int]) -> RunAnalysis:
    ordered = sorted(numbers)
    if not ordered:
        return RunAnalysis(0, (), ())

    runs = []
    pairs = []
    max_run = 1
    start = ordered[0]
    length = 1

    def close(end):
        if length >= 3:
            runs.append((start, end, length))
        elif length == 2:
            pairs.append((start, end))

    for prev, curr in zip(ordered, ordered[1:]):
        if curr == prev + 1:
            length += 1
            max_run = max(max_run, length)
        else:
            close(prev)
            start = curr
            length = 1
    close(ordered[-1])

    return RunAnalysis(max_run, tuple(runs), tuple(pairs))


@dataclass(frozen=True)
class ParityAnalysis:
    even_count: int
    odd_count: int
    ratio: float

    @property
    def is_balanced(self) -> bool:
        return PARITY_BALANCED[0] <= self.ratio <= PARITY_BALANCED[1]

    @property
    def is_extreme(self) -> bool:
        return self.ratio < PARITY_EXTREME[0] or self.ratio > PARITY_EXTREME[1]


def analyze_parity(numbers: Sequence[int]) -> ParityAnalysis:
    even = sum(1 for n in numbers if n % 2 == 0)
    total = len(numbers)
    return ParityAnalysis(even, total - even, even / total if total else 0.0)


def decade_requirements(size: int) -> Tuple[int, int, float]:
    """
    Decade rule for a wager of the given size.

    Returns (min ranges used, min members per used range, max concentration)
    """
    if size >= 8:
        return 3, 2, 0.60
    if size == 7:
        return 2, 2, 0.65
    return 2, 1, 0.70


@dataclass(frozen=True)
class DecadeAnalysis:
    counts: Tuple[int, int, int]
    size: int

    @property
    def diversity(self) -> int:
        return sum(1 for c in self.counts if c > 0)

    @property
    def max_concentration(self) -> float:
        total = sum(self.counts)
        return max(self.counts) / total if total else 0.0

    @property
    def is_well_distributed(self) -> bool:
        min_ranges, min_members, max_conc = decade_requirements(self.size)
        if self.diversity < min_ranges:
            return False
        if any(0 < c < min_members for c in self.counts):
            return False
        return self.max_concentration <= max_conc

    def ranges(self) -> Dict[str, int]:
        return {f"{lo}-{hi}": c for (lo, hi), c in zip(DECADE_RANGES, self.counts)}


def analyze_decades(numbers: Sequence[int], size: Optional[int] = None) -> DecadeAnalysis:
    counts = [0, 0, 0]
    for n in numbers:
        counts[decade_index(n)] += 1
    return DecadeAnalysis(tuple(counts), size if size is not None else len(numbers))


@dataclass(frozen=True)
class MultiplesAnalysis:
    multiples_of_5: int
    multiples_of_10: int
    ratio_fives: float

    @property
    def has_issue(self) -> bool:
        return self.ratio_fives > MAX_RATIO_FIVES or self.multiples_of_10 > MAX_TENS


def analyze_multiples(numbers: Sequence[int]) -> MultiplesAnalysis:
    fives = sum(1 for n in numbers if n % 5 == 0)
    tens = sum(1 for n in numbers if n % 10 == 0)
    return MultiplesAnalysis(fives, tens, fives / len(numbers) if numbers else 0.0)


@dataclass(frozen=True)
class QualityIssue:
    """One advisory pattern finding"""
    type: str
    severity: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'severity': self.severity,
            'message': self.message,
            'data': self.data,
        }


@dataclass(frozen=True)
class QualityReport:
    """Quality score 0-100 and the issues behind it"""
    numbers: Tuple[int, ...]
    score: int
    issues: Tuple[QualityIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return self.score >= VALID_SCORE

    def issue_types(self) -> List[str]:
        return [i.type for i in self.issues]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'numbers': list(self.numbers),
            'score': self.score,
            'isValid': self.is_valid,
            'issues': [i.to_dict() for i in self.issues],
        }


class PatternAnalyzer:
    """
    Evaluate number sets against the anti-pattern rules.

    Stateless; evaluate() is invariant under permutation of its input.
    """

    def __init__(self, config: Optional[LotteryConfig] = None):
        self.config = config or LOTTERY_CONFIG

    def evaluate(self, numbers: Iterable[int]) -> QualityReport:
        ordered = normalize(numbers, self.config.number_space())
        issues = []

        runs = analyze_runs(ordered)
        if runs.has_long_run:
            issues.append(QualityIssue(
                type='consecutive',
                severity=SEVERITY_HIGH if runs.max_run >= 4 else SEVERITY_MEDIUM,
                message=f"Run of {runs.max_run} consecutive numbers",
                data={'runs': [list(r) for r in runs.runs], 'maxRun': runs.max_run}
            ))
        if runs.has_repeated_pairs:
            issues.append(QualityIssue(
                type='consecutive_pairs',
                severity=SEVERITY_MEDIUM,
                message=f"{runs.pair_count} adjacent pairs",
                data={'pairs': [list(p) for p in runs.pairs]}
            ))

        parity = analyze_parity(ordered)
        if not parity.is_balanced:
            issues.append(QualityIssue(
                type='parity',
                severity=SEVERITY_MEDIUM if parity.is_extreme else SEVERITY_LOW,
                message=f"Imbalance: {parity.even_count} even, {parity.odd_count} odd",
                data={
                    'evenCount': parity.even_count,
                    'oddCount': parity.odd_count,
                    'ratio': round(parity.ratio, 2)
                }
            ))

        decades = analyze_decades(ordered)
        if not decades.is_well_distributed:
            issues.append(QualityIssue(
                type='distribution',
                severity=SEVERITY_HIGH if decades.diversity == 1 else SEVERITY_LOW,
                message=f"Concentrated in {decades.diversity} range(s)",
                data=decades.ranges()
            ))

        multiples = analyze_multiples(ordered)
        if multiples.has_issue:
            issues.append(QualityIssue(
                type='multiples',
                severity=SEVERITY_MEDIUM if multiples.multiples_of_10 > MAX_TENS else SEVERITY_LOW,
                message=(
                    f"{multiples.multiples_of_5} multiples of 5, "
                    f"{multiples.multiples_of_10} of 10"
                ),
                data={
                    'multiplesOf5': multiples.multiples_of_5,
                    'multiplesOf10': multiples.multiples_of_10,
                    'ratio5': round(multiples.ratio_fives, 2)
                }
            ))

        score = self._score(runs, parity, decades, multiples)
        return QualityReport(tuple(ordered), score, tuple(issues))

    def score(self, numbers: Iterable[int]) -> int:
        return self.evaluate(numbers).score

    def _score(
        self,
        runs: RunAnalysis,
        parity: ParityAnalysis,
        decades: DecadeAnalysis,
        multiples: MultiplesAnalysis
    ) -> int:
        score = 100

        # Runs
        if runs.max_run >= 5:
            score -= 40
        elif runs.max_run == 4:
            score -= 25
        elif runs.max_run == 3:
            score -= 15
        if runs.has_repeated_pairs:
            score -= 15 * (runs.pair_count - 1)

        # Parity
        if not parity.is_balanced:
            score -= 20 if parity.is_extreme else 10

        # Decades
        if decades.diversity == 1:
            score -= 40
        elif decades.diversity == 2:
            conc = decades.max_concentration
            if conc > 0.70:
                score -= 20
            elif conc > 0.60:
                score -= 10
            else:
                score -= 5

        # Multiples
        if multiples.multiples_of_10 > MAX_TENS:
            score -= 15
        if multiples.ratio_fives > PENALTY_RATIO_FIVES:
            score -= 10

        return max(0, min(100, score))
