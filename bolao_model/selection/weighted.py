"""
Score-weighted random draws

Efraimidis-Spirakis sampling without replacement: each item gets the key
log(u) / w with u ~ U(0, 1); the k largest keys win. Inclusion probability
is proportional to the weight at every step.
"""
from typing import Iterable, List, Mapping, Sequence

import numpy as np

from .patterns import NUMBER_MIN, NUMBER_MAX

# Floor so zero or negative scores stay drawable (last resort only)
MIN_WEIGHT = 1e-9


def weighted_sample_without_replacement(
    items: Sequence[int],
    weights: Sequence[float],
    k: int,
    rng: np.random.Generator
) -> List[int]:
    """Return k distinct items (sorted) sampled proportionally to weights"""
    if len(items) != len(weights):
        raise ValueError("items and weights must have the same length")
    k = min(k, len(items))
    if k <= 0:
        return []

    w = np.asarray(weights, dtype=float)
    if not np.any(w > 0):
        w = np.ones(len(items))
    w = np.maximum(w, MIN_WEIGHT)

    u = rng.random(len(items))
    with np.errstate(divide='ignore'):
        keys = np.log(u) / w

    order = np.argsort(-keys, kind='stable')
    return sorted(int(items[i]) for i in order[:k])


def generate_weighted_numbers(
    scores: Mapping[int, float],
    count: int,
    rng: np.random.Generator,
    exclude: Iterable[int] = ()
) -> List[int]:
    """Draw `count` lottery numbers with probability proportional to score"""
    excluded = set(exclude)
    space = [n for n in range(NUMBER_MIN, NUMBER_MAX + 1) if n not in excluded]
    weights = [float(scores.get(n, 0.0)) for n in space]
    return weighted_sample_without_replacement(space, weights, count, rng)
