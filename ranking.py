"""
Recency-weighted article ordering.

Produces a full shuffle of dated items that favours recent content without
being a strict date sort: each position is filled by a weighted draw over the
items still remaining, where the i-th most recent of n remaining items has
weight ((n - i) / n) ** 2. Weights are recomputed after every draw because
they depend on rank within the remaining pool.
"""
import random
from itertools import accumulate
from typing import Any, Callable, List, Optional, Sequence


def _item_date(item: Any) -> Any:
    if isinstance(item, dict):
        return item["date"]
    return item.date


def recency_weights(size: int) -> List[float]:
    """Weights for a pool of `size` items ordered most recent first."""
    return [((size - i) / size) ** 2 for i in range(size)]


def select_index(weights: Sequence[float], threshold: float) -> int:
    """
    Inverse-CDF walk: return the first index whose running sum of weights
    reaches `threshold`. A threshold landing exactly on a bucket boundary
    maps to the earlier index.
    """
    if not weights:
        raise ValueError("cannot select from an empty weight vector")
    for i, running in enumerate(accumulate(weights)):
        if running >= threshold:
            return i
    # float accumulation fell short of the threshold
    return len(weights) - 1


def weighted_random_index(weights: Sequence[float], rng) -> int:
    """Draw one index with probability proportional to its weight."""
    total = 0.0
    for w in weights:
        total += w
    threshold = rng.random() * total
    return select_index(weights, threshold)


def shuffle_with_recency_preference(
    items: Sequence[Any],
    key: Optional[Callable[[Any], Any]] = None,
    rng: Optional[random.Random] = None,
) -> List[Any]:
    """
    Return a permutation of `items` biased towards recent dates.

    `key` maps an item to a comparable date (defaults to its `date` field).
    `rng` needs only a `random()` method; a private generator is created per
    call when none is given. The input sequence is never modified. Equal dates
    keep their input order in the initial sort.
    """
    key = key or _item_date
    rng = rng or random.Random()

    pool = sorted(items, key=key, reverse=True)
    shuffled: List[Any] = []
    while pool:
        weights = recency_weights(len(pool))
        index = weighted_random_index(weights, rng)
        shuffled.append(pool.pop(index))
    return shuffled
