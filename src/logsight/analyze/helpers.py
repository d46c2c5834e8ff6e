"""Numeric and grouping helpers shared by the sub-analyses."""

from enum import Enum
from typing import Any, Callable, Iterable, TypeVar

import numpy as np


T = TypeVar('T')


def percentile(values: list[float], p: float) -> float:
    """Percentile with linear interpolation between order statistics.

    ``percentile([1, 2, 3, 4], 50) == 2.5``. Returns 0.0 for empty input.
    """
    if not values:
        return 0.0
    return float(np.percentile(values, p))


def population_std(values: list[float]) -> float:
    if not values:
        return 0.0
    return float(np.std(values))


def upper_median(values: list[float]) -> float:
    """Element at ``floor(n / 2)`` of the sorted values; the upper middle for even counts."""
    if not values:
        return 0.0
    return float(sorted(values)[len(values) // 2])


def rate(part: int, whole: int) -> float:
    """``part`` as a percentage of ``whole``; 0.0 when ``whole`` is zero."""
    return part / whole * 100 if whole else 0.0


def group_key(value: Any) -> str:
    # Missing and falsy values share one bucket
    if not value:
        return 'unknown'
    return str(value.value if isinstance(value, Enum) else value)


def count_by(items: Iterable[T], key: Callable[[T], Any]) -> dict[str, int]:
    """Histogram keyed by ``str(key(item))`` in first-seen order."""
    counts: dict[str, int] = {}
    for item in items:
        bucket = group_key(key(item))
        counts[bucket] = counts.get(bucket, 0) + 1
    return counts


def group_by(items: Iterable[T], key: Callable[[T], Any]) -> dict[str, list[T]]:
    groups: dict[str, list[T]] = {}
    for item in items:
        groups.setdefault(group_key(key(item)), []).append(item)
    return groups


def peak_key(counts: dict[Any, int]) -> Any:
    """Key with the highest count; ties go to the key seen last."""
    best_key = None
    best_count = -1
    for key, count in counts.items():
        if count >= best_count:
            best_key, best_count = key, count
    return best_key


def top_n(counts: dict[str, int], n: int = 10) -> dict[str, int]:
    """``n`` largest buckets, descending by count (stable for ties)."""
    return dict(sorted(counts.items(), key=lambda item: -item[1])[:n])
