"""Speaker clustering: deterministic 1-D k-means over per-segment F0."""

from __future__ import annotations

import logging
from typing import List, Sequence

from speech_segmenter.exceptions import InvalidParameters

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 10


def nearest_centroid(value: float, centroids: Sequence[float]) -> int:
    """Index of the closest centroid; ties go to the lower index."""
    if not centroids:
        raise ValueError("centroids must not be empty")
    best = 0
    best_dist = abs(value - centroids[0])
    for idx in range(1, len(centroids)):
        dist = abs(value - centroids[idx])
        if dist < best_dist:
            best_dist = dist
            best = idx
    return best


def kmeans_1d(
    values: Sequence[float],
    k: int,
    iterations: int = DEFAULT_ITERATIONS,
) -> List[float]:
    """Cluster scalar values into k centroids.

    Initial centroids are evenly spaced order statistics of the sorted
    values (no randomness). Each round assigns values to their nearest
    centroid, then moves each centroid to the mean of its members; a
    centroid with no members stays where it is.

    With fewer than k values the first k values are returned as-is, without
    iterating.
    """
    if k < 1:
        raise InvalidParameters("k must be >= 1", field="num_speakers")
    values = [float(v) for v in values]
    if len(values) < k:
        return values[:k]

    ordered = sorted(values)
    step = len(ordered) // k
    centroids = [ordered[min(i * step, len(ordered) - 1)] for i in range(k)]

    for _ in range(iterations):
        members: List[List[float]] = [[] for _ in range(k)]
        for v in values:
            members[nearest_centroid(v, centroids)].append(v)
        for idx, group in enumerate(members):
            if group:
                centroids[idx] = sum(group) / len(group)

    logger.debug("k-means centroids (k=%d): %s", k, centroids)
    return centroids


def assign_labels(values: Sequence[float], centroids: Sequence[float]) -> List[int]:
    """Nearest-centroid index for every value."""
    return [nearest_centroid(v, centroids) for v in values]
