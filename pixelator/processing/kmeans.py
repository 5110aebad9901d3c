from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from ..config import SETTINGS, WorkerSettings

logger = logging.getLogger(__name__)

_ASSIGN_CHUNK = 8192


@dataclass(frozen=True)
class Cluster:
    centroid: tuple
    count: int


@dataclass
class KMeansResult:
    centroids: np.ndarray  # (k, 3) float64, RGB space
    assignments: np.ndarray  # (n,) cluster index per input point
    iterations: int = 0

    @property
    def counts(self) -> np.ndarray:
        return np.bincount(self.assignments, minlength=len(self.centroids))

    def rounded_centroids(self) -> np.ndarray:
        """Centroids rounded half up to integer RGB."""
        return np.clip(np.floor(self.centroids + 0.5), 0, 255).astype(np.uint8)

    def clusters(self) -> List[Cluster]:
        return [
            Cluster(tuple(float(v) for v in centroid), int(count))
            for centroid, count in zip(self.centroids, self.counts)
        ]


def nearest_centroid(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid by squared RGB distance; first one wins ties."""
    out = np.empty(len(points), dtype=np.intp)
    for start in range(0, len(points), _ASSIGN_CHUNK):
        chunk = points[start : start + _ASSIGN_CHUNK]
        diff = chunk[:, None, :] - centroids[None, :, :]
        out[start : start + _ASSIGN_CHUNK] = np.argmin(np.sum(diff * diff, axis=2), axis=1)
    return out


def kmeans(
    data: Union[np.ndarray, Sequence[Sequence[float]]],
    k: int,
    *,
    rng: Optional[np.random.Generator] = None,
    max_iterations: Optional[int] = None,
    settings: WorkerSettings = SETTINGS,
) -> KMeansResult:
    """Lloyd's k-means over raw RGB triples.

    Seeds are ``k`` input points drawn without replacement. Clusters that end a
    round empty are reseeded with a random input point. Stops after
    ``max_iterations`` rounds or as soon as no centroid moves.
    """

    points = np.asarray(data, dtype=np.float64).reshape(-1, 3)
    k = min(int(k), len(points))
    if k <= 0:
        return KMeansResult(np.empty((0, 3), dtype=np.float64), np.empty(0, dtype=np.intp))

    if rng is None:
        rng = np.random.default_rng(settings.kmeans_seed)
    if max_iterations is None:
        max_iterations = settings.kmeans_max_iterations

    centroids = points[rng.choice(len(points), size=k, replace=False)].copy()
    assignments = np.zeros(len(points), dtype=np.intp)

    iteration = 0
    for iteration in range(1, max_iterations + 1):
        assignments = nearest_centroid(points, centroids)

        counts = np.bincount(assignments, minlength=k)
        sums = np.zeros((k, 3), dtype=np.float64)
        np.add.at(sums, assignments, points)

        updated = np.empty_like(centroids)
        for index in range(k):
            if counts[index] > 0:
                updated[index] = sums[index] / counts[index]
            else:
                updated[index] = points[rng.integers(len(points))]

        moved = not np.array_equal(centroids, updated)
        centroids = updated
        if not moved:
            break

    logger.debug("k-means k=%d over %d points finished after %d rounds", k, len(points), iteration)
    return KMeansResult(centroids, assignments, iteration)


__all__ = ["Cluster", "KMeansResult", "kmeans", "nearest_centroid"]
