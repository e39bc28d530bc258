"""
Lloyd's k-means over small in-memory vector sets.

Stateless: every call starts from freshly sampled centroids. The random
source is a numpy Generator passed in by the caller so it can pin a seed
(tests, reproducible refreshes) or pass nothing and get a fresh one per call.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from bookreco.domain.services.constants import CONVERGENCE_TOLERANCE, MAX_ITERATIONS

logger = logging.getLogger(__name__)

T = TypeVar("T")
Vector = List[float]


@dataclass(frozen=True)
class ClusterMember(Generic[T]):
    entity: T
    vector: Vector
    distance: float


@dataclass(frozen=True)
class KMeansResult(Generic[T]):
    clusters: List[List[ClusterMember[T]]]   # one list per centroid, may be empty
    centroids: np.ndarray                    # shape (k, dim)
    iterations: int
    converged: bool

    @property
    def non_empty_clusters(self) -> int:
        return sum(1 for c in self.clusters if c)


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    a, b = np.asarray(a, dtype=float), np.asarray(b, dtype=float)
    if a.shape != b.shape:
        raise ValueError(f"Vector dimension mismatch: {a.shape[-1]} != {b.shape[-1]}")
    return float(np.linalg.norm(a - b))


def effective_k(k: int, n_points: int) -> int:
    """Cap k at the number of points, floor it at 2 when there are 2+ points."""
    if n_points < 2:
        return n_points
    return max(2, min(k, n_points))


def pairwise_distances(X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """(n, k) matrix of Euclidean distances from every point to every centroid."""
    return np.linalg.norm(X[:, None, :] - centroids[None, :, :], axis=2)


def assign_points(X: np.ndarray, centroids: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Nearest-centroid label per point and the distance to it.
    argmin returns the first minimum, so ties go to the lowest centroid index.
    """
    dist = pairwise_distances(X, centroids)
    labels = dist.argmin(axis=1)
    return labels, dist[np.arange(len(X)), labels]


def update_centroids(X: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Mean of each cluster's points; an empty cluster keeps its centroid."""
    updated = centroids.copy()
    for j in range(len(centroids)):
        mask = labels == j
        if mask.any():
            updated[j] = X[mask].mean(axis=0)
    return updated


def kmeans(
    points: Sequence[Tuple[T, Sequence[float]]],
    k: int,
    *,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = CONVERGENCE_TOLERANCE,
    rng: Optional[np.random.Generator] = None,
) -> KMeansResult[T]:
    """
    Partition (entity, vector) pairs into k clusters.

    - k is adjusted with effective_k() before sampling.
    - Initial centroids are drawn uniformly, with replacement, from the input
      vectors through rng.integers().
    - Stops when every centroid moved less than `tolerance` or after
      `max_iterations` rounds; `converged` tells which one happened.

    Raises ValueError on empty input or mixed vector dimensions.
    """
    if not points:
        raise ValueError("kmeans needs at least one point")
    dim = len(points[0][1])
    if any(len(v) != dim for _, v in points):
        raise ValueError("kmeans input vectors must share one dimension")

    rng = rng if rng is not None else np.random.default_rng()
    X = np.asarray([v for _, v in points], dtype=float)
    n = len(X)
    k = effective_k(k, n)
    centroids = X[rng.integers(0, n, size=k)].copy()

    labels = np.zeros(n, dtype=int)
    dist = np.zeros(n)
    iterations = 0
    converged = False
    while iterations < max_iterations:
        labels, dist = assign_points(X, centroids)
        new_centroids = update_centroids(X, labels, centroids)
        shift = float(np.linalg.norm(new_centroids - centroids, axis=1).max())
        centroids = new_centroids
        iterations += 1
        logger.debug(
            "kmeans iter=%s max_shift=%.6f sizes=%s",
            iterations, shift, np.bincount(labels, minlength=k).tolist(),
        )
        if shift < tolerance:
            converged = True
            break

    # members carry distances to the centroids they were assigned against;
    # after convergence those are within tolerance of the final ones
    clusters: List[List[ClusterMember[T]]] = [[] for _ in range(k)]
    for i, (entity, _) in enumerate(points):
        clusters[int(labels[i])].append(
            ClusterMember(entity=entity, vector=X[i].tolist(), distance=float(dist[i]))
        )
    return KMeansResult(clusters=clusters, centroids=centroids, iterations=iterations, converged=converged)
