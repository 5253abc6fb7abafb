"""
Agglomerative hierarchical clustering over an abstract linkage.

Builds a binary dendrogram by repeatedly merging the closest pair of active
clusters. Distances live in an N×N matrix allocated once; a merged cluster
takes over the slot of its lower-indexed child and the other slot is
retired. A slot therefore always holds the cluster whose earliest input
position equals the slot number, which is what ties are broken on.

To avoid rescanning every pair after each merge, the K smallest candidate
pairs are cached together with the smallest key ever left out of the
cache. The cache is trusted only while its head sorts before that key;
otherwise all active pairs are rescanned.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import numpy as np

from ..errors import ClusteringCancelled, InvalidInputError
from ..utils.logging_config import get_logger
from .distance import ClusterNode, Distanceable
from .linkage import LinkageStrategy

logger = get_logger(__name__)

DEFAULT_CACHE_SIZE = 10


@dataclass(frozen=True, order=True)
class MergeCandidate:
    """A potential merge of the clusters in slots ``left < right``."""

    distance: float
    left: int
    right: int


@dataclass
class MergeStep:
    """A merge performed by the engine, in the order it happened."""

    distance: float
    left: Distanceable
    right: Distanceable
    node: ClusterNode


class _CandidateCache:
    """Sorted, bounded set of the smallest merge candidates."""

    def __init__(self, capacity: int):
        self.capacity = capacity
        self.items: List[MergeCandidate] = []
        # smallest candidate excluded since the last rescan
        self.bound: Optional[MergeCandidate] = None
        self.n_rescans = 0

    def rescan(self, dist: np.ndarray, active: np.ndarray) -> None:
        slots = np.flatnonzero(active)
        iu, ju = np.triu_indices(len(slots), k=1)
        p = slots[iu]
        q = slots[ju]
        vals = dist[p, q]
        order = np.lexsort((q, p, vals))[: self.capacity + 1]
        found = [MergeCandidate(float(vals[k]), int(p[k]), int(q[k])) for k in order]
        self.items = found[: self.capacity]
        self.bound = found[self.capacity] if len(found) > self.capacity else None
        self.n_rescans += 1

    def offer(self, candidate: MergeCandidate) -> None:
        if self.bound is not None and candidate >= self.bound:
            return
        bisect.insort(self.items, candidate)
        if len(self.items) > self.capacity:
            evicted = self.items.pop()
            if self.bound is None or evicted < self.bound:
                self.bound = evicted

    def discard(self, *slots: int) -> None:
        self.items = [
            c for c in self.items if c.left not in slots and c.right not in slots
        ]

    def pop_min(self, dist: np.ndarray, active: np.ndarray) -> MergeCandidate:
        if not self.items or (self.bound is not None and self.items[0] > self.bound):
            self.rescan(dist, active)
        return self.items.pop(0)


@dataclass
class HierarchicalClusterer:
    """
    Agglomerative clustering engine.

    Args:
        linkage: Strategy computing the distance between two clusters.
        cache_size: Number of smallest candidate pairs kept between merges.

    After ``cluster`` returns:
        distance_matrix: (N, N) linkage distances between the original
            leaves (zero diagonal).
        merges: MergeStep records in merge order (N - 1 of them).
        n_rescans: How many full pair scans the run needed.
    """

    linkage: LinkageStrategy
    cache_size: int = DEFAULT_CACHE_SIZE
    distance_matrix: Optional[np.ndarray] = field(default=None, init=False)
    merges: List[MergeStep] = field(default_factory=list, init=False)
    n_rescans: int = field(default=0, init=False)

    def __post_init__(self):
        """Validate cache size."""
        if self.cache_size < 1:
            raise InvalidInputError(f"cache_size must be >= 1, got {self.cache_size}")

    def cluster(
        self,
        leaves: Sequence[Distanceable],
        *,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> Distanceable:
        """
        Cluster *leaves* into a dendrogram and return its root.

        Leaves are never modified. Ties between equal distances go to the
        pair whose first member comes earliest in *leaves*, then the earliest
        on the other side. Merge nodes are numbered ``N + k`` for the k-th
        merge.

        Args:
            leaves: Non-empty sequence of items to cluster
            should_stop: Optional hook polled before every merge; returning
                True aborts the run

        Returns:
            The dendrogram root (the single leaf itself when N == 1)

        Raises:
            InvalidInputError: If *leaves* is empty or a leaf carries a
                different linkage than this engine
            DomainError: If the linkage cannot compute a distance
            ClusteringCancelled: If *should_stop* returned True
        """
        leaves = list(leaves)
        n = len(leaves)
        if n == 0:
            raise InvalidInputError("Cannot cluster an empty sequence of leaves")

        for i, leaf in enumerate(leaves):
            if leaf.linkage is not self.linkage:
                raise InvalidInputError(
                    f"Leaf {i} uses {leaf.linkage!r}, engine uses {self.linkage!r}"
                )

        self.merges = []
        self.n_rescans = 0

        if n == 1:
            self.distance_matrix = np.zeros((1, 1))
            return leaves[0]

        logger.info(f"Clustering {n} items with {self.linkage!r}")

        dist = np.zeros((n, n), dtype=np.float64)
        for i in range(n):
            for j in range(i + 1, n):
                d = self.linkage.distance(leaves[i], leaves[j])
                dist[i, j] = d
                dist[j, i] = d
        self.distance_matrix = dist.copy()

        slots: List[Optional[Distanceable]] = list(leaves)
        active = np.ones(n, dtype=bool)
        n_active = n
        cache = _CandidateCache(self.cache_size)
        cache.rescan(dist, active)
        merges: List[MergeStep] = []

        while n_active > 1:
            if should_stop is not None and should_stop():
                raise ClusteringCancelled(
                    f"Stopped after {len(merges)} of {n - 1} merges"
                )

            best = cache.pop_min(dist, active)
            p, q = best.left, best.right
            node = ClusterNode(
                slots[p], slots[q], best.distance, self.linkage, index=n + len(merges)
            )
            merges.append(MergeStep(best.distance, slots[p], slots[q], node))
            logger.debug(
                f"Merge {len(merges)}: slots ({p}, {q}) at distance {best.distance:.6g}"
            )

            active[q] = False
            slots[q] = None
            slots[p] = node
            n_active -= 1
            cache.discard(p, q)

            for x in np.flatnonzero(active):
                x = int(x)
                if x == p:
                    continue
                d = self.linkage.distance(node, slots[x])
                dist[p, x] = d
                dist[x, p] = d
                cache.offer(MergeCandidate(d, min(p, x), max(p, x)))

        root = slots[int(np.flatnonzero(active)[0])]
        self.merges = merges
        self.n_rescans = cache.n_rescans
        logger.info(
            f"Built dendrogram: {len(merges)} merges, {cache.n_rescans} full scans, "
            f"root height {merges[-1].distance:.6g}"
        )
        return root


def cluster(
    leaves: Sequence[Distanceable],
    linkage: LinkageStrategy,
    *,
    cache_size: int = DEFAULT_CACHE_SIZE,
    should_stop: Optional[Callable[[], bool]] = None,
) -> Distanceable:
    """
    Build a dendrogram over *leaves* and return its root.

    Convenience wrapper around ``HierarchicalClusterer``; use the class
    directly to keep the leaf distance matrix and merge history.

    Example:
        >>> linkage = AverageLinkage(absolute_difference)
        >>> leaves = [Leaf(v, linkage) for v in (1, 2, 3, 10)]
        >>> root = cluster(leaves, linkage)
        >>> root.distance
        8.0
    """
    return HierarchicalClusterer(linkage, cache_size=cache_size).cluster(
        leaves, should_stop=should_stop
    )
