"""
Linkage strategies: how the distance between two clusters is derived from
the primitive distances between their members.

Each strategy wraps a primitive metric ``metric(value_a, value_b) -> float``
applied to the ``value`` of every leaf. Cross distances are recomputed on
every call because membership changes with every merge.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Type

import numpy as np

from ..errors import DomainError, InvalidInputError
from .distance import Distanceable

Metric = Callable[[Any, Any], float]


class LinkageStrategy(ABC):
    """
    Abstract base class for linkage strategies.

    Subclasses reduce the matrix of cross-member distances to a scalar.
    """

    name: str = ""

    def __init__(self, metric: Metric):
        self.metric = metric

    def cross_distances(self, a: Distanceable, b: Distanceable) -> np.ndarray:
        """
        Primitive distances for every pair (x in a, y in b).

        Returns:
            Array of shape (|a|, |b|)

        Raises:
            DomainError: If either side has no members, or the metric
                produces a negative or non-finite value
        """
        members_a = a.members()
        members_b = b.members()
        if not members_a or not members_b:
            raise DomainError(
                f"Linkage undefined: cluster sizes {len(members_a)} and {len(members_b)}"
            )

        dists = np.empty((len(members_a), len(members_b)), dtype=np.float64)
        for i, x in enumerate(members_a):
            for j, y in enumerate(members_b):
                dists[i, j] = self.metric(x.value, y.value)

        if not np.all(np.isfinite(dists)):
            raise DomainError("Metric returned a non-finite distance")
        if np.any(dists < 0):
            raise DomainError("Metric returned a negative distance")
        return dists

    @abstractmethod
    def distance(self, a: Distanceable, b: Distanceable) -> float:
        """Distance between clusters *a* and *b*."""
        pass

    def __repr__(self) -> str:
        metric_name = getattr(self.metric, "__name__", repr(self.metric))
        return f"{type(self).__name__}(metric={metric_name})"


class AverageLinkage(LinkageStrategy):
    """Mean of all |a|·|b| cross-member distances (UPGMA)."""

    name = "average"

    def distance(self, a: Distanceable, b: Distanceable) -> float:
        return float(self.cross_distances(a, b).mean())


class SingleLinkage(LinkageStrategy):
    """Smallest cross-member distance."""

    name = "single"

    def distance(self, a: Distanceable, b: Distanceable) -> float:
        return float(self.cross_distances(a, b).min())


class CompleteLinkage(LinkageStrategy):
    """Largest cross-member distance."""

    name = "complete"

    def distance(self, a: Distanceable, b: Distanceable) -> float:
        return float(self.cross_distances(a, b).max())


LINKAGES: Dict[str, Type[LinkageStrategy]] = {
    cls.name: cls for cls in (AverageLinkage, SingleLinkage, CompleteLinkage)
}


def get_linkage(name: str, metric: Metric) -> LinkageStrategy:
    """
    Instantiate a linkage strategy by name.

    Args:
        name: One of ``"average"``, ``"single"``, ``"complete"``
        metric: Primitive distance between two leaf values

    Raises:
        InvalidInputError: If *name* is not a known linkage
    """
    try:
        cls = LINKAGES[name.lower()]
    except KeyError:
        raise InvalidInputError(
            f"Unknown linkage '{name}'. Available: {sorted(LINKAGES)}"
        ) from None
    return cls(metric)
