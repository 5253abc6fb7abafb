"""
Distance abstraction for hierarchical clustering.

A ``Distanceable`` is anything the clustering engine can place in a
dendrogram: a ``Leaf`` wrapping one observation, or a ``ClusterNode``
formed by merging two earlier items. Distances between them are delegated
to a linkage strategy shared by every item of one clustering run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional, Tuple

if TYPE_CHECKING:
    from .linkage import LinkageStrategy


class Distanceable(ABC):
    """
    Abstract base class for items that can be clustered.

    Attributes:
        linkage: Strategy used by ``distance_to``. Shared between items and
            never reassigned after construction.
        visited: Traversal flag for external code such as tree printers.
            The clustering engine does not read or write it.
    """

    def __init__(self, linkage: LinkageStrategy):
        self._linkage = linkage
        self.visited = False

    @property
    def linkage(self) -> LinkageStrategy:
        return self._linkage

    def distance_to(self, other: Distanceable) -> float:
        """
        Distance from this item to *other* under this item's linkage.

        Symmetric and non-negative for any well-behaved primitive metric.

        Raises:
            DomainError: If the distance is undefined
        """
        return self._linkage.distance(self, other)

    @abstractmethod
    def members(self) -> Tuple[Leaf, ...]:
        """Return the leaves this item represents, in left-to-right order."""
        pass

    @property
    def size(self) -> int:
        return len(self.members())

    def is_visited(self) -> bool:
        return self.visited

    def mark(self) -> None:
        self.visited = True

    def unmark(self) -> None:
        self.visited = False


class Leaf(Distanceable):
    """
    A single primitive observation.

    Args:
        value: Payload handed to the linkage's primitive metric (a scalar,
            an expression vector, ...).
        linkage: Linkage strategy shared by the clustering run.
        index: Insertion index within the input sequence. The engine never
            sets it; the dendrogram helpers that report leaf indices need it.
        label: Optional display name.
    """

    def __init__(
        self,
        value: Any,
        linkage: LinkageStrategy,
        index: Optional[int] = None,
        label: Optional[str] = None,
    ):
        super().__init__(linkage)
        self.value = value
        self.index = index
        self.label = label
        self._members = (self,)

    def members(self) -> Tuple[Leaf, ...]:
        return self._members

    def __repr__(self) -> str:
        name = self.label if self.label is not None else self.value
        return f"Leaf(index={self.index}, {name!r})"


class ClusterNode(Distanceable):
    """
    A compound item formed by merging two existing items.

    Children and merge distance are fixed at construction. The member tuple
    is the concatenation of the children's members and is computed once.

    Attributes:
        left: First child (the one placed earlier in the input).
        right: Second child.
        distance: Linkage distance between the children when merged.
        index: Creation index; leaves occupy ``0..N-1`` and merges follow.
    """

    def __init__(
        self,
        left: Distanceable,
        right: Distanceable,
        distance: float,
        linkage: LinkageStrategy,
        index: Optional[int] = None,
    ):
        super().__init__(linkage)
        self._left = left
        self._right = right
        self._distance = float(distance)
        self.index = index
        self._members = left.members() + right.members()

    @property
    def left(self) -> Distanceable:
        return self._left

    @property
    def right(self) -> Distanceable:
        return self._right

    @property
    def children(self) -> Tuple[Distanceable, Distanceable]:
        return (self._left, self._right)

    @property
    def distance(self) -> float:
        return self._distance

    def members(self) -> Tuple[Leaf, ...]:
        return self._members

    def __repr__(self) -> str:
        return (
            f"ClusterNode(index={self.index}, size={len(self._members)}, "
            f"distance={self._distance:.4g})"
        )
