"""
Read-only helpers over a finished dendrogram.

Traversals keep their own bookkeeping and never touch the nodes'
``visited`` flags, so they are safe to run while other code uses them.
"""

from __future__ import annotations

from typing import Iterator, List

import numpy as np

from ..errors import InvalidInputError
from .distance import ClusterNode, Distanceable, Leaf


def _leaf_indices(node: Distanceable) -> List[int]:
    indices = [leaf.index for leaf in node.members()]
    if any(i is None for i in indices):
        raise InvalidInputError("Every leaf needs an index; build leaves with index=...")
    return indices


def iter_nodes(root: Distanceable) -> Iterator[Distanceable]:
    """Yield every node under *root* in post-order (children before parent)."""
    stack = [(root, False)]
    seen = set()
    while stack:
        node, expanded = stack.pop()
        if expanded or not isinstance(node, ClusterNode):
            if id(node) not in seen:
                seen.add(id(node))
                yield node
            continue
        stack.append((node, True))
        stack.append((node.right, False))
        stack.append((node.left, False))


def leaf_order(root: Distanceable) -> List[Leaf]:
    """Leaves in left-to-right display order."""
    return list(root.members())


def count_merges(root: Distanceable) -> int:
    return sum(1 for node in iter_nodes(root) if isinstance(node, ClusterNode))


def cut_tree(root: Distanceable, threshold: float) -> List[List[int]]:
    """
    Flat clusters obtained by cutting the dendrogram at *threshold*.

    A subtree becomes one cluster when its merge height is <= threshold.
    Heights are not guaranteed to be monotone under average linkage, so the
    cut is taken top-down: the first qualifying node on each path wins.

    Args:
        root: Dendrogram root
        threshold: Maximum merge distance inside a cluster

    Returns:
        Clusters as sorted lists of leaf indices, ordered by smallest index

    Raises:
        InvalidInputError: If a leaf has no index
    """
    clusters: List[List[int]] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, ClusterNode) and node.distance > threshold:
            stack.append(node.right)
            stack.append(node.left)
            continue
        clusters.append(sorted(_leaf_indices(node)))
    clusters.sort(key=lambda c: c[0])
    return clusters


def to_linkage_matrix(root: Distanceable) -> np.ndarray:
    """
    Export the dendrogram as an (N-1, 4) linkage matrix.

    Row ``i`` describes merge ``i``: ``[left_id, right_id, distance, size]``.
    Leaves are identified by their index ``0..N-1`` and the cluster formed
    by merge ``i`` by ``N + i``, following the SciPy convention.

    Raises:
        InvalidInputError: If the leaf indices are not exactly 0..N-1
    """
    leaves = root.members()
    n = len(leaves)
    if sorted(_leaf_indices(root)) != list(range(n)):
        raise InvalidInputError("Leaf indices must be exactly 0..N-1 to export")

    merges = [node for node in iter_nodes(root) if isinstance(node, ClusterNode)]
    merges.sort(key=lambda node: node.index)

    ids = {id(leaf): leaf.index for leaf in leaves}
    result = np.zeros((len(merges), 4), dtype=np.float64)
    for i, node in enumerate(merges):
        ids[id(node)] = n + i
        result[i] = (
            ids[id(node.left)],
            ids[id(node.right)],
            node.distance,
            len(node.members()),
        )
    return result
