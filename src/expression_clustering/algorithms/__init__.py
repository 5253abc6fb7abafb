"""
Algorithm Core Library - hierarchical clustering and biclustering engines.

This module provides the two clustering engines with minimal dependencies,
separate from any reader, plotting or export code. Designed for reuse and
testing.
"""

from .distance import Distanceable, Leaf, ClusterNode
from .metrics import (
    absolute_difference,
    euclidean_distance,
    manhattan_distance,
    correlation_distance,
)
from .linkage import (
    LinkageStrategy,
    AverageLinkage,
    SingleLinkage,
    CompleteLinkage,
    get_linkage,
)
from .hierarchical import HierarchicalClusterer, MergeCandidate, MergeStep, cluster
from .dendrogram import iter_nodes, leaf_order, count_merges, cut_tree, to_linkage_matrix
from .bicluster import (
    BiclusterConfig,
    Bicluster,
    BiclusterExtractor,
    ResidueStatistics,
    compute_residue_statistics,
    extract_biclusters,
)
from .matrix import NamedMatrix, as_named_matrix, leaves_from_rows

__all__ = [
    # Distance abstraction
    "Distanceable",
    "Leaf",
    "ClusterNode",
    # Primitive metrics
    "absolute_difference",
    "euclidean_distance",
    "manhattan_distance",
    "correlation_distance",
    # Linkage
    "LinkageStrategy",
    "AverageLinkage",
    "SingleLinkage",
    "CompleteLinkage",
    "get_linkage",
    # Hierarchical clustering
    "HierarchicalClusterer",
    "MergeCandidate",
    "MergeStep",
    "cluster",
    # Dendrogram helpers
    "iter_nodes",
    "leaf_order",
    "count_merges",
    "cut_tree",
    "to_linkage_matrix",
    # Biclustering
    "BiclusterConfig",
    "Bicluster",
    "BiclusterExtractor",
    "ResidueStatistics",
    "compute_residue_statistics",
    "extract_biclusters",
    # Matrix adapter
    "NamedMatrix",
    "as_named_matrix",
    "leaves_from_rows",
]
