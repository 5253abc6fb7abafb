"""
Expression Clustering - Core Package

Unsupervised clustering engines for biological measurement data such as
gene-expression matrices.

This package provides:
- Agglomerative hierarchical clustering over a pluggable linkage strategy
- Mean-squared-residue bicluster extraction on a numeric matrix
- Environment-backed configuration and logging helpers
"""

__version__ = "0.1.0"

from .errors import ClusteringError, InvalidInputError, DomainError, ClusteringCancelled

# Explicitly import subpackages to ensure they're discoverable
from . import algorithms
from . import utils

__all__ = [
    "ClusteringError",
    "InvalidInputError",
    "DomainError",
    "ClusteringCancelled",
    "algorithms",
    "utils",
]
