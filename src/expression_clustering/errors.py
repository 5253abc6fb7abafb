"""
Exception hierarchy for the clustering engines.

Every error raised by this package derives from ``ClusteringError`` so
callers can catch the whole family in one place.
"""


class ClusteringError(Exception):
    """Base class for all errors raised by expression_clustering."""


class InvalidInputError(ClusteringError, ValueError):
    """
    Raised when inputs or configuration are unusable.

    Examples: an empty leaf sequence, a matrix with zero rows or columns,
    ``min_height < 1``. Always raised before any state is mutated.
    """


class DomainError(ClusteringError, ArithmeticError):
    """
    Raised when a distance cannot be computed.

    Signals a violated precondition (a cluster with no members, a metric
    returning NaN or a negative value, vectors of different lengths) rather
    than an expected outcome, so it is never converted to a sentinel value.
    """


class ClusteringCancelled(ClusteringError):
    """Raised when a ``should_stop`` hook requests that a run stops early."""
