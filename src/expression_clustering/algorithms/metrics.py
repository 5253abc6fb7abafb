"""
Primitive distance functions between observations.

Vector metrics are pairwise-complete: positions where either vector is
missing (NaN) are skipped. Every function raises ``DomainError`` instead of
returning a sentinel when the distance is undefined.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ..errors import DomainError


def _complete_pairs(x, y) -> Tuple[np.ndarray, np.ndarray]:
    """Return the mutually non-missing entries of *x* and *y*."""
    xa = np.asarray(x, dtype=np.float64).ravel()
    ya = np.asarray(y, dtype=np.float64).ravel()
    if xa.shape != ya.shape:
        raise DomainError(
            f"Vectors must have the same length, got {xa.size} and {ya.size}"
        )
    keep = ~(np.isnan(xa) | np.isnan(ya))
    return xa[keep], ya[keep]


def absolute_difference(a: float, b: float) -> float:
    """|a - b| for two scalars."""
    d = abs(float(a) - float(b))
    if np.isnan(d):
        raise DomainError(f"Distance between {a!r} and {b!r} is undefined")
    return d


def euclidean_distance(x, y) -> float:
    """
    Euclidean distance over the positions both vectors have values for.

    Raises:
        DomainError: On length mismatch or when no position is usable
    """
    xs, ys = _complete_pairs(x, y)
    if xs.size == 0:
        raise DomainError("No non-missing positions shared by both vectors")
    return float(np.sqrt(np.sum((xs - ys) ** 2)))


def manhattan_distance(x, y) -> float:
    """
    Sum of absolute differences over shared non-missing positions.

    Raises:
        DomainError: On length mismatch or when no position is usable
    """
    xs, ys = _complete_pairs(x, y)
    if xs.size == 0:
        raise DomainError("No non-missing positions shared by both vectors")
    return float(np.sum(np.abs(xs - ys)))


def correlation_distance(x, y) -> float:
    """
    One minus the Pearson correlation, in [0, 2].

    Uses pairwise-complete observations. A constant vector has no defined
    correlation.

    Raises:
        DomainError: If fewer than two positions are usable or either
            vector is constant over them
    """
    xs, ys = _complete_pairs(x, y)
    if xs.size < 2:
        raise DomainError(
            f"Correlation needs at least 2 shared positions, got {xs.size}"
        )
    xc = xs - xs.mean()
    yc = ys - ys.mean()
    denom = np.sqrt(np.sum(xc * xc) * np.sum(yc * yc))
    if denom == 0.0:
        raise DomainError("Correlation is undefined for a constant vector")
    r = float(np.sum(xc * yc) / denom)
    # rounding can push |r| slightly past 1
    return float(np.clip(1.0 - r, 0.0, 2.0))
