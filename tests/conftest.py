"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test modules.
"""

import numpy as np
import pytest

from expression_clustering.algorithms import (
    AverageLinkage,
    Leaf,
    absolute_difference,
)


@pytest.fixture
def average_linkage():
    """Average linkage over absolute differences of scalar leaves."""
    return AverageLinkage(absolute_difference)


@pytest.fixture
def make_leaves():
    """
    Fixture factory turning scalar values into leaves.

    Usage:
        leaves = make_leaves([1, 2, 3], linkage)

    Leaves are numbered by position.
    """
    def _make(values, linkage):
        return [Leaf(v, linkage, index=i) for i, v in enumerate(values)]

    return _make


@pytest.fixture
def rng():
    """Seeded random generator for reproducible test data."""
    return np.random.default_rng(42)


@pytest.fixture
def planted_matrix():
    """
    A 24x24 noisy matrix with a constant 12x12 block in its top-left corner.

    Background values are uniform on [-50, 50); the block is all 5.0.

    Returns:
        (matrix, block_rows, block_cols)
    """
    gen = np.random.default_rng(7)
    data = gen.uniform(-50.0, 50.0, size=(24, 24))
    data[:12, :12] = 5.0
    return data, set(range(12)), set(range(12))
