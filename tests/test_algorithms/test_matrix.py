"""
Tests for the matrix adapter.
"""

import numpy as np
import pytest

from expression_clustering.algorithms.hierarchical import HierarchicalClusterer
from expression_clustering.algorithms.linkage import AverageLinkage
from expression_clustering.algorithms.matrix import NamedMatrix, as_named_matrix, leaves_from_rows
from expression_clustering.algorithms.metrics import euclidean_distance
from expression_clustering.errors import InvalidInputError


class ReaderMatrix:
    """Minimal stand-in for an external matrix reader."""

    def __init__(self, data, row_names, col_names):
        self.data = data
        self.row_names = row_names
        self.col_names = col_names

    def rows(self):
        return len(self.data)

    def columns(self):
        return len(self.data[0])

    def get(self, row, col):
        return self.data[row][col]

    def get_row_name(self, i):
        return self.row_names[i]

    def get_col_name(self, j):
        return self.col_names[j]


def test_named_matrix_access():
    m = NamedMatrix([[1, 2, 3], [4, 5, 6]], row_names=["a", "b"])

    assert m.shape == (2, 3)
    assert m.n_rows == 2 and m.n_cols == 3
    assert m.get(1, 2) == 6.0
    assert m.row_name(0) == "a"
    assert m.col_name(0) is None

    m.set(0, 0, None)
    assert np.isnan(m.get(0, 0))

    view = m.row(1)
    view[0] = 40.0
    assert m.get(1, 0) == 40.0


def test_named_matrix_validation():
    with pytest.raises(InvalidInputError, match="2-D"):
        NamedMatrix(np.zeros((2, 2, 2)))
    with pytest.raises(InvalidInputError, match="row names"):
        NamedMatrix(np.zeros((2, 2)), row_names=["only-one"])
    with pytest.raises(InvalidInputError, match="column names"):
        NamedMatrix(np.zeros((2, 2)), col_names=["a", "b", "c"])


def test_as_named_matrix_from_lists():
    m = as_named_matrix([[1.0, None], [2.0, 3.0]])
    assert np.isnan(m.get(0, 1))
    assert m.get(1, 1) == 3.0


def test_as_named_matrix_passthrough():
    m = NamedMatrix(np.eye(2))
    assert as_named_matrix(m) is m


def test_as_named_matrix_from_reader():
    reader = ReaderMatrix([[1.0, None], [3.0, 4.0]], ["g1", "g2"], ["s1", "s2"])
    m = as_named_matrix(reader)

    assert m.row_names == ["g1", "g2"]
    assert m.col_names == ["s1", "s2"]
    assert np.isnan(m.get(0, 1))
    assert m.get(1, 0) == 3.0


def test_as_named_matrix_rejects_text():
    with pytest.raises(InvalidInputError, match="numeric"):
        as_named_matrix([["a", "b"], ["c", "d"]])


def test_leaves_from_rows_feed_clustering():
    values = np.array([[0.0, 0.0], [0.1, 0.0], [5.0, 5.0], [5.0, 5.2]])
    matrix = NamedMatrix(values, row_names=["g1", "g2", "g3", "g4"])
    linkage = AverageLinkage(euclidean_distance)

    leaves = leaves_from_rows(matrix, linkage)
    root = HierarchicalClusterer(linkage).cluster(leaves)

    assert [leaf.label for leaf in leaves] == ["g1", "g2", "g3", "g4"]
    assert [leaf.index for leaf in leaves] == [0, 1, 2, 3]
    assert sorted(l.label for l in root.left.members()) == ["g1", "g2"]
    assert sorted(l.label for l in root.right.members()) == ["g3", "g4"]

    values[0, 0] = 99.0
    assert leaves[0].value[0] == 0.0  # rows are copied


def test_leaves_from_row_subset():
    linkage = AverageLinkage(euclidean_distance)
    leaves = leaves_from_rows(np.arange(12.0).reshape(4, 3), linkage, rows=[3, 1])

    assert [leaf.index for leaf in leaves] == [0, 1]
    np.testing.assert_array_equal(leaves[0].value, [9.0, 10.0, 11.0])
