"""
Tests for the distance abstraction and linkage strategies.
"""

import numpy as np
import pytest

from expression_clustering.algorithms.distance import ClusterNode, Distanceable, Leaf
from expression_clustering.algorithms.linkage import (
    AverageLinkage,
    CompleteLinkage,
    SingleLinkage,
    get_linkage,
)
from expression_clustering.algorithms.metrics import absolute_difference, euclidean_distance
from expression_clustering.errors import DomainError, InvalidInputError


class EmptyCluster(Distanceable):
    """Distanceable with no members, which no engine ever produces."""

    def members(self):
        return ()


def test_leaf_members_is_itself(average_linkage):
    leaf = Leaf(4.0, average_linkage)
    assert leaf.members() == (leaf,)
    assert leaf.size == 1


def test_cluster_node_members_concatenate(average_linkage, make_leaves):
    a, b, c = make_leaves([1, 2, 3], average_linkage)
    ab = ClusterNode(a, b, 1.0, average_linkage)
    abc = ClusterNode(ab, c, 1.5, average_linkage)

    assert abc.members() == (a, b, c)
    assert abc.children == (ab, c)
    assert abc.distance == 1.5
    assert ab.members() == (a, b)  # children unchanged


def test_average_linkage_example(average_linkage, make_leaves):
    """mean(|1-3|, |2-3|) == 1.5"""
    a, b, c = make_leaves([1, 2, 3], average_linkage)
    ab = ClusterNode(a, b, 1.0, average_linkage)

    assert ab.distance_to(c) == pytest.approx(1.5)
    assert c.distance_to(ab) == pytest.approx(1.5)


def test_linkage_symmetry(rng):
    linkage = AverageLinkage(euclidean_distance)
    leaves = [Leaf(rng.standard_normal(5), linkage) for _ in range(6)]
    left = ClusterNode(leaves[0], leaves[1], 0.0, linkage)
    right = ClusterNode(ClusterNode(leaves[2], leaves[3], 0.0, linkage), leaves[4], 0.0, linkage)

    items = leaves + [left, right]
    for x in items:
        for y in items:
            assert x.distance_to(y) == pytest.approx(y.distance_to(x))
            assert x.distance_to(y) >= 0


def test_single_and_complete_linkage(make_leaves):
    single = SingleLinkage(absolute_difference)
    complete = CompleteLinkage(absolute_difference)
    a, b, c = make_leaves([1, 2, 10], single)
    ab = ClusterNode(a, b, 1.0, single)

    assert single.distance(ab, c) == pytest.approx(8.0)
    assert complete.distance(ab, c) == pytest.approx(9.0)


def test_empty_cluster_raises(average_linkage):
    leaf = Leaf(1.0, average_linkage)
    with pytest.raises(DomainError, match="cluster sizes"):
        average_linkage.distance(leaf, EmptyCluster(average_linkage))


def test_bad_metric_output_raises():
    negative = AverageLinkage(lambda x, y: -1.0)
    with pytest.raises(DomainError, match="negative"):
        negative.distance(Leaf(1, negative), Leaf(2, negative))

    nan = AverageLinkage(lambda x, y: float("nan"))
    with pytest.raises(DomainError, match="non-finite"):
        nan.distance(Leaf(1, nan), Leaf(2, nan))


def test_get_linkage():
    assert isinstance(get_linkage("average", absolute_difference), AverageLinkage)
    assert isinstance(get_linkage("SINGLE", absolute_difference), SingleLinkage)
    assert isinstance(get_linkage("complete", absolute_difference), CompleteLinkage)

    with pytest.raises(InvalidInputError, match="Unknown linkage"):
        get_linkage("ward", absolute_difference)


def test_visited_flag(average_linkage):
    leaf = Leaf(1.0, average_linkage)
    assert not leaf.is_visited()
    leaf.mark()
    assert leaf.is_visited()
    leaf.unmark()
    assert not leaf.is_visited()


def test_cross_distances_shape(average_linkage, make_leaves):
    a, b, c, d = make_leaves([0, 1, 5, 7], average_linkage)
    ab = ClusterNode(a, b, 1.0, average_linkage)
    cd = ClusterNode(c, d, 2.0, average_linkage)

    dists = average_linkage.cross_distances(ab, cd)
    np.testing.assert_allclose(dists, [[5, 7], [4, 6]])
