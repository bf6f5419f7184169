"""Tests for building a partition and its aggregates from a membership vector."""

from __future__ import annotations

import igraph as ig
import numpy as np
import pytest

from vertex_partition.config import PartitionConfig
from vertex_partition.errors import InvalidArgument
from vertex_partition.graph import Graph
from vertex_partition.partition import MutableVertexPartition

from tests._helpers import assert_matches_recomputation


def test_default_membership_is_singletons(path_graph: Graph) -> None:
    partition = MutableVertexPartition(path_graph)
    assert partition.membership() == [0, 1, 2, 3]
    assert partition.community_count() == 4
    assert partition.total_internal_weight() == 0.0
    assert partition.total_possible_edges() == 0.0
    assert partition.empty_communities() == []
    for c in range(4):
        assert partition.community_members(c) == frozenset({c})
        assert partition.community_size(c) == 1


def test_membership_length_mismatch_raises(path_graph: Graph) -> None:
    with pytest.raises(InvalidArgument):
        MutableVertexPartition(path_graph, [0, 0, 1])
    with pytest.raises(InvalidArgument):
        MutableVertexPartition(path_graph, [0, 0, 1, 1, 2])


@pytest.mark.parametrize("membership", [[0, -1, 0, 0], [0, 1.5, 0, 0], [0, "a", 1, 1]])
def test_membership_values_must_be_non_negative_integers(path_graph: Graph, membership) -> None:
    with pytest.raises(InvalidArgument):
        MutableVertexPartition(path_graph, membership)


def test_undirected_aggregates(path_graph: Graph) -> None:
    partition = MutableVertexPartition(path_graph, [0, 0, 1, 1])
    assert partition.internal_weight(0) == 1.0
    assert partition.internal_weight(1) == 1.0
    assert partition.total_internal_weight() == 2.0
    # from/to weights count every incident edge, internal ones included.
    assert partition.from_weight(0) == 3.0
    assert partition.to_weight(0) == 3.0
    assert partition.from_weight(1) == 3.0
    assert partition.total_possible_edges() == 2.0
    assert_matches_recomputation(partition)


def test_directed_aggregates(directed_graph: Graph) -> None:
    partition = MutableVertexPartition(directed_graph, [0, 0, 1, 1, 0])
    # Internal: 0->1, 1->0, 0->4 in community 0; 2->3, 3->3 in community 1.
    assert partition.internal_weight(0) == pytest.approx(3.75)
    assert partition.internal_weight(1) == pytest.approx(3.5)
    assert partition.from_weight(0) == pytest.approx(1.0 + 2.0 + 0.5 + 1.0 + 0.75)
    assert partition.to_weight(0) == pytest.approx(1.0 + 2.0 + 3.0 + 0.75)
    assert_matches_recomputation(partition)


@pytest.mark.parametrize("directed", [False, True])
def test_single_self_loop_counts_once(directed: bool) -> None:
    graph = Graph.from_edges(1, [(0, 0)], [2.0], directed=directed)
    partition = MutableVertexPartition(graph)
    assert partition.internal_weight(0) == 2.0
    assert partition.total_internal_weight() == 2.0
    assert partition.total_possible_edges() == (1.0 if directed else 0.5)


def test_non_contiguous_ids_leave_empty_slots(path_graph: Graph) -> None:
    partition = MutableVertexPartition(path_graph, [3, 3, 5, 5])
    assert partition.community_count() == 6
    assert partition.empty_communities() == [0, 1, 2, 4]
    assert partition.community_size(2) == 0
    assert partition.community_size(99) == 0
    assert partition.community_members(5) == frozenset({2, 3})
    assert_matches_recomputation(partition)


def test_node_sizes_feed_community_sizes(weighted_graph: Graph) -> None:
    partition = MutableVertexPartition(weighted_graph, [0, 0, 0, 1, 1, 1])
    assert partition.community_size(0) == 4
    assert partition.community_size(1) == 6
    # Self-loops present, undirected: n*n/2 per community.
    assert partition.total_possible_edges() == pytest.approx(8.0 + 18.0)
    assert_matches_recomputation(partition)


def test_numpy_membership_accepted(weighted_graph: Graph) -> None:
    membership = np.array([1, 1, 0, 0, 2, 2], dtype=np.int64)
    partition = MutableVertexPartition(weighted_graph, membership)
    assert partition.membership() == [1, 1, 0, 0, 2, 2]
    assert all(type(c) is int for c in partition.membership())


def test_from_config_uses_attribute_names_and_tolerance() -> None:
    base = ig.Graph(n=3, edges=[(0, 1), (1, 2)])
    base.es["strength"] = [2.0, 4.0]
    base.vs["mass"] = [1, 1, 3]
    config = PartitionConfig(
        weight_attr="strength", node_size_attr="mass", consistency_atol=1e-6
    )
    partition = MutableVertexPartition.from_config(base, config, [0, 0, 0])
    assert partition.internal_weight(0) == 6.0
    assert partition.community_size(0) == 5
    assert partition.atol == 1e-6
    assert partition.check_consistency() == []


def test_graph_must_be_wrapped() -> None:
    with pytest.raises(TypeError):
        MutableVertexPartition(ig.Graph(n=2))  # type: ignore[arg-type]
