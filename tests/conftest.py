"""Pytest configuration for the vertex partition project."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from vertex_partition.graph import Graph  # noqa: E402


@pytest.fixture()
def path_graph() -> Graph:
    """Undirected, unweighted path 0-1-2-3."""
    return Graph.from_edges(4, [(0, 1), (1, 2), (2, 3)])


@pytest.fixture()
def weighted_graph() -> Graph:
    """Undirected graph with a self-loop, varied weights and node sizes."""
    edges = [(0, 1), (0, 2), (1, 2), (2, 3), (3, 4), (4, 5), (3, 5), (5, 5), (1, 4)]
    weights = [1.0, 2.5, 0.5, 1.0, 3.0, 1.5, 2.0, 4.0, 0.25]
    return Graph.from_edges(6, edges, weights, node_sizes=[1, 2, 1, 3, 1, 2])


@pytest.fixture()
def directed_graph() -> Graph:
    """Directed graph with a self-loop and a reciprocal pair."""
    edges = [(0, 1), (1, 0), (1, 2), (2, 3), (3, 1), (3, 3), (4, 2), (0, 4)]
    weights = [1.0, 2.0, 0.5, 1.5, 3.0, 2.0, 1.0, 0.75]
    return Graph.from_edges(5, edges, weights, directed=True)
