"""Read-only graph view consumed by the partition engine."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple, Union

import igraph as ig
import numpy as np

from .errors import InvalidArgument, InvalidDirection

if TYPE_CHECKING:  # pragma: no cover
    from .config import PartitionConfig

logger = logging.getLogger(__name__)

Neighbour = Tuple[int, int]
AttributeSpec = Union[None, str, Sequence[float], np.ndarray]


class Direction(str, Enum):
    """Which incident edges of a vertex to enumerate."""

    OUT = "out"
    IN = "in"
    ALL = "all"

    @classmethod
    def parse(cls, value: Union["Direction", str, int]) -> "Direction":
        """Coerce a direction name or igraph mode constant to a ``Direction``."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError as exc:
                raise InvalidDirection(f"Unknown direction: {value!r}") from exc
        if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
            modes = {int(ig.OUT): cls.OUT, int(ig.IN): cls.IN, int(ig.ALL): cls.ALL}
            if int(value) in modes:
                return modes[int(value)]
        raise InvalidDirection(f"Unknown direction: {value!r}")


def _resolve_edge_weights(graph: ig.Graph, weights: AttributeSpec) -> np.ndarray:
    n_edges = graph.ecount()
    if weights is None:
        return np.ones(n_edges, dtype=np.float64)
    if isinstance(weights, str):
        if weights not in graph.es.attributes():
            raise InvalidArgument(f"Edge attribute '{weights}' not found on graph")
        values = graph.es[weights]
    else:
        values = weights
    arr = np.asarray(values, dtype=np.float64)
    if arr.shape != (n_edges,):
        raise InvalidArgument(
            f"Edge weights must have one entry per edge ({n_edges}), got shape {arr.shape}"
        )
    return arr


def _resolve_node_sizes(graph: ig.Graph, node_sizes: AttributeSpec) -> np.ndarray:
    n_vertices = graph.vcount()
    if node_sizes is None:
        return np.ones(n_vertices, dtype=np.float64)
    if isinstance(node_sizes, str):
        if node_sizes not in graph.vs.attributes():
            raise InvalidArgument(f"Vertex attribute '{node_sizes}' not found on graph")
        values = graph.vs[node_sizes]
    else:
        values = node_sizes
    arr = np.asarray(values, dtype=np.float64)
    if arr.shape != (n_vertices,):
        raise InvalidArgument(
            f"Node sizes must have one entry per vertex ({n_vertices}), got shape {arr.shape}"
        )
    if np.any(arr < 0) or not np.all(np.isfinite(arr)):
        raise InvalidArgument("Node sizes must be finite and non-negative")
    return arr


class Graph:
    """Wrap an ``igraph.Graph`` with edge weights, node sizes and neighbour lists.

    Neighbour lists are built once per direction. In an undirected graph every
    edge is listed at both of its endpoints, whatever the direction, so a
    self-loop shows up twice in the list of its vertex. In a directed graph
    ``OUT`` lists targets, ``IN`` lists sources and ``ALL`` both.
    """

    def __init__(
        self,
        graph: ig.Graph,
        weights: AttributeSpec = None,
        node_sizes: AttributeSpec = None,
        correct_self_loops: Optional[bool] = None,
    ) -> None:
        if not isinstance(graph, ig.Graph):
            raise TypeError("graph must be an igraph.Graph")

        self._graph = graph
        self._directed = bool(graph.is_directed())
        self._edge_weights = _resolve_edge_weights(graph, weights)
        self._node_sizes = _resolve_node_sizes(graph, node_sizes)

        edges = graph.get_edgelist()
        self._has_self_loops = any(s == t for s, t in edges)
        if correct_self_loops is None:
            correct_self_loops = self._has_self_loops
        self._correct_self_loops = bool(correct_self_loops)

        self._neighbours = self._build_neighbours(graph.vcount(), edges)
        logger.debug(
            "Built graph view: %d vertices, %d edges, directed=%s, self-loops=%s",
            graph.vcount(),
            len(edges),
            self._directed,
            self._has_self_loops,
        )

    def _build_neighbours(
        self, n_vertices: int, edges: Sequence[Tuple[int, int]]
    ) -> Dict[Direction, List[List[Neighbour]]]:
        out_lists: List[List[Neighbour]] = [[] for _ in range(n_vertices)]
        in_lists: List[List[Neighbour]] = [[] for _ in range(n_vertices)]
        if self._directed:
            all_lists: List[List[Neighbour]] = [[] for _ in range(n_vertices)]
            for e, (s, t) in enumerate(edges):
                out_lists[s].append((t, e))
                in_lists[t].append((s, e))
                all_lists[s].append((t, e))
                all_lists[t].append((s, e))
            return {Direction.OUT: out_lists, Direction.IN: in_lists, Direction.ALL: all_lists}

        for e, (s, t) in enumerate(edges):
            out_lists[s].append((t, e))
            out_lists[t].append((s, e))
        # Undirected: every direction sees the same incident edges.
        return {Direction.OUT: out_lists, Direction.IN: out_lists, Direction.ALL: out_lists}

    @classmethod
    def from_edges(
        cls,
        n_vertices: int,
        edges: Sequence[Tuple[int, int]],
        weights: Optional[Sequence[float]] = None,
        *,
        directed: bool = False,
        node_sizes: Optional[Sequence[float]] = None,
        correct_self_loops: Optional[bool] = None,
    ) -> "Graph":
        """Build the underlying ``igraph.Graph`` from an edge list."""

        if n_vertices < 0:
            raise InvalidArgument("n_vertices must be non-negative")
        graph = ig.Graph(n=n_vertices, edges=list(edges), directed=directed)
        return cls(
            graph,
            weights=weights,
            node_sizes=node_sizes,
            correct_self_loops=correct_self_loops,
        )

    @classmethod
    def from_config(cls, graph: ig.Graph, config: "PartitionConfig") -> "Graph":
        """Wrap ``graph`` using the attribute names of a ``PartitionConfig``."""

        weights = config.weight_attr
        if weights is not None and weights not in graph.es.attributes():
            weights = None
        return cls(
            graph,
            weights=weights,
            node_sizes=config.node_size_attr,
            correct_self_loops=config.correct_self_loops,
        )

    @property
    def igraph(self) -> ig.Graph:
        return self._graph

    def vertex_count(self) -> int:
        return self._graph.vcount()

    def edge_count(self) -> int:
        return self._graph.ecount()

    def is_directed(self) -> bool:
        return self._directed

    def has_self_loops(self) -> bool:
        return self._has_self_loops

    @property
    def correct_self_loops(self) -> bool:
        return self._correct_self_loops

    def node_size(self, v: int) -> float:
        return float(self._node_sizes[v])

    def edge_weight(self, e: int) -> float:
        return float(self._edge_weights[e])

    def neighbors(self, v: int, direction: Union[Direction, str, int]) -> Sequence[Neighbour]:
        """Return the ``(vertex, edge)`` pairs incident to ``v`` in ``direction``."""
        return self._neighbours[Direction.parse(direction)][v]

    def degree(self, v: int, direction: Union[Direction, str, int]) -> int:
        return len(self._neighbours[Direction.parse(direction)][v])

    def possible_edges(self, n: float) -> float:
        """Maximum number of edges a group whose sizes sum to ``n`` can hold.

        ``n*n`` when self-loops are counted, ``n*(n-1)`` otherwise, halved for
        undirected graphs.
        """
        pairs = n * n if self._correct_self_loops else n * (n - 1)
        if not self._directed:
            pairs = pairs / 2.0
        return float(pairs)

    def total_weight(self) -> float:
        return float(self._edge_weights.sum())

    def total_size(self) -> float:
        return float(self._node_sizes.sum())
