"""Mutable vertex partition with incrementally maintained community statistics."""

from __future__ import annotations

import logging
from typing import (
    TYPE_CHECKING,
    FrozenSet,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Union,
)

import igraph as ig
import numpy as np

from .cache import NeighbourCommunityCache
from .errors import CapacityExceeded, InvalidArgument, InvalidDirection
from .graph import Direction, Graph
from .utils import section

if TYPE_CHECKING:  # pragma: no cover
    from .config import PartitionConfig

logger = logging.getLogger(__name__)

DEFAULT_ATOL = 1e-9

# Directions walked by ``move_node``; each one owns a per-community aggregate.
_MOVE_DIRECTIONS = (Direction.OUT, Direction.IN)


def _validate_membership(membership: Sequence[int], n_vertices: int) -> List[int]:
    values = list(membership)
    if len(values) != n_vertices:
        raise InvalidArgument(
            f"Membership vector has incorrect size: expected {n_vertices}, got {len(values)}"
        )
    result: List[int] = []
    for v, comm in enumerate(values):
        if isinstance(comm, bool) or not isinstance(comm, (int, np.integer)):
            raise InvalidArgument(f"Community of vertex {v} must be an integer, got {comm!r}")
        if comm < 0:
            raise InvalidArgument(f"Community of vertex {v} must be non-negative, got {comm}")
        result.append(int(comm))
    return result


class MutableVertexPartition:
    """A partition of a graph's vertices into communities.

    Alongside the membership vector the partition keeps, per community, its
    member set, size, internal weight and outgoing/incoming weight, plus the
    total internal weight and total possible edges over all communities. The
    aggregates are computed once on (re)initialisation and afterwards kept up
    to date by ``move_node`` in time proportional to the vertex degree.

    Parameters
    ----------
    graph:
        The read-only ``Graph`` the partition is defined on. It is never
        modified and may be shared between partitions.
    membership:
        Community id per vertex. Defaults to one community per vertex.
    """

    def __init__(self, graph: Graph, membership: Optional[Sequence[int]] = None) -> None:
        if not isinstance(graph, Graph):
            raise TypeError("graph must be a vertex_partition.Graph")
        self._graph = graph
        n_vertices = graph.vertex_count()
        if membership is None:
            self._membership = list(range(n_vertices))
        else:
            self._membership = _validate_membership(membership, n_vertices)

        self._communities: List[Set[int]] = []
        self._csize: List[float] = []
        self._weight_in: List[float] = []
        self._weight_from: List[float] = []
        self._weight_to: List[float] = []
        self._empty_communities: List[int] = []
        self._total_weight_in_all_comms = 0.0
        self._total_possible_edges_in_all_comms = 0.0
        self._cache: NeighbourCommunityCache
        self.atol = DEFAULT_ATOL

        self._init_admin()

    @classmethod
    def from_config(
        cls,
        graph: ig.Graph,
        config: "PartitionConfig",
        membership: Optional[Sequence[int]] = None,
    ) -> "MutableVertexPartition":
        """Wrap an ``igraph.Graph`` per ``config`` and partition it."""
        partition = cls(Graph.from_config(graph, config), membership)
        partition.atol = config.consistency_atol
        return partition

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------
    def _init_admin(self) -> None:
        """Rebuild every aggregate from the membership vector in one pass."""
        graph = self._graph
        n_vertices = graph.vertex_count()
        membership = self._membership
        nb_comms = max(membership) + 1 if membership else 0

        with section("partition initialisation", level=logging.DEBUG):
            communities: List[Set[int]] = [set() for _ in range(nb_comms)]
            csize = [0.0] * nb_comms
            weight_in = [0.0] * nb_comms
            weight_from = [0.0] * nb_comms
            weight_to = [0.0] * nb_comms
            total_in = 0.0
            directed = graph.is_directed()

            for v in range(n_vertices):
                v_comm = membership[v]
                communities[v_comm].add(v)
                csize[v_comm] += graph.node_size(v)

                for u, e in graph.neighbors(v, Direction.OUT):
                    u_comm = membership[u]
                    w = graph.edge_weight(e)
                    weight_from[v_comm] += w
                    weight_to[u_comm] += w
                    if v_comm == u_comm:
                        # Undirected edges are seen once from each endpoint.
                        if not directed:
                            w /= 2.0
                        weight_in[v_comm] += w
                        total_in += w

            self._communities = communities
            self._csize = csize
            self._weight_in = weight_in
            self._weight_from = weight_from
            self._weight_to = weight_to
            self._total_weight_in_all_comms = total_in
            self._total_possible_edges_in_all_comms = sum(
                graph.possible_edges(size) for size in csize
            )
            self._empty_communities = [c for c in range(nb_comms) if csize[c] == 0]

            self._cache = NeighbourCommunityCache(graph, nb_comms)

        logger.debug(
            "Initialised partition: %d vertices, %d community slots, %d empty",
            n_vertices,
            nb_comms,
            len(self._empty_communities),
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def graph(self) -> Graph:
        return self._graph

    def vertex_count(self) -> int:
        return self._graph.vertex_count()

    def membership(self, v: Optional[int] = None) -> Union[int, List[int]]:
        """Community of ``v``, or a copy of the whole membership vector."""
        if v is None:
            return list(self._membership)
        return self._membership[v]

    def community_count(self) -> int:
        """Number of community slots, empty ones included."""
        return len(self._communities)

    def community_size(self, comm: int) -> float:
        if 0 <= comm < len(self._csize):
            return self._csize[comm]
        return 0.0

    def community_members(self, comm: int) -> FrozenSet[int]:
        return frozenset(self._communities[comm])

    def internal_weight(self, comm: int) -> float:
        return self._weight_in[comm]

    def from_weight(self, comm: int) -> float:
        return self._weight_from[comm]

    def to_weight(self, comm: int) -> float:
        return self._weight_to[comm]

    def total_internal_weight(self) -> float:
        return self._total_weight_in_all_comms

    def total_possible_edges(self) -> float:
        return self._total_possible_edges_in_all_comms

    def empty_communities(self) -> List[int]:
        """Pool of empty community ids, bottom of the stack first."""
        return list(self._empty_communities)

    # ------------------------------------------------------------------
    # Empty-community pool
    # ------------------------------------------------------------------
    def get_empty_community(self) -> int:
        """Return an empty community id, creating a new slot if none is free."""
        if not self._empty_communities:
            self.add_empty_community()
        return self._empty_communities[-1]

    def add_empty_community(self) -> int:
        """Append a new, empty community slot and return its id."""
        nb_comms = len(self._communities) + 1
        if nb_comms > self._graph.vertex_count():
            raise CapacityExceeded(
                "There cannot be more communities than nodes, "
                "so there must already be an empty community."
            )
        new_comm = nb_comms - 1
        self._communities.append(set())
        self._csize.append(0.0)
        self._weight_in.append(0.0)
        self._weight_from.append(0.0)
        self._weight_to.append(0.0)
        self._cache.reserve(nb_comms)
        self._empty_communities.append(new_comm)
        logger.debug("Added empty community %d", new_comm)
        return new_comm

    # ------------------------------------------------------------------
    # Move operator
    # ------------------------------------------------------------------
    def move_node(self, v: int, new_comm: int) -> None:
        """Move vertex ``v`` to community ``new_comm`` and update all aggregates."""
        graph = self._graph
        if not 0 <= v < graph.vertex_count():
            raise InvalidArgument(f"Vertex {v} out of range [0, {graph.vertex_count() - 1}]")
        if not 0 <= new_comm < len(self._communities):
            raise InvalidArgument(
                f"Community {new_comm} is not allocated ({len(self._communities)} slots)"
            )

        membership = self._membership
        csize = self._csize
        node_size = graph.node_size(v)
        old_comm = membership[v]

        # Both sizes must be read before either is updated.
        if new_comm != old_comm:
            size_new = csize[new_comm]
            size_old = csize[old_comm]
            delta = (
                graph.possible_edges(size_new + node_size)
                - graph.possible_edges(size_new)
                + graph.possible_edges(size_old - node_size)
                - graph.possible_edges(size_old)
            )
            self._total_possible_edges_in_all_comms += delta

        # Zero-sized vertices never change whether a community is empty.
        was_empty = csize[old_comm] == 0
        self._communities[old_comm].discard(v)
        csize[old_comm] -= node_size
        if not self._communities[old_comm]:
            # Fractional sizes can leave rounding residue behind.
            csize[old_comm] = 0.0
        if csize[old_comm] == 0 and not was_empty:
            self._empty_communities.append(old_comm)

        if csize[new_comm] == 0 and node_size != 0:
            self._remove_from_empty_pool(new_comm)
        self._communities[new_comm].add(v)
        csize[new_comm] += node_size

        divisor = 1.0 if graph.is_directed() else 2.0
        for direction in _MOVE_DIRECTIONS:
            side = self._directional_weights(direction)
            for u, e in graph.neighbors(v, direction):
                u_comm = membership[u]
                w = graph.edge_weight(e)
                side[old_comm] -= w
                side[new_comm] += w

                int_weight = w / divisor / (2.0 if u == v else 1.0)
                if u_comm == old_comm:
                    self._weight_in[old_comm] -= int_weight
                    self._total_weight_in_all_comms -= int_weight
                if u_comm == new_comm or u == v:
                    self._weight_in[new_comm] += int_weight
                    self._total_weight_in_all_comms += int_weight

        membership[v] = new_comm
        self._cache.invalidate()
        logger.debug("Moved vertex %d from community %d to %d", v, old_comm, new_comm)

    def _directional_weights(self, direction: Direction) -> List[float]:
        if direction is Direction.OUT:
            return self._weight_from
        if direction is Direction.IN:
            return self._weight_to
        raise InvalidDirection(f"Incorrect direction for updating the aggregates: {direction}")

    def _remove_from_empty_pool(self, comm: int) -> None:
        pool = self._empty_communities
        for idx in range(len(pool) - 1, -1, -1):
            if pool[idx] == comm:
                del pool[idx]
                return
        logger.warning("Community %d has size 0 but is not in the empty pool", comm)

    # ------------------------------------------------------------------
    # Neighbour communities
    # ------------------------------------------------------------------
    def weight_to_comm(self, v: int, comm: int) -> float:
        """Total weight of edges from ``v`` into community ``comm``."""
        return self._cache.weight(v, comm, Direction.OUT, self._membership)

    def weight_from_comm(self, v: int, comm: int) -> float:
        """Total weight of edges from community ``comm`` into ``v``."""
        return self._cache.weight(v, comm, Direction.IN, self._membership)

    def weight_all_comm(self, v: int, comm: int) -> float:
        """Total weight of edges between ``v`` and ``comm`` in either direction."""
        return self._cache.weight(v, comm, Direction.ALL, self._membership)

    def get_neigh_comms(
        self,
        v: int,
        direction: Union[Direction, str, int],
        constraint_membership: Optional[Sequence[int]] = None,
    ) -> Union[List[int], Set[int]]:
        """Communities adjacent to ``v`` in ``direction``.

        Without ``constraint_membership`` this returns the cached list of
        communities ``v`` has weight to. With it, the cache is bypassed and a
        new set is built from the neighbours that share ``v``'s group in
        ``constraint_membership``.
        """
        direction = Direction.parse(direction)
        if constraint_membership is None:
            return self._cache.neigh_comms(v, direction, self._membership)

        if len(constraint_membership) != self._graph.vertex_count():
            raise InvalidArgument("Constraint membership vector has incorrect size")
        group = constraint_membership[v]
        return {
            self._membership[u]
            for u, _ in self._graph.neighbors(v, direction)
            if constraint_membership[u] == group
        }

    # ------------------------------------------------------------------
    # Renumbering and reconstruction
    # ------------------------------------------------------------------
    def renumber_communities(
        self, mapping: Optional[Union[Mapping[int, int], Sequence[int]]] = None
    ) -> None:
        """Relabel communities and recompute every aggregate.

        Without ``mapping`` the largest community becomes 0, the next largest
        1 and so on, ties broken by the old id; empty slots disappear. With
        ``mapping`` each old id ``c`` becomes ``mapping[c]``.
        """
        if mapping is None:
            in_use = [c for c in range(len(self._communities)) if self._communities[c]]
            order = sorted(in_use, key=lambda c: (-self._csize[c], c))
            new_ids = {comm: idx for idx, comm in enumerate(order)}
        else:
            new_ids = {}
            for comm in set(self._membership):
                try:
                    target = mapping[comm]
                except (KeyError, IndexError) as exc:
                    raise InvalidArgument(f"No new id given for community {comm}") from exc
                new_ids[comm] = target

        self._membership = _validate_membership(
            [new_ids[c] for c in self._membership], self._graph.vertex_count()
        )
        self._init_admin()

    def set_membership(self, membership: Sequence[int]) -> None:
        """Replace the membership vector and recompute every aggregate."""
        self._membership = _validate_membership(membership, self._graph.vertex_count())
        self._init_admin()

    def from_coarser_partition(
        self,
        coarser: Union["MutableVertexPartition", Sequence[int]],
        vertex_to_coarse_vertex: Optional[Sequence[int]] = None,
    ) -> None:
        """Take communities from a partition of the aggregated graph.

        Vertex ``v`` is represented by coarse vertex
        ``vertex_to_coarse_vertex[v]`` (by default its own community), and
        receives that coarse vertex's community.
        """
        if isinstance(coarser, MutableVertexPartition):
            coarse_membership = coarser.membership()
        else:
            coarse_membership = list(coarser)
        if vertex_to_coarse_vertex is None:
            vertex_to_coarse_vertex = self._membership

        n_vertices = self._graph.vertex_count()
        if len(vertex_to_coarse_vertex) != n_vertices:
            raise InvalidArgument("Coarse vertex mapping has incorrect size")
        new_membership: List[int] = []
        for v in range(n_vertices):
            v_coarse = vertex_to_coarse_vertex[v]
            if not 0 <= v_coarse < len(coarse_membership):
                raise InvalidArgument(
                    f"Vertex {v} maps to coarse vertex {v_coarse}, "
                    f"but the coarser partition has {len(coarse_membership)} vertices"
                )
            new_membership.append(coarse_membership[v_coarse])

        self.set_membership(new_membership)

    def from_partition(self, other: "MutableVertexPartition") -> None:
        """Copy the membership of ``other``, defined on the same vertex set."""
        if other.vertex_count() != self._graph.vertex_count():
            raise InvalidArgument(
                f"Partition covers {other.vertex_count()} vertices, "
                f"expected {self._graph.vertex_count()}"
            )
        self.set_membership(other.membership())

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def check_consistency(self, atol: Optional[float] = None) -> List[str]:
        """Compare the incremental aggregates with a fresh recomputation.

        Returns a list of discrepancies, empty when everything agrees within
        ``atol`` (the partition's ``atol`` attribute by default).
        """
        atol = self.atol if atol is None else atol
        fresh = MutableVertexPartition(self._graph, self._membership)
        problems: List[str] = []

        for v, comm in enumerate(self._membership):
            if v not in self._communities[comm]:
                problems.append(f"vertex {v} missing from community {comm}")
        for comm, members in enumerate(self._communities):
            stray = [v for v in members if self._membership[v] != comm]
            if stray:
                problems.append(f"community {comm} holds vertices of other communities: {stray}")

        pool = set(self._empty_communities)
        if len(pool) != len(self._empty_communities):
            problems.append("empty pool holds duplicate ids")
        for comm in range(len(self._communities)):
            expected = fresh.community_size(comm)
            if abs(self._csize[comm] - expected) > atol:
                problems.append(f"size of {comm}: {self._csize[comm]} != {expected}")
            if (self._csize[comm] == 0) != (comm in pool):
                problems.append(f"community {comm} size/pool mismatch")
            for label, ours, theirs in (
                ("internal weight", self._weight_in, fresh._weight_in),
                ("from weight", self._weight_from, fresh._weight_from),
                ("to weight", self._weight_to, fresh._weight_to),
            ):
                expected = theirs[comm] if comm < len(theirs) else 0.0
                if abs(ours[comm] - expected) > atol:
                    problems.append(f"{label} of {comm}: {ours[comm]} != {expected}")

        if abs(self._total_weight_in_all_comms - fresh.total_internal_weight()) > atol:
            problems.append(
                f"total internal weight: {self._total_weight_in_all_comms} "
                f"!= {fresh.total_internal_weight()}"
            )
        if abs(self._total_possible_edges_in_all_comms - fresh.total_possible_edges()) > atol:
            problems.append(
                f"total possible edges: {self._total_possible_edges_in_all_comms} "
                f"!= {fresh.total_possible_edges()}"
            )

        for problem in problems:
            logger.warning("Inconsistent partition: %s", problem)
        return problems

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(vertices={self._graph.vertex_count()}, "
            f"communities={len(self._communities)}, "
            f"empty={len(self._empty_communities)})"
        )
