"""Single-slot memo of vertex-to-community weights, one slot per direction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from .graph import Direction, Graph

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheSlot:
    """Weights from one vertex to every community, for one direction.

    ``weights`` is only meaningful while ``vertex`` equals the vertex being
    queried. ``touched`` lists the community ids written during the last
    rebuild. An id is recorded when a non-zero edge weight is added to a
    zero running weight, so it can appear twice if weights cancel to exactly
    zero, and never for zero-weight edges alone.
    """

    weights: np.ndarray
    vertex: Optional[int] = None
    touched: List[int] = field(default_factory=list)


class NeighbourCommunityCache:
    """Lazily rebuilt per-direction weights between a vertex and communities."""

    def __init__(self, graph: Graph, n_communities: int) -> None:
        self._graph = graph
        size = max(graph.vertex_count(), n_communities)
        self._slots: Dict[Direction, CacheSlot] = {
            direction: CacheSlot(weights=np.zeros(size, dtype=np.float64))
            for direction in Direction
        }

    def invalidate(self) -> None:
        """Forget the cached vertex of every slot. Weights are zeroed lazily."""
        for slot in self._slots.values():
            slot.vertex = None

    def reserve(self, n_communities: int) -> None:
        """Make sure every weight table can be indexed by ``n_communities - 1``."""
        for slot in self._slots.values():
            current = slot.weights.shape[0]
            if n_communities > current:
                grown = np.zeros(max(n_communities, 2 * current), dtype=np.float64)
                grown[:current] = slot.weights
                slot.weights = grown

    def _slot_for(self, v: int, direction: Direction, membership: Sequence[int]) -> CacheSlot:
        slot = self._slots[direction]
        if slot.vertex != v:
            self._rebuild(slot, v, direction, membership)
            slot.vertex = v
        return slot

    def _rebuild(
        self, slot: CacheSlot, v: int, direction: Direction, membership: Sequence[int]
    ) -> None:
        weights = slot.weights
        for comm in slot.touched:
            weights[comm] = 0.0

        neighbours = self._graph.neighbors(v, direction)
        halve_loops = not self._graph.is_directed()
        touched: List[int] = []
        for u, e in neighbours:
            comm = membership[u]
            w = self._graph.edge_weight(e)
            # Undirected self-loops are listed twice.
            if u == v and halve_loops:
                w /= 2.0
            if w != 0 and weights[comm] == 0:
                touched.append(comm)
            weights[comm] += w
        slot.touched = touched
        logger.debug(
            "Cached %s weights of vertex %d over %d incident edges",
            direction.value,
            v,
            len(neighbours),
        )

    def weight(self, v: int, comm: int, direction: Direction, membership: Sequence[int]) -> float:
        slot = self._slot_for(v, direction, membership)
        if comm < 0 or comm >= slot.weights.shape[0]:
            return 0.0
        return float(slot.weights[comm])

    def neigh_comms(self, v: int, direction: Direction, membership: Sequence[int]) -> List[int]:
        return list(self._slot_for(v, direction, membership).touched)
