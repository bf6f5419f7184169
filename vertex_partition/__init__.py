"""Mutable vertex partitions with incrementally maintained community statistics."""

from .errors import CapacityExceeded, InvalidArgument, InvalidDirection, PartitionError
from .graph import Direction, Graph
from .partition import MutableVertexPartition

__version__ = "0.1.0"

__all__ = [
    "cache",
    "config",
    "errors",
    "graph",
    "partition",
    "utils",
    "CapacityExceeded",
    "Direction",
    "Graph",
    "InvalidArgument",
    "InvalidDirection",
    "MutableVertexPartition",
    "PartitionError",
]
