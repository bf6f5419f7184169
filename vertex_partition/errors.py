"""Error types raised by the partition engine."""

from __future__ import annotations


class PartitionError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgument(PartitionError, ValueError):
    """Raised when a membership vector or identifier does not fit the graph."""


class CapacityExceeded(PartitionError, RuntimeError):
    """Raised when more community slots are requested than there are vertices."""


class InvalidDirection(PartitionError, ValueError):
    """Raised for a neighbour direction outside of out/in/all."""
