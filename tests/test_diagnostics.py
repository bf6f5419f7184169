"""Tests for consistency checks and logging helpers."""

from __future__ import annotations

import logging

import pytest

from vertex_partition.graph import Graph
from vertex_partition.partition import MutableVertexPartition
from vertex_partition.utils import configure_logging, section


def test_check_consistency_reports_tampering(
    path_graph: Graph, caplog: pytest.LogCaptureFixture
) -> None:
    partition = MutableVertexPartition(path_graph, [0, 0, 1, 1])
    assert partition.check_consistency() == []

    partition._weight_in[0] += 0.5
    partition._total_weight_in_all_comms += 0.5
    with caplog.at_level(logging.WARNING, logger="vertex_partition.partition"):
        problems = partition.check_consistency()
    assert any("internal weight of 0" in p for p in problems)
    assert any("total internal weight" in p for p in problems)
    assert "Inconsistent partition" in caplog.text

    # Within a generous tolerance the drift is accepted.
    assert partition.check_consistency(atol=1.0) == []


def test_check_consistency_spots_membership_mismatch(path_graph: Graph) -> None:
    partition = MutableVertexPartition(path_graph, [0, 0, 1, 1])
    partition._communities[0].discard(1)
    problems = partition.check_consistency()
    assert "vertex 1 missing from community 0" in problems


def test_moves_are_logged_at_debug(path_graph: Graph, caplog: pytest.LogCaptureFixture) -> None:
    partition = MutableVertexPartition(path_graph)
    with caplog.at_level(logging.DEBUG, logger="vertex_partition"):
        partition.move_node(1, 0)
    assert "Moved vertex 1 from community 1 to 0" in caplog.text


def test_section_logs_entry_and_exit(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="vertex_partition.utils"):
        with section("refinement"):
            pass
    assert "Starting refinement" in caplog.text
    assert "Finished refinement" in caplog.text


def test_configure_logging_sets_package_level() -> None:
    configure_logging("debug")
    assert logging.getLogger("vertex_partition").level == logging.DEBUG
    configure_logging(logging.WARNING)
    assert logging.getLogger("vertex_partition").level == logging.WARNING
