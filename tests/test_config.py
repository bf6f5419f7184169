"""Tests for YAML configuration loading."""

from __future__ import annotations

from pathlib import Path

import pydantic
import pytest

from vertex_partition.config import PartitionConfig, dump_config, load_config


def test_defaults() -> None:
    config = PartitionConfig()
    assert config.weight_attr == "weight"
    assert config.node_size_attr is None
    assert config.correct_self_loops is None
    assert config.consistency_atol == 1e-9


def test_load_config_expands_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARTITION_SIZE_ATTR", "mass")
    path = tmp_path / "partition.yaml"
    path.write_text(
        "weight_attr: strength\n"
        "node_size_attr: ${PARTITION_SIZE_ATTR}\n"
        "correct_self_loops: true\n"
        "consistency_atol: 1.0e-6\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.weight_attr == "strength"
    assert config.node_size_attr == "mass"
    assert config.correct_self_loops is True
    assert config.consistency_atol == pytest.approx(1e-6)


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == PartitionConfig()


def test_dump_then_load(tmp_path: Path) -> None:
    config = PartitionConfig(weight_attr=None, correct_self_loops=False)
    path = tmp_path / "out.yaml"
    dump_config(config, path)
    assert load_config(path) == config


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_negative_tolerance_rejected() -> None:
    with pytest.raises(pydantic.ValidationError):
        PartitionConfig(consistency_atol=-1.0)
