"""Configuration helpers for building partitions from igraph graphs."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, field_validator


class PartitionConfig(BaseModel):
    """How to read a graph and how strictly to check a partition."""

    weight_attr: Optional[str] = Field(
        default="weight", description="Edge attribute holding weights; unit weights if absent"
    )
    node_size_attr: Optional[str] = Field(
        default=None, description="Vertex attribute holding node sizes; size 1 if unset"
    )
    correct_self_loops: Optional[bool] = Field(
        default=None, description="Count self-loops in possible edges; auto-detect if unset"
    )
    consistency_atol: float = Field(
        default=1e-9, description="Absolute tolerance used by consistency checks"
    )

    @field_validator("consistency_atol")
    @classmethod
    def validate_atol(cls, v):
        if v < 0:
            raise ValueError("consistency_atol must be non-negative")
        return v


def load_config(path: Union[str, Path]) -> PartitionConfig:
    """Load a YAML configuration file, expand environment variables and validate it."""
    resolved = Path(path).expanduser().resolve()
    if not resolved.exists():
        raise FileNotFoundError(f"Configuration file not found: {resolved}")
    with resolved.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return PartitionConfig(**_expand_env_vars(data))


def dump_config(config: PartitionConfig, path: Union[str, Path]) -> None:
    """Persist configuration to disk."""
    with Path(path).expanduser().resolve().open("w", encoding="utf-8") as handle:
        yaml.safe_dump(config.model_dump(), handle, sort_keys=False)


def _expand_env_vars(node: Any) -> Any:
    """Recursively expand environment variables in config values."""

    if isinstance(node, dict):
        return {key: _expand_env_vars(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_expand_env_vars(value) for value in node]
    if isinstance(node, str):
        return os.path.expandvars(node)
    return node
