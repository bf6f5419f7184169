"""Utility helpers shared across modules."""

from __future__ import annotations

import contextlib
import logging
from typing import Iterator, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@contextlib.contextmanager
def section(name: str, level: int = logging.INFO) -> Iterator[None]:
    """Context manager that logs entry and exit of a processing section."""
    log = logging.getLogger(__name__)
    log.log(level, "Starting %s", name)
    try:
        yield
    finally:
        log.log(level, "Finished %s", name)


def configure_logging(level: Union[int, str] = logging.WARNING) -> None:
    """Attach a basic stream handler to the package logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger(__package__ or "vertex_partition").setLevel(level)
