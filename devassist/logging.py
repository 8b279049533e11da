"""Logging utilities for devassist commands."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

_LOGGER_NAME = "devassist"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the devassist hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the devassist logger with console output and optional file sink.

    ``quiet`` keeps stdout clean for machine-readable output (``--json``) by
    only letting warnings through; ``verbose`` wins when both are set.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[devassist] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


@contextmanager
def log_stage(logger: logging.Logger, stage: str) -> Iterator[None]:
    """Log the wall-clock duration of a pipeline stage at DEBUG level."""
    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug("Stage %s finished in %.1f ms", stage, elapsed_ms)


__all__ = ["configure_logging", "get_logger", "log_stage"]
