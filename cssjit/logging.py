"""Logging utilities for cssjit commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "cssjit"

# Per-site extraction misses are noisy; they sit below DEBUG.
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the cssjit hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, trace: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the cssjit logger with console output and optional file sink."""
    if trace:
        level = TRACE
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[cssjit] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["TRACE", "configure_logging", "get_logger"]
