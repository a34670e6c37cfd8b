"""Logging utilities for the openfx package."""

from __future__ import annotations

import logging
from typing import Optional

_LOGGER: Optional[logging.Logger] = None

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str = "openfx") -> logging.Logger:
    """Return a named logger, configuring the root handler on first use."""
    global _LOGGER
    if _LOGGER is None:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        _LOGGER = logging.getLogger("openfx")
    return logging.getLogger(name)


def set_log_level(level: int | str) -> None:
    """Adjust the verbosity of every ``openfx`` logger at once."""

    get_logger().setLevel(level)


__all__ = ["LOG_FORMAT", "get_logger", "set_log_level"]
