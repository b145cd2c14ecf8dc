"""Logging setup applied once at application startup."""

from __future__ import annotations

import logging
import sys
from functools import lru_cache

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@lru_cache(maxsize=1)
def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger. Repeated calls are no-ops."""
    logging.basicConfig(
        format=LOG_FORMAT,
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )


__all__ = ["configure_logging"]
