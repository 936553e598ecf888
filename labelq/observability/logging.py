"""
Logger setup for LabelQ.

Every module asks `get_logger(__name__)` for its logger. The first call hangs
one stream handler on the root logger so the API process, the backfill job and
test runs share a format. `LABELQ_LOG_LEVEL` is read on each call, so a test or
an operator can raise verbosity without restarting.
"""

from __future__ import annotations

import logging
import os
from typing import Final

LOG_LEVEL_ENV: Final[str] = "LABELQ_LOG_LEVEL"
LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

_root_configured: bool = False


def resolve_level() -> int:
    """Level named by LABELQ_LOG_LEVEL; unknown names fall back to INFO."""
    level = logging.getLevelName(os.getenv(LOG_LEVEL_ENV, "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _configure_root(level: int) -> None:
    global _root_configured

    root = logging.getLogger()
    if not _root_configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
        _root_configured = True
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Logger for `name` at the configured level, with the root handler in place."""
    level = resolve_level()
    _configure_root(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
