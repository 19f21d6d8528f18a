"""One-shot logging setup for the listener process."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "TITLESYNC_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _parse_level(value: str | None) -> int:
    if not value:
        return logging.INFO
    level = getattr(logging, value.strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, force: bool = False) -> logging.Logger:
    """Configure the root handler from `TITLESYNC_LOG_LEVEL` and return the package logger."""
    logging.basicConfig(
        level=_parse_level(os.getenv(LOG_LEVEL_ENV)),
        format=LOG_FORMAT,
        force=force,
    )
    return logging.getLogger("titlesync")
