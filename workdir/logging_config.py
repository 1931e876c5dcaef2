"""Console logging for shard processes and the work-directory CLI."""

from __future__ import annotations

import logging
import os
import sys

log = logging.getLogger("workdir")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Send log records to stderr, keeping stdout free for command output.

    Args:
        level: Level name or number. ``None`` reads ``$LOG_LEVEL``; unknown
            names resolve to ``INFO``.

    Returns:
        logging.Logger: The ``workdir`` logger.
    """
    resolved_level = _coerce_level(level)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(resolved_level)

    log.setLevel(resolved_level)
    log.debug("Log level set to %s", logging.getLevelName(resolved_level))
    return log


def _coerce_level(level: str | int | None) -> int:
    """Map a level name, number or ``$LOG_LEVEL`` to a numeric level."""
    candidate = os.getenv("LOG_LEVEL", "INFO") if level is None else level
    if isinstance(candidate, int):
        return candidate
    numeric = logging.getLevelName(str(candidate).upper())
    return numeric if isinstance(numeric, int) else logging.INFO
