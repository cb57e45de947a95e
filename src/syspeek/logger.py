"""Logging setup for syspeek."""

import logging
import sys
from typing import Final, TextIO

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def resolve_log_level(level_name: str) -> int:
    """Convert a level name such as "info" to its numeric value."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")
    return level


def configure_logging(level_name: str = "WARNING", stream: TextIO | None = None) -> None:
    """
    Send log records to stderr.

    Reports go to stdout, so logs never interleave with them on the same stream.
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(
        level=resolve_log_level(level_name),
        handlers=[handler],
        force=True,
    )
