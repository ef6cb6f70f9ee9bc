"""Loguru sink setup for the CLI and library users.

Records go to stderr, either as readable lines or as one JSON object per
record. A rotating plain-text file is added when a log directory is set.
"""

import sys
from pathlib import Path

from loguru import logger

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"
_LOG_FILE_NAME = "geocoder-list.log"


def setup_logging(log_level: str = "INFO", log_dir: str | None = None, *, serialize: bool = False) -> None:
    """Replace existing Loguru sinks with the geocoder-list ones.

    Args:
        log_level: Minimum level, case-insensitive.
        log_dir: Directory for ``geocoder-list.log`` (rotated daily, kept 7 days).
        serialize: Emit stderr records as JSON, e.g. for log shippers.
    """
    level = log_level.upper()
    logger.remove()

    if serialize:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=_LOG_FORMAT)

    if not log_dir:
        return

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path / _LOG_FILE_NAME,
        level=level,
        format=_LOG_FORMAT,
        rotation="24h",
        retention="7 days",
    )
