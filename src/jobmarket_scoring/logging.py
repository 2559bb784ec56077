"""Package logger for the marketplace scoring engine.

Everything under ``jobmarket_scoring`` logs through
``logging.getLogger(__name__)``; those records propagate to the
``jobmarket_scoring`` logger below, which writes to stderr.

Scorers only emit DEBUG (ranking sizes, salary analyses).  Digest runs
emit INFO per generated digest and WARNING per skipped saved search, and
since the ``digest`` command usually runs from a scheduler,
:func:`configure_file_logging` keeps a copy of each run under
``data/logs/``.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

DEFAULT_LOG_DIR = "data/logs"
LOG_FILE_PREFIX = "jobmarket-scoring"

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _formatter() -> logging.Formatter:
    return logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATEFMT)


logger = logging.getLogger("jobmarket_scoring")
logger.setLevel(logging.INFO)

# stderr; --verbose and [logging].level adjust it through set_level()
handler = logging.StreamHandler(sys.stderr)
handler.setLevel(logging.INFO)
handler.setFormatter(_formatter())
logger.addHandler(handler)


def configure_file_logging(
    log_dir: str | Path = DEFAULT_LOG_DIR,
    *,
    level: int = logging.INFO,
) -> logging.FileHandler:
    """Mirror the package log into ``<log_dir>/jobmarket-scoring_<timestamp>.log``.

    The directory is created on demand.  Timestamps sort lexically, so the
    newest run is the last file.  If *level* is below the logger's current
    level the logger is lowered too; otherwise DEBUG records would never
    reach the file.  The handler is returned so tests can detach it.
    """
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")

    file_handler = logging.FileHandler(directory / f"{LOG_FILE_PREFIX}_{stamp}.log", encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(_formatter())

    logger.setLevel(min(logger.level, level))
    logger.addHandler(file_handler)
    return file_handler


def set_level(level_name: str) -> None:
    """Apply a level name from settings or ``--verbose`` to the logger and stderr.

    Unknown names fall back to INFO; config validation rejects them earlier.
    """
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logger.setLevel(level)
    handler.setLevel(level)


__all__ = ["DEFAULT_LOG_DIR", "configure_file_logging", "handler", "logger", "set_level"]
