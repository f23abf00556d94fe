"""
logger.py

Responsibility: Configures process-wide logging once at startup: console
output plus an optional daily-rotated log file.
Does NOT: define application loggers; every module uses
logging.getLogger(__name__).
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "ddns.log"

# Days of rotated log files kept on disk
DAYS_TO_KEEP = 7

_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> None:
    """
    Initialises the root logger.

    Args:
        verbose: DEBUG level when True, INFO otherwise.
        log_dir: Directory for ddns.log; file logging is off when None.

    Returns:
        None
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            TimedRotatingFileHandler(
                log_dir / LOG_FILE_NAME,
                when="midnight",
                backupCount=DAYS_TO_KEEP,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=_FORMAT,
        datefmt=_DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    # httpx logs every request at INFO; only show it when debugging
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("apscheduler").setLevel(logging.WARNING)
