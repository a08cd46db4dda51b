"""Logging configuration.

One logger per subsystem, all below the ``oculog`` root so a single
``setup_logging()`` call controls them:

    from oculog.utils.logging import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys
from datetime import datetime
from typing import Optional, Union

from .config import Settings, get_settings

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Subsystem loggers
AUTH = "oculog.auth"
NETWORK = "oculog.network"
LOCATION = "oculog.location"
WEATHER = "oculog.weather"
SYNC = "oculog.sync"


def setup_logging(
    level: Optional[Union[int, str]] = None,
    log_to_file: Optional[bool] = None,
    settings: Optional[Settings] = None,
    log_filename: Optional[str] = None,
) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (default: settings.log_level)
        log_to_file: Also write to data_dir/logs (default: settings.log_to_file)
        settings: Settings to read defaults from
        log_filename: Custom log filename (default: oculog_YYYY-MM-DD.log)
    """
    settings = settings or get_settings()
    if level is None:
        level = settings.log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    if log_to_file is None:
        log_to_file = settings.log_to_file

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_to_file:
        log_dir = settings.data_dir / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        if log_filename is None:
            log_filename = f"oculog_{datetime.now().strftime('%Y-%m-%d')}.log"
        handlers.append(logging.FileHandler(log_dir / log_filename))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    # Reduce noise from the HTTP stack
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("oculog").debug("Logging initialized")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
