"""
Logging configuration for the authenticator service.
"""

import logging

from authenticator.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(level: str | None = None) -> None:
    """
    Configure the root logger.

    Safe to call more than once; the stream handler is only attached on the
    first call, later calls just adjust the level.

    Args:
        level: Log level name; falls back to LOG_LEVEL from settings.
    """
    global _configured

    level_name = (level or settings.log_level).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root_logger.addHandler(handler)
        _configured = True

    logging.getLogger(__name__).info("Logging configured at %s", level_name)
