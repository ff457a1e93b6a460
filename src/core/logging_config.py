"""Logging setup for the API server and CLI."""

import logging.config
from typing import Optional

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once.

    Args:
        level: Optional log level name; defaults to LOG_LEVEL.
    """
    global _configured
    if _configured:
        return

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                }
            },
            "root": {"level": level or LOG_LEVEL, "handlers": ["console"]},
            "loggers": {
                # SQL echo is controlled by DATABASE_ECHO, keep it quiet here
                "sqlalchemy.engine": {"level": "WARNING"},
            },
        }
    )
    _configured = True
