"""
Logging setup for command line tools.

The library only creates loggers; configure_logging is called by the
replay CLI, never on import.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Union


def configure_logging(level: Union[int, str] = "WARNING") -> None:
    """
    Route package logs to stderr.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or number
    """
    if isinstance(level, str):
        level = level.upper()

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "taiko_engine": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)


__all__ = ["configure_logging"]
