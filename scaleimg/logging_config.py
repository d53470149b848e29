"""Logging setup for the command line tool."""

from __future__ import annotations

import logging
import logging.config
import os
from typing import Optional


_CONFIGURED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Send log records to stderr with a consistent format. Safe to call twice."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    level_name = (level or os.getenv("SCALEIMG_LOG_LEVEL", "WARNING")).upper()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "stream": "ext://sys.stderr",
                }
            },
            "root": {
                "level": level_name,
                "handlers": ["stderr"],
            },
        }
    )
    _CONFIGURED = True
