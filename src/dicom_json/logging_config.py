"""Central logging configuration for the converter."""

from __future__ import annotations

import logging
import logging.config
import os
from typing import Any, Dict, Optional

from rich.console import Console


_CONFIGURED: Optional[int] = None


def _handler_config(console: Optional[Console]) -> Dict[str, Any]:
    if console is None:
        return {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stderr",
        }
    # Shares the console with any live progress display so lines do not interleave.
    return {
        "class": "rich.logging.RichHandler",
        "formatter": "rich",
        "console": console,
        "show_path": False,
    }


def configure_logging(default_level: Optional[str] = None, console: Optional[Console] = None) -> None:
    """Log to stderr with a consistent formatter.

    When *console* is given, records are rendered by ``RichHandler`` on that
    console. Repeated calls with the same console only adjust the root level.
    """

    global _CONFIGURED
    level_name = (default_level or os.getenv("LOG_LEVEL", "WARNING")).upper()
    target = id(console) if console is not None else 0
    if _CONFIGURED == target:
        logging.getLogger().setLevel(level_name)
        return

    formatter = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": formatter,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "rich": {
                    "format": "[%(name)s] %(message)s",
                    "datefmt": "%H:%M:%S",
                },
            },
            "handlers": {
                "stderr": _handler_config(console),
            },
            "root": {
                "level": level_name,
                "handlers": ["stderr"],
            },
            "loggers": {
                "pydicom": {
                    "level": "ERROR",
                    "handlers": ["stderr"],
                    "propagate": False,
                },
            },
        }
    )

    _CONFIGURED = target
