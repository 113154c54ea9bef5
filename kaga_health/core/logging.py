# kaga_health/core/logging.py
from __future__ import annotations

import logging
from logging.config import dictConfig

from kaga_health.core.config import settings

_configured = False


def configure_logging(level: str | None = None) -> None:
    """
    Configure the `kaga_health` logger tree once per process.

    Uvicorn keeps its own handlers; we only attach a console handler to
    our namespace so module loggers (`kaga_health.appointments`, ...) show up
    next to the access log.
    """
    global _configured
    if _configured:
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "kaga_health": {
                    "handlers": ["console"],
                    "level": (level or settings.LOG_LEVEL).upper(),
                    "propagate": False,
                },
            },
        }
    )
    _configured = True
    logging.getLogger("kaga_health.startup").debug("logging configured")
