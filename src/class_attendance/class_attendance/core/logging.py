"""Logging setup shared by the Flask app and the scripts."""

from __future__ import annotations

import logging
import logging.config

# Top-level package logger, whichever way the package was imported.
PACKAGE_LOGGER = __name__.rpartition(".core.")[0]


def build_logging_config(*, level: str = "INFO", json: bool = False) -> dict:
    formatter = "json" if json else "plain"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
            },
        },
        "loggers": {
            PACKAGE_LOGGER: {
                "handlers": ["console"],
                "level": level.upper(),
                "propagate": False,
            },
        },
    }


def configure_logging(*, level: str = "INFO", json: bool = False) -> None:
    logging.config.dictConfig(build_logging_config(level=level, json=json))
