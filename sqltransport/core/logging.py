from __future__ import annotations

from logging.config import dictConfig

LOGGER_NAME = "sqltransport"


def setup_logging(level: str = "INFO") -> None:
    """Route the package's diagnostic logger to the console."""

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
        },
        "loggers": {
            LOGGER_NAME: {
                "handlers": ["console"],
                "level": level.upper(),
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    }

    dictConfig(config)


__all__ = ["setup_logging", "LOGGER_NAME"]
