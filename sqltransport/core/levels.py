from __future__ import annotations

import logging

from sqltransport.core.errors import ValidationError

# Lower value means more severe.
LEVELS = {
    "error": 0,
    "warn": 1,
    "info": 2,
    "http": 3,
    "verbose": 4,
    "debug": 5,
    "silly": 6,
}

STDLIB_LEVELS = (
    (logging.ERROR, "error"),
    (logging.WARNING, "warn"),
    (logging.INFO, "info"),
    (logging.DEBUG, "debug"),
)


def severity(level: str) -> int:
    try:
        return LEVELS[level]
    except KeyError:
        raise ValidationError(f"unknown level {level!r}") from None


def accepts(threshold: str, level: str) -> bool:
    """Return True when a sink configured at ``threshold`` takes ``level`` records."""

    return severity(level) <= severity(threshold)


def from_stdlib(levelno: int) -> str:
    for floor, name in STDLIB_LEVELS:
        if levelno >= floor:
            return name
    return "silly"


__all__ = ["LEVELS", "severity", "accepts", "from_stdlib"]
