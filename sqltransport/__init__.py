"""Persist log calls as rows of a relational table through SQLAlchemy."""

from sqltransport.core.config import TransportSettings
from sqltransport.core.errors import (
    ConfigurationError,
    ConnectionClosedError,
    MetadataConflictError,
    StoreConnectionError,
    StoreError,
    TransportError,
    ValidationError,
)
from sqltransport.core.logging import setup_logging
from sqltransport.interfaces import LogSink
from sqltransport.schemas.log import LogEntry
from sqltransport.services.frontend import Logger
from sqltransport.services.handler import TransportHandler
from sqltransport.services.row_mapper import map_row, normalize_metadata
from sqltransport.services.transport import SQLTransport

__version__ = "0.2.0"

__all__ = [
    "SQLTransport",
    "TransportSettings",
    "Logger",
    "LogSink",
    "LogEntry",
    "TransportHandler",
    "map_row",
    "normalize_metadata",
    "setup_logging",
    "TransportError",
    "ConfigurationError",
    "StoreConnectionError",
    "ConnectionClosedError",
    "ValidationError",
    "MetadataConflictError",
    "StoreError",
]
