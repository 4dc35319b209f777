from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError


class TransportError(Exception):
    """Base class for errors raised by the transport itself."""


class ConfigurationError(TransportError, ValueError):
    """Settings are malformed or incomplete; the transport cannot be built."""


class StoreConnectionError(TransportError):
    """The database could not be reached."""


class ConnectionClosedError(StoreConnectionError):
    """The transport was closed before the call was made."""


class ValidationError(TransportError, ValueError):
    """A log call carried arguments that cannot be mapped to a row."""


class MetadataConflictError(ValidationError):
    """A canonical metadata key and its legacy spelling disagree."""


# Failures raised by the insert itself are SQLAlchemy's own exceptions,
# handed to callers unchanged.
StoreError = SQLAlchemyError


__all__ = [
    "TransportError",
    "ConfigurationError",
    "StoreConnectionError",
    "ConnectionClosedError",
    "ValidationError",
    "MetadataConflictError",
    "StoreError",
]
