from __future__ import annotations

import logging
import sys
import traceback
from typing import Any, Dict, Optional

from sqltransport.core.levels import accepts, from_stdlib
from sqltransport.core.logging import LOGGER_NAME
from sqltransport.interfaces import LogSink
from sqltransport.services.transport import in_transport_write

# LogRecord attributes copied into the row metadata when set via ``extra``.
METADATA_ATTRIBUTES = ("meta", "ip", "session", "route", "query", "body", "host", "url")


class TransportHandler(logging.Handler):
    """Bridge from the standard ``logging`` module into a log sink."""

    def __init__(self, sink: LogSink, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.sink = sink

    def build_metadata(self, record: logging.LogRecord) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {"logger": record.name}
        for attribute in METADATA_ATTRIBUTES:
            if attribute in record.__dict__:
                metadata[attribute] = record.__dict__[attribute]
        return metadata

    def emit(self, record: logging.LogRecord) -> None:
        # Our own diagnostics, and anything logged while a write is running
        # (SQL echo included), never go back into a sink.
        if record.name == LOGGER_NAME or record.name.startswith(LOGGER_NAME + "."):
            return
        if in_transport_write():
            return

        level = from_stdlib(record.levelno)
        if not accepts(self.sink.level, level):
            return
        try:
            message = self.format(record)
            self.sink.log(level, message, self.build_metadata(record), self._report)
        except Exception:
            self.handleError(record)

    def _report(self, error: Optional[BaseException], _result: Any) -> None:
        if error is not None and logging.raiseExceptions:
            sys.stderr.write(f"--- {type(self).__name__}: write to {self.sink.name} failed ---\n")
            traceback.print_exception(type(error), error, error.__traceback__, file=sys.stderr)

    def close(self) -> None:
        try:
            self.sink.close()
        finally:
            super().close()


__all__ = ["TransportHandler"]
