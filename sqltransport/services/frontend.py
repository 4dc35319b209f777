from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from functools import partialmethod
from typing import Any, Iterable, List, Optional, Union

from sqltransport.core.errors import ConfigurationError
from sqltransport.core.levels import accepts, severity
from sqltransport.interfaces import Callback, LogSink

logger = logging.getLogger("sqltransport.frontend")


class _Gather:
    """Calls ``callback`` once every future of a dispatch has completed."""

    def __init__(self, futures: List[Future], callback: Callback) -> None:
        self._futures = futures
        self._callback = callback
        self._remaining = len(futures)
        self._lock = threading.Lock()

    def start(self) -> None:
        if not self._futures:
            self._callback(None, [])
            return
        for future in self._futures:
            future.add_done_callback(self._done)

    def _done(self, _future: Future) -> None:
        with self._lock:
            self._remaining -= 1
            if self._remaining:
                return

        error: Optional[BaseException] = None
        results = []
        for future in self._futures:
            if future.cancelled():
                results.append(None)
                continue
            exc = future.exception()
            if exc is not None and error is None:
                error = exc
            results.append(None if exc is not None else future.result())
        self._callback(error, results)


class Logger:
    """Front-end that fans log calls out to an explicit set of sinks."""

    def __init__(self, sinks: Iterable[LogSink] = (), level: str = "silly") -> None:
        severity(level)
        self.level = level
        self._sinks: List[LogSink] = []
        for sink in sinks:
            self.add_sink(sink)

    @property
    def sinks(self) -> tuple[LogSink, ...]:
        return tuple(self._sinks)

    def add_sink(self, sink: LogSink) -> None:
        if any(existing.name == sink.name for existing in self._sinks):
            raise ConfigurationError(f"a sink named {sink.name!r} is already attached")
        self._sinks.append(sink)

    def remove_sink(self, sink: Union[LogSink, str]) -> LogSink:
        name = sink if isinstance(sink, str) else sink.name
        for index, existing in enumerate(self._sinks):
            if existing.name == name:
                return self._sinks.pop(index)
        raise KeyError(name)

    def log(
        self,
        level: str,
        message: str,
        metadata: Any = None,
        callback: Optional[Callback] = None,
    ) -> List[Future]:
        """Send one record to every sink whose level accepts it.

        ``callback`` receives the first error (or None) and the list of sink
        results once every sink has finished.
        """

        severity(level)
        futures: List[Future] = []
        if accepts(self.level, level):
            futures = [sink.log(level, message, metadata) for sink in self._sinks if accepts(sink.level, level)]
        if callback is not None:
            _Gather(futures, callback).start()
        return futures

    error = partialmethod(log, "error")
    warn = partialmethod(log, "warn")
    info = partialmethod(log, "info")
    http = partialmethod(log, "http")
    verbose = partialmethod(log, "verbose")
    debug = partialmethod(log, "debug")
    silly = partialmethod(log, "silly")

    def close(self) -> None:
        for sink in self._sinks:
            sink.close()
        logger.debug("Closed %d sink(s)", len(self._sinks))


__all__ = ["Logger"]
