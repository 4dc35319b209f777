from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from functools import partial
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import MetaData, insert
from sqlalchemy.exc import SQLAlchemyError

from sqltransport.core.config import TransportSettings
from sqltransport.core.errors import ConnectionClosedError, ValidationError
from sqltransport.db.session import build_engine, build_session_factory, ensure_table, shares_connection
from sqltransport.interfaces import Callback
from sqltransport.models.log import build_log_table
from sqltransport.schemas.log import LogEntry
from sqltransport.services.row_mapper import map_row
from sqltransport.utils.time import utc_now

logger = logging.getLogger("sqltransport.transport")

_state = threading.local()


@contextmanager
def _writing() -> Iterator[None]:
    previous = getattr(_state, "writing", False)
    _state.writing = True
    try:
        yield
    finally:
        _state.writing = previous


def in_transport_write() -> bool:
    """True while the current thread is running one of our own database calls."""

    return getattr(_state, "writing", False)


def _resolved(result: Any = None, error: Optional[BaseException] = None) -> Future:
    future: Future = Future()
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)
    return future


def _notify(callback: Callback, future: Future) -> None:
    try:
        error = future.exception()
    except CancelledError as exc:
        error = exc
    if error is not None:
        callback(error, None)
    else:
        callback(None, future.result())


class SQLTransport:
    """Writes each log call as one row of a relational table.

    ``log`` returns a :class:`~concurrent.futures.Future` resolving to the
    stored :class:`LogEntry` (``True`` while silent). The optional callback
    is attached to that future, so it runs exactly once with
    ``(error, result)``.
    """

    def __init__(self, settings: Optional[TransportSettings] = None, **options: Any) -> None:
        if settings is None:
            settings = TransportSettings.from_options(options)
        elif options:
            settings = TransportSettings.from_options(settings.model_dump(), **options)
        self.settings = settings
        self.name = settings.name
        self.level = settings.level

        self._engine = build_engine(settings)
        self.table = build_log_table(settings.table, MetaData(), settings.schema_version)
        try:
            with _writing():
                ensure_table(self._engine, self.table)
        except Exception:
            self._engine.dispose()
            raise
        self._session_factory = build_session_factory(self._engine)
        self._executor = ThreadPoolExecutor(
            # A single shared connection cannot take overlapping transactions.
            max_workers=1 if shares_connection(self._engine) else settings.max_workers,
            thread_name_prefix=f"{self.name}-writer",
        )
        self._lock = threading.Lock()
        self._closed = False

        logger.info(
            "%s ready on %s (table=%s, schema v%s)",
            self.name,
            self._engine.url.render_as_string(hide_password=True),
            settings.table,
            settings.schema_version,
        )

    @property
    def silent(self) -> bool:
        return self.settings.silent

    @property
    def engine(self):
        return self._engine

    @property
    def closed(self) -> bool:
        return self._closed

    def log(
        self,
        level: str,
        message: str,
        metadata: Any = None,
        callback: Optional[Callback] = None,
    ) -> Future:
        created_at = utc_now()

        if self.settings.silent:
            future = _resolved(True)
        else:
            future = self._dispatch(level, message, metadata, created_at)

        if callback is not None:
            future.add_done_callback(partial(_notify, callback))
        return future

    def _dispatch(self, level: str, message: str, metadata: Any, created_at) -> Future:
        with self._lock:
            if self._closed:
                return _resolved(error=ConnectionClosedError(f"{self.name} is closed"))
            try:
                row = map_row(level, message, metadata, self.settings.schema_version)
            except ValidationError as exc:
                return _resolved(error=exc)
            row["created_at"] = created_at
            return self._executor.submit(self._insert, row)

    def _insert(self, row: Dict[str, Any]) -> LogEntry:
        values = row
        if self.settings.omit_null:
            values = {key: value for key, value in row.items() if value is not None}

        with _writing(), self._session_factory() as db:
            try:
                result = db.execute(insert(self.table).values(**values))
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                raise

        (entry_id,) = result.inserted_primary_key
        return LogEntry(id=entry_id, **row)

    def close(self) -> None:
        """Stop accepting calls, let in-flight writes finish, then release the engine."""

        with self._lock:
            if self._closed:
                return
            self._closed = True

        self._executor.shutdown(wait=True)
        self._engine.dispose()
        logger.info("%s closed", self.name)

    def __enter__(self) -> "SQLTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<SQLTransport name={self.name!r} table={self.settings.table!r} level={self.level!r}>"


__all__ = ["SQLTransport", "in_transport_write"]
