from __future__ import annotations

import logging
from typing import Any, Dict

from sqlalchemy import Table, create_engine, inspect
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import ArgumentError, NoSuchModuleError, OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sqltransport.core.config import TransportSettings
from sqltransport.core.errors import ConfigurationError, StoreConnectionError

logger = logging.getLogger("sqltransport.db")


def build_url(settings: TransportSettings) -> URL:
    if settings.url:
        try:
            return make_url(settings.url)
        except ArgumentError as exc:
            raise ConfigurationError(f"invalid database url: {exc}") from exc

    if settings.is_sqlite:
        database = None if settings.database == ":memory:" else settings.database
        return URL.create(settings.dialect, database=database)

    return URL.create(
        settings.dialect,
        username=settings.username,
        password=settings.password,
        host=settings.host,
        port=settings.port,
        database=settings.database,
    )


def build_engine(settings: TransportSettings) -> Engine:
    url = build_url(settings)
    kwargs: Dict[str, Any] = {"echo": settings.logging}
    if url.get_backend_name() == "sqlite":
        # Writes run on pool threads, and an in-memory database only lives
        # as long as its single connection.
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    try:
        return create_engine(url, **kwargs)
    except (ArgumentError, NoSuchModuleError, ImportError) as exc:
        raise ConfigurationError(f"cannot build engine for {url.render_as_string(hide_password=True)}: {exc}") from exc


def shares_connection(engine: Engine) -> bool:
    return isinstance(engine.pool, StaticPool)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def ensure_table(engine: Engine, table: Table) -> None:
    """Create ``table`` unless it already exists.

    An existing table is left as it is; missing columns are reported but not
    altered.
    """

    try:
        with engine.begin() as connection:
            inspector = inspect(connection)
            if inspector.has_table(table.name):
                existing = {column["name"] for column in inspector.get_columns(table.name)}
                missing = [column.name for column in table.columns if column.name not in existing]
                if missing:
                    logger.warning("Table %s is missing columns: %s", table.name, ", ".join(missing))
                else:
                    logger.debug("Table %s already present", table.name)
                return
            table.create(connection, checkfirst=True)
            logger.info("Created table %s", table.name)
    except OperationalError as exc:
        raise StoreConnectionError(
            f"cannot reach {engine.url.render_as_string(hide_password=True)}: {exc.orig}"
        ) from exc


__all__ = ["build_url", "build_engine", "build_session_factory", "shares_connection", "ensure_table"]
