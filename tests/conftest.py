from __future__ import annotations

from typing import Any, Dict, List

import pytest
from sqlalchemy import create_engine, text

from sqltransport import SQLTransport


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "log.db"


@pytest.fixture
def make_transport(db_path):
    created: List[SQLTransport] = []

    def factory(**options: Any) -> SQLTransport:
        options.setdefault("dialect", "sqlite")
        options.setdefault("database", str(db_path))
        transport = SQLTransport(**options)
        created.append(transport)
        return transport

    yield factory

    for transport in created:
        transport.close()


@pytest.fixture
def transport(make_transport) -> SQLTransport:
    return make_transport()


@pytest.fixture
def fetch_rows(db_path):
    def fetch(table: str = "log") -> List[Dict[str, Any]]:
        engine = create_engine(f"sqlite:///{db_path}")
        try:
            with engine.connect() as connection:
                result = connection.execute(text(f'SELECT * FROM "{table}" ORDER BY id'))
                return [dict(row._mapping) for row in result]
        finally:
            engine.dispose()

    return fetch
