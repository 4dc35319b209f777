from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text

# Column lengths per schema revision; v1 left strings unbounded.
V1_LENGTHS = {"level": 255, "ip_address": 255, "session_id": 255}
V2_LENGTHS = {"level": 5, "ip_address": 15, "session_id": 24}

V2_EXTRA_COLUMNS = ("route", "query", "body", "host", "url")


def _columns(schema_version: int) -> list[Column]:
    lengths = V2_LENGTHS if schema_version >= 2 else V1_LENGTHS
    columns = [
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("level", String(lengths["level"]), nullable=False),
        Column("msg", Text, nullable=False),
        Column("meta", Text, nullable=True),
        Column("created_at", DateTime(timezone=True), nullable=False),
        Column("ip_address", String(lengths["ip_address"]), nullable=True),
        Column("session_id", String(lengths["session_id"]), nullable=True),
    ]
    if schema_version >= 2:
        columns += [
            Column("route", String(255), nullable=True),
            Column("query", Text, nullable=True),
            Column("body", Text, nullable=True),
            Column("host", String(255), nullable=True),
            Column("url", Text, nullable=True),
        ]
    return columns


def build_log_table(name: str = "log", metadata: MetaData | None = None, schema_version: int = 2) -> Table:
    """Declare the log table under ``name``.

    Each transport gets its own ``MetaData`` so two transports pointing at
    different table names or schema revisions never share a definition.
    """

    if schema_version not in (1, 2):
        raise ValueError(f"unsupported schema version {schema_version}")
    return Table(name, metadata if metadata is not None else MetaData(), *_columns(schema_version))


__all__ = ["build_log_table", "V2_EXTRA_COLUMNS"]
