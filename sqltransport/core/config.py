from __future__ import annotations

import re
from typing import Any, Dict, Literal, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sqltransport.core.errors import ConfigurationError
from sqltransport.core.levels import LEVELS

TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")

DIALECT_ALIASES = {"postgres": "postgresql", "pg": "postgresql"}

# Option spellings accepted from callers used to the camelCase names.
OPTION_ALIASES = {
    "omitNull": "omit_null",
    "schemaVersion": "schema_version",
    "maxWorkers": "max_workers",
}


class TransportSettings(BaseSettings):
    name: str = "SQLTransport"
    level: str = "info"

    dialect: str = "mysql"
    host: str = "localhost"
    port: int = Field(3306, ge=1, le=65535)
    database: str = "log"
    username: Optional[str] = None
    password: Optional[str] = None
    url: Optional[str] = None

    table: str = "log"
    schema_version: Literal[1, 2] = 2
    omit_null: bool = False
    logging: bool = False
    silent: bool = False
    max_workers: int = Field(4, ge=1)

    model_config = SettingsConfigDict(env_prefix="SQLTRANSPORT_", case_sensitive=False, frozen=True)

    @field_validator("level", mode="before")
    def normalize_level(cls, v: Any) -> str:
        level = str(v).strip().lower()
        if level not in LEVELS:
            raise ValueError(f"unknown level {v!r}, expected one of {', '.join(LEVELS)}")
        return level

    @field_validator("dialect", mode="before")
    def normalize_dialect(cls, v: Any) -> str:
        dialect = str(v or "").strip().lower()
        if not dialect:
            raise ValueError("dialect must not be empty")
        backend, sep, driver = dialect.partition("+")
        backend = DIALECT_ALIASES.get(backend, backend)
        return f"{backend}{sep}{driver}"

    @field_validator("table")
    def check_table(cls, v: str) -> str:
        if not TABLE_NAME_RE.match(v):
            raise ValueError(f"invalid table name {v!r}")
        return v

    @field_validator("database")
    def check_database(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("database must not be empty")
        return v

    @property
    def is_sqlite(self) -> bool:
        if self.url:
            return self.url.startswith("sqlite")
        return self.dialect.startswith("sqlite")

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None, **overrides: Any) -> "TransportSettings":
        """Build settings from a loose option mapping, reporting problems as ConfigurationError."""

        merged: Dict[str, Any] = {}
        for key, value in {**(options or {}), **overrides}.items():
            key = OPTION_ALIASES.get(key, key)
            # None, and a zero port, mean "use the default".
            if value is None or (key == "port" and value == 0):
                continue
            merged[key] = value
        try:
            return cls(**merged)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc


__all__ = ["TransportSettings", "OPTION_ALIASES"]
