from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class LogEntry(BaseModel):
    """A persisted log row, as handed back to the caller after the insert."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: Optional[int] = None
    level: str
    msg: str
    meta: Optional[str] = None
    created_at: datetime
    ip_address: Optional[str] = None
    session_id: Optional[str] = None
    route: Optional[str] = None
    query: Optional[str] = None
    body: Optional[str] = None
    host: Optional[str] = None
    url: Optional[str] = None

    def meta_value(self) -> Any:
        return json.loads(self.meta) if self.meta is not None else None


__all__ = ["LogEntry"]
