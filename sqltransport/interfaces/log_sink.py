"""Log sink interface."""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable, Optional, Protocol, runtime_checkable

Callback = Callable[[Optional[BaseException], Any], None]


@runtime_checkable
class LogSink(Protocol):
    """A destination for log records."""

    name: str
    level: str

    def log(
        self,
        level: str,
        message: str,
        metadata: Any = None,
        callback: Optional[Callback] = None,
    ) -> Future:
        """Persist one record; completes the future and calls ``callback`` once."""
        ...

    def close(self) -> None:
        """Release the sink's resources."""
        ...
