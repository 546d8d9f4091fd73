"""Per-task log prefix for webhook deliveries and the messages they carry.

Records get ``record.ctx`` such as ``[msg:U1234567:01HEVENT] `` from the
`LogContext` of the asyncio task that emitted them.  Each task created with
``asyncio.create_task()`` starts from a copy of its parent's context, so a
delivery task tagged ``wh`` can re-tag itself ``msg`` without touching the
request handler.
"""

from __future__ import annotations

import dataclasses
import logging
from contextvars import ContextVar

# LINE ids are long; eight characters are enough to follow one user or event.
_ID_WIDTH = 8


@dataclasses.dataclass(frozen=True)
class LogContext:
    operation: str | None = None  # wh | msg | gc
    user_id: str | None = None
    event_id: str | None = None

    @property
    def prefix(self) -> str:
        parts = [self.operation] if self.operation else []
        parts += [value[:_ID_WIDTH] for value in (self.user_id, self.event_id) if value]
        return f"[{':'.join(parts)}] " if parts else ""


_EMPTY = LogContext()
_current: ContextVar[LogContext] = ContextVar("kumao_log_context", default=_EMPTY)


def current_log_context() -> LogContext:
    return _current.get()


def set_log_context(
    *,
    operation: str | None = None,
    user_id: str | None = None,
    event_id: str | None = None,
) -> None:
    """Update the current task's context; arguments left as None keep their value."""
    changes = {
        name: value
        for name, value in (("operation", operation), ("user_id", user_id), ("event_id", event_id))
        if value is not None
    }
    if changes:
        _current.set(dataclasses.replace(_current.get(), **changes))


def clear_log_context() -> None:
    _current.set(_EMPTY)


class ContextFilter(logging.Filter):
    """Adds ``record.ctx`` for the ``%(ctx)s`` placeholder in log formats."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.ctx = _current.get().prefix
        return True
