"""Structured JSON logging.

Log lines carry the identifiers of the records being worked on. Services bind
them once for a unit of work with `log_context(tenant_id=..., workflow_id=...)`;
`ContextFilter` copies the bound values onto every record emitted inside the
block, so individual calls only pass what is specific to them through `extra=`.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import IO, Any

# Identifiers rendered under "context"; any other `extra=` field goes under "extra".
CONTEXT_FIELDS: frozenset[str] = frozenset(
    {"tenant_id", "user_id", "workflow_id", "execution_id", "event_id", "invitation_id"}
)

# Attributes every LogRecord has on this interpreter.
_STANDARD_ATTRS: frozenset[str] = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
}

_bound: ContextVar[dict[str, str]] = ContextVar("hr_automation_log_context", default={})


@contextmanager
def log_context(**fields: str | None) -> Iterator[None]:
    """Bind identifiers to every record logged inside the block.

    Nested blocks add to the outer bindings; `None` values are ignored.
    """

    bound = {**_bound.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = _bound.set(bound)
    try:
        yield
    finally:
        _bound.reset(token)


def bound_context() -> dict[str, str]:
    return dict(_bound.get())


class ContextFilter(logging.Filter):
    """Stamp the identifiers bound by `log_context` onto the record.

    Values passed explicitly through `extra=` win over bound ones.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        for key, value in _bound.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS or key.startswith("_"):
                continue
            if key in CONTEXT_FIELDS:
                context[key] = value
            else:
                extra[key] = value
        if context:
            payload["context"] = context
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str, *, stream: IO[str] | None = None) -> None:
    """Send every log line through one JSON handler on the root logger."""

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(ContextFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper())

    # HTTP client chatter from the mail provider.
    for name in ("urllib3", "requests"):
        logging.getLogger(name).setLevel(max(root.level, logging.WARNING))
