"""In-process event bus.

Publishing an event:
1. validates the payload (registered events) or accepts it as-is (custom `payroll.*` events)
2. appends it to the `event_log` table
3. hands it to the subscribed handlers (the workflow dispatcher), unless the
   event chain is already `max_depth` deep

Custom `payroll.*` events need `allow_custom=True`, which only the
`create_payroll_event` workflow action passes.

Handlers run synchronously in the publisher's call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from hr_automation.errors import BadRequestError
from hr_automation.events.registry import is_custom, is_registered, validate_event_payload
from hr_automation.logging import log_context
from hr_automation.storage import JsonDatabase, new_id, utc_now

if TYPE_CHECKING:
    from hr_automation.workflow.models import WorkflowExecutionResult

logger = logging.getLogger(__name__)


class EventRecord(BaseModel):
    id: str
    name: str
    tenant_id: str
    data: dict[str, object] = Field(default_factory=dict)
    depth: int = 0
    dispatched: bool = True
    created_at: datetime


EventHandler = Callable[[EventRecord], "list[WorkflowExecutionResult]"]


@dataclass(frozen=True, slots=True)
class PublishResult:
    event: EventRecord
    results: list[WorkflowExecutionResult] = field(default_factory=list)


class EventBus:
    def __init__(
        self,
        db: JsonDatabase,
        *,
        max_depth: int = 3,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._db = db
        self._max_depth = max_depth
        self._clock = clock
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def publish(
        self,
        name: str,
        data: dict[str, object],
        *,
        depth: int = 0,
        allow_custom: bool = False,
    ) -> PublishResult:
        if is_registered(name):
            payload = validate_event_payload(name, data).model_dump(mode="json")
        elif allow_custom and is_custom(name):
            payload = dict(data)
        else:
            raise BadRequestError(f"Unknown event: {name}")

        tenant_id = payload.get("tenant_id")
        if not isinstance(tenant_id, str) or not tenant_id:
            raise BadRequestError(f"Event {name!r} is missing tenant_id")

        dispatch = depth < self._max_depth
        record = EventRecord(
            id=new_id(),
            name=name,
            tenant_id=tenant_id,
            data=payload,
            depth=depth,
            dispatched=dispatch,
            created_at=self._clock(),
        )
        with self._db.transaction() as tables:
            tables.insert("event_log", record)

        if not dispatch:
            logger.warning(
                "Event chain too deep; not dispatching",
                extra={"event": name, "event_id": record.id, "depth": depth},
            )
            return PublishResult(event=record)

        logger.info(
            "Event published",
            extra={"event": name, "event_id": record.id, "tenant_id": tenant_id, "depth": depth},
        )
        results: list[WorkflowExecutionResult] = []
        with log_context(tenant_id=tenant_id, event_id=record.id):
            for handler in self._handlers:
                results.extend(handler(record))
        return PublishResult(event=record, results=results)

    def list_events(self, tenant_id: str, *, name: str | None = None) -> list[EventRecord]:
        tables = self._db.read()
        match: dict[str, object] = {"tenant_id": tenant_id}
        if name is not None:
            match["name"] = name
        events = tables.find("event_log", EventRecord, **match)
        events.sort(key=lambda e: e.created_at, reverse=True)
        return events
