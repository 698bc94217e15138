"""HR events: payload schemas and the in-process bus that dispatches them."""

from hr_automation.events.bus import EventBus, EventRecord, PublishResult
from hr_automation.events.registry import (
    EVENT_SCHEMAS,
    get_event_documentation,
    is_valid_event_payload,
    list_event_names,
    validate_event_payload,
)

__all__ = [
    "EVENT_SCHEMAS",
    "EventBus",
    "EventRecord",
    "PublishResult",
    "get_event_documentation",
    "is_valid_event_payload",
    "list_event_names",
    "validate_event_payload",
]
