from __future__ import annotations

from pathlib import Path

import pytest

from hr_automation.errors import BadRequestError
from hr_automation.events.bus import EventBus, EventRecord
from hr_automation.events.registry import (
    EVENT_SCHEMAS,
    get_event_documentation,
    is_valid_event_payload,
    list_event_names,
    validate_event_payload,
)
from hr_automation.storage import JsonDatabase

HIRED = {
    "tenant_id": "t1",
    "employee_id": "e1",
    "employee_name": "Kofi Mensah",
    "hire_date": "2026-01-15",
}


def test_registry_lists_all_events() -> None:
    assert set(list_event_names()) == {
        "employee.status.changed",
        "leave.status.changed",
        "payroll.run.completed",
        "alert.created",
        "batch.operation.completed",
        "employee.hired",
        "employee.terminated",
        "salary.changed",
        "leave.approved",
    }
    assert len(EVENT_SCHEMAS) == 9


def test_validate_event_payload() -> None:
    payload = validate_event_payload("employee.hired", HIRED)
    assert payload.tenant_id == "t1"
    assert is_valid_event_payload("employee.hired", HIRED)
    assert not is_valid_event_payload("employee.hired", {**HIRED, "base_salary": -1})
    assert not is_valid_event_payload("nope", HIRED)


def test_invalid_payload_reports_fields() -> None:
    with pytest.raises(BadRequestError, match="employee_name"):
        validate_event_payload("employee.hired", {"tenant_id": "t1", "employee_id": "e1"})


def test_extra_fields_are_kept() -> None:
    payload = validate_event_payload("employee.hired", {**HIRED, "source": "import"})
    assert payload.model_dump()["source"] == "import"


def test_event_documentation() -> None:
    doc = get_event_documentation("leave.approved")
    assert doc["name"] == "leave.approved"
    assert doc["description"] == "A leave request was approved."
    fields = doc["fields"]
    assert isinstance(fields, dict)
    assert fields["days_count"]["required"] is True
    assert fields["tenant_id"]["required"] is True


def test_bus_logs_and_dispatches(tmp_path: Path) -> None:
    db = JsonDatabase(tmp_path / "db.json")
    bus = EventBus(db)
    seen: list[EventRecord] = []

    def handler(event: EventRecord) -> list:
        seen.append(event)
        return []

    bus.subscribe(handler)
    published = bus.publish("employee.hired", HIRED)

    assert [e.name for e in seen] == ["employee.hired"]
    assert published.event.data["hire_date"] == "2026-01-15"
    assert [e.id for e in bus.list_events("t1")] == [published.event.id]


def test_bus_rejects_unknown_and_tenantless_events(tmp_path: Path) -> None:
    bus = EventBus(JsonDatabase(tmp_path / "db.json"))

    with pytest.raises(BadRequestError, match="Unknown event"):
        bus.publish("coffee.brewed", {"tenant_id": "t1"})
    with pytest.raises(BadRequestError, match="tenant_id"):
        bus.publish("payroll.custom_event", {}, allow_custom=True)


def test_bus_only_accepts_custom_payroll_events_when_allowed(tmp_path: Path) -> None:
    bus = EventBus(JsonDatabase(tmp_path / "db.json"))

    with pytest.raises(BadRequestError, match="Unknown event: payroll.bonus"):
        bus.publish("payroll.bonus", {"tenant_id": "t1"})
    assert bus.list_events("t1") == []

    published = bus.publish("payroll.bonus", {"tenant_id": "t1", "x": 1}, allow_custom=True)
    assert published.event.data == {"tenant_id": "t1", "x": 1}


def test_bus_stops_dispatch_at_max_depth(tmp_path: Path) -> None:
    bus = EventBus(JsonDatabase(tmp_path / "db.json"), max_depth=2)
    calls: list[int] = []
    bus.subscribe(lambda event: calls.append(event.depth) or [])

    bus.publish("payroll.custom_event", {"tenant_id": "t1"}, depth=1, allow_custom=True)
    deep = bus.publish("payroll.custom_event", {"tenant_id": "t1"}, depth=2, allow_custom=True)

    assert calls == [1]
    assert deep.event.dispatched is False
    assert len(bus.list_events("t1", name="payroll.custom_event")) == 2
