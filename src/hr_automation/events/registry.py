"""Registry of HR events that can trigger workflows.

Each event name maps to a pydantic payload schema. Publishing a registered
event validates its payload first; workflows see the validated payload in
JSON form as their trigger data.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hr_automation.errors import BadRequestError

EmploymentStatus = Literal["active", "terminated", "suspended"]
LeaveStatus = Literal["pending", "approved", "rejected"]


class EventPayload(BaseModel):
    """Common base: every event is scoped to a tenant."""

    model_config = ConfigDict(extra="allow")

    tenant_id: str = Field(min_length=1)


class EmployeeStatusChanged(EventPayload):
    """Employment status changed (hired, terminated, suspended)."""

    employee_id: str
    old_status: EmploymentStatus
    new_status: EmploymentStatus
    changed_by: str
    reason: str | None = None
    effective_date: date
    metadata: dict[str, object] | None = None


class LeaveStatusChanged(EventPayload):
    """Leave request status changed (approved or rejected)."""

    request_id: str
    employee_id: str
    old_status: LeaveStatus
    new_status: LeaveStatus
    leave_type: str
    start_date: date
    end_date: date
    approved_by: str | None = None
    rejection_reason: str | None = None


class PayrollPeriod(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int


class PayrollRunCompleted(EventPayload):
    """Payroll calculation completed."""

    payroll_run_id: str
    period: PayrollPeriod
    employees_count: int = Field(gt=0)
    total_net_salaries: float
    total_deductions: float
    total_employer_costs: float
    status: Literal["calculated", "approved", "paid"]
    completed_by: str
    completed_at: datetime


class AlertCreated(EventPayload):
    """A new alert was created."""

    alert_id: str
    type: str
    severity: Literal["info", "warning", "urgent"]
    assignee_id: str | None = None
    employee_id: str | None = None
    message: str
    created_at: datetime


class BatchOperationCompleted(EventPayload):
    """A batch operation finished."""

    operation_id: str
    operation_type: str
    status: Literal["completed", "failed", "partial"]
    total_count: int
    success_count: int
    error_count: int
    duration_ms: int
    completed_at: datetime


class EmployeeHired(EventPayload):
    """A new employee was hired."""

    employee_id: str
    employee_name: str
    hire_date: date
    base_salary: float | None = Field(default=None, gt=0)
    position_id: str | None = None
    department_id: str | None = None


class EmployeeTerminated(EventPayload):
    """An employee was terminated."""

    employee_id: str
    employee_name: str
    termination_date: date
    reason: str
    termination_type: Literal["resignation", "dismissal", "retirement", "end_of_contract"]


class SalaryChanged(EventPayload):
    """An employee's salary changed."""

    employee_id: str
    employee_name: str
    old_salary: float = Field(gt=0)
    new_salary: float = Field(gt=0)
    effective_from: date
    reason: str | None = None
    changed_by: str


class LeaveApproved(EventPayload):
    """A leave request was approved."""

    request_id: str
    employee_id: str
    leave_type: str
    start_date: date
    end_date: date
    days_count: int = Field(gt=0)
    approved_by: str
    approved_at: datetime


EVENT_SCHEMAS: dict[str, type[EventPayload]] = {
    "employee.status.changed": EmployeeStatusChanged,
    "leave.status.changed": LeaveStatusChanged,
    "payroll.run.completed": PayrollRunCompleted,
    "alert.created": AlertCreated,
    "batch.operation.completed": BatchOperationCompleted,
    "employee.hired": EmployeeHired,
    "employee.terminated": EmployeeTerminated,
    "salary.changed": SalaryChanged,
    "leave.approved": LeaveApproved,
}

# Free-form events a workflow action may publish without a registered schema.
CUSTOM_EVENT_PREFIX = "payroll."


def list_event_names() -> list[str]:
    return list(EVENT_SCHEMAS)


def is_registered(name: str) -> bool:
    return name in EVENT_SCHEMAS


def is_custom(name: str) -> bool:
    return name.startswith(CUSTOM_EVENT_PREFIX) and name not in EVENT_SCHEMAS


def _format_validation_error(name: str, error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{loc}: {item.get('msg')}")
    return f"Invalid payload for event {name!r}: " + "; ".join(parts)


def validate_event_payload(name: str, payload: dict[str, object]) -> EventPayload:
    """Validate `payload` against the schema registered for `name`.

    Raises:
        BadRequestError: if the event is unknown or the payload is invalid.
    """

    schema = EVENT_SCHEMAS.get(name)
    if schema is None:
        raise BadRequestError(f"Unknown event: {name}")
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise BadRequestError(_format_validation_error(name, e)) from e


def is_valid_event_payload(name: str, payload: dict[str, object]) -> bool:
    schema = EVENT_SCHEMAS.get(name)
    if schema is None:
        return False
    try:
        schema.model_validate(payload)
    except ValidationError:
        return False
    return True


def get_event_documentation(name: str) -> dict[str, object]:
    schema = EVENT_SCHEMAS.get(name)
    if schema is None:
        raise BadRequestError(f"Unknown event: {name}")
    fields = {
        field_name: {
            "required": info.is_required(),
            "type": getattr(info.annotation, "__name__", str(info.annotation)),
        }
        for field_name, info in schema.model_fields.items()
    }
    return {
        "name": name,
        "description": (schema.__doc__ or "").strip(),
        "fields": fields,
    }
