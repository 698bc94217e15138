"""Pydantic request bodies for the REST server."""

from __future__ import annotations

from datetime import date
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, Field

from hr_automation.workflow.models import WorkflowAction, WorkflowCondition

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CreateWorkflowRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    trigger_type: str = Field(min_length=1)
    trigger_config: dict[str, Any] = Field(default_factory=dict)
    conditions: list[WorkflowCondition] = Field(default_factory=list)
    actions: list[WorkflowAction] = Field(min_length=1)
    status: Literal["draft", "active"] = "draft"
    template_id: str | None = None


class UpdateWorkflowRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    trigger_config: dict[str, Any] | None = None
    conditions: list[WorkflowCondition] | None = None
    actions: list[WorkflowAction] | None = None

    # Fields whose stored value may be null; an explicit null clears them.
    CLEARABLE: ClassVar[frozenset[str]] = frozenset({"description"})

    def changes(self) -> dict[str, Any]:
        """Fields sent in the request, minus nulls for fields that cannot be null."""

        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None or name in self.CLEARABLE
        }


class WorkflowTestRequest(BaseModel):
    test_data: dict[str, Any] = Field(default_factory=dict)


class PublishEventRequest(BaseModel):
    name: str = Field(min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)


class CreateInvitationRequest(BaseModel):
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    role: Literal["employee", "manager", "hr_manager", "tenant_admin"] = "employee"
    employee_id: str | None = None
    send_email: bool = False
    personal_message: str | None = Field(default=None, max_length=500)


class AcceptInvitationRequest(BaseModel):
    token: str = Field(min_length=1)


class HireEmployeeRequest(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    phone: str | None = None
    job_title: str | None = None
    employee_number: str | None = None
    base_salary: float | None = Field(default=None, gt=0)
    hire_date: date | None = None


class ChangeEmployeeStatusRequest(BaseModel):
    status: Literal["active", "terminated", "suspended"]
    reason: str | None = None


class SignUpRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
