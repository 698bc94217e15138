"""Workflow definitions, executions and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from hr_automation.workflow.state_machine import WorkflowStatus

ConditionOperator = Literal["eq", "ne", "gt", "gte", "lt", "lte", "contains", "in"]
ActionType = Literal[
    "create_alert", "send_notification", "create_payroll_event", "update_employee_status"
]
ExecutionStatus = Literal["running", "success", "failed", "skipped"]


class WorkflowCondition(BaseModel):
    field: str = Field(min_length=1, description="Dot path into the trigger data")
    operator: ConditionOperator
    value: Any = None


class WorkflowAction(BaseModel):
    type: ActionType
    config: dict[str, Any] = Field(default_factory=dict)


class WorkflowDefinition(BaseModel):
    id: str
    tenant_id: str | None = None
    name: str
    description: str | None = None

    trigger_type: str
    trigger_config: dict[str, Any] = Field(default_factory=dict)
    conditions: list[WorkflowCondition] = Field(default_factory=list)
    actions: list[WorkflowAction] = Field(default_factory=list)

    status: WorkflowStatus = WorkflowStatus.DRAFT
    is_template: bool = False
    template_category: str | None = None
    created_by: str | None = None

    execution_count: int = 0
    success_count: int = 0
    error_count: int = 0
    last_executed_at: datetime | None = None

    created_at: datetime
    updated_at: datetime


class ExecutionLogEntry(BaseModel):
    message: str
    timestamp: datetime
    details: dict[str, Any] | None = None


class ActionOutcome(BaseModel):
    """Outcome of one action within an execution."""

    type: str
    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None


class WorkflowExecution(BaseModel):
    id: str
    workflow_id: str
    tenant_id: str | None
    status: ExecutionStatus
    started_at: datetime
    completed_at: datetime | None = None
    duration_ms: int = 0
    actions_executed: list[ActionOutcome] = Field(default_factory=list)
    error_message: str | None = None
    workflow_snapshot: dict[str, Any] = Field(default_factory=dict)
    trigger_data: dict[str, Any] = Field(default_factory=dict)
    execution_log: list[ExecutionLogEntry] = Field(default_factory=list)
    trigger_event_id: str | None = None
    employee_id: str | None = None


@dataclass(frozen=True, slots=True)
class WorkflowExecutionResult:
    execution_id: str
    status: ExecutionStatus
    conditions_evaluated: bool
    actions_executed: list[ActionOutcome] = field(default_factory=list)
    duration_ms: int = 0
    error_message: str | None = None
    workflow_id: str | None = None

    def to_json(self) -> dict[str, object]:
        return {
            "execution_id": self.execution_id,
            "workflow_id": self.workflow_id,
            "status": self.status,
            "conditions_evaluated": self.conditions_evaluated,
            "actions_executed": [a.model_dump(mode="json") for a in self.actions_executed],
            "duration_ms": self.duration_ms,
            "error_message": self.error_message,
        }


@dataclass(frozen=True, slots=True)
class WorkflowTestResult:
    conditions_pass: bool
    actions_preview: list[WorkflowAction]
    message: str

    def to_json(self) -> dict[str, object]:
        return {
            "conditions_pass": self.conditions_pass,
            "actions_preview": [a.model_dump(mode="json") for a in self.actions_preview],
            "message": self.message,
        }
