"""Workflow automation: definitions, conditions, actions and execution."""

from hr_automation.workflow.engine import WorkflowEngine, preview_workflow
from hr_automation.workflow.models import (
    WorkflowAction,
    WorkflowCondition,
    WorkflowDefinition,
    WorkflowExecution,
    WorkflowExecutionResult,
    WorkflowTestResult,
)
from hr_automation.workflow.service import WorkflowService
from hr_automation.workflow.state_machine import (
    ALLOWED_TRANSITIONS,
    IllegalTransitionError,
    WorkflowStatus,
    transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "IllegalTransitionError",
    "WorkflowAction",
    "WorkflowCondition",
    "WorkflowDefinition",
    "WorkflowEngine",
    "WorkflowExecution",
    "WorkflowExecutionResult",
    "WorkflowService",
    "WorkflowStatus",
    "WorkflowTestResult",
    "preview_workflow",
    "transition",
]
