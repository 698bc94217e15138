"""Workflow execution engine.

Executes user-defined workflows triggered by HR events:
1. load the definition; inactive workflows are skipped
2. evaluate conditions against the trigger data
3. run the actions in order, isolating each action's failure
4. update the workflow counters and persist an execution record

Every run that finds its workflow leaves exactly one execution record,
whatever its outcome.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from hr_automation.events.bus import EventRecord
from hr_automation.logging import log_context
from hr_automation.storage import JsonDatabase, new_id, utc_now
from hr_automation.workflow.actions import ActionContext, ActionHandler
from hr_automation.workflow.conditions import evaluate_conditions
from hr_automation.workflow.models import (
    ActionOutcome,
    ExecutionLogEntry,
    ExecutionStatus,
    WorkflowDefinition,
    WorkflowExecution,
    WorkflowExecutionResult,
    WorkflowTestResult,
)
from hr_automation.workflow.state_machine import WorkflowStatus

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Workflow not found"
NOT_ACTIVE_MESSAGE = "Workflow is not active"
CONDITIONS_NOT_MET_MESSAGE = "Conditions not met"


def preview_workflow(
    workflow: WorkflowDefinition, test_data: Mapping[str, Any]
) -> WorkflowTestResult:
    """Dry run: evaluate conditions and list the actions that would run."""

    conditions_pass = evaluate_conditions(workflow.conditions, test_data)
    count = len(workflow.actions)
    if conditions_pass:
        message = f"Conditions are met. {count} action(s) would be executed."
    else:
        message = "Conditions are not met. No action would be executed."
    return WorkflowTestResult(
        conditions_pass=conditions_pass,
        actions_preview=list(workflow.actions),
        message=message,
    )


class WorkflowEngine:
    def __init__(
        self,
        db: JsonDatabase,
        handlers: Mapping[str, ActionHandler],
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._db = db
        self._handlers = dict(handlers)
        self._clock = clock

    # Dispatch -------------------------------------------------------------

    def handle_event(self, event: EventRecord) -> list[WorkflowExecutionResult]:
        """Run every active workflow of the event's tenant triggered by this event."""

        workflows = self._db.read().find(
            "workflows",
            WorkflowDefinition,
            tenant_id=event.tenant_id,
            trigger_type=event.name,
            status=WorkflowStatus.ACTIVE.value,
            is_template=False,
        )
        workflows.sort(key=lambda w: w.created_at)

        results: list[WorkflowExecutionResult] = []
        with log_context(tenant_id=event.tenant_id):
            for workflow in workflows:
                results.append(
                    self.execute_workflow(
                        workflow.id,
                        event.data,
                        trigger_event_id=event.id,
                        depth=event.depth,
                    )
                )
        return results

    # Execution ------------------------------------------------------------

    def execute_workflow(
        self,
        workflow_id: str,
        trigger_data: Mapping[str, Any],
        *,
        trigger_event_id: str | None = None,
        depth: int = 0,
    ) -> WorkflowExecutionResult:
        with log_context(workflow_id=workflow_id, event_id=trigger_event_id):
            return self._execute(
                workflow_id, trigger_data, trigger_event_id=trigger_event_id, depth=depth
            )

    def _execute(
        self,
        workflow_id: str,
        trigger_data: Mapping[str, Any],
        *,
        trigger_event_id: str | None,
        depth: int,
    ) -> WorkflowExecutionResult:
        started = time.monotonic()
        started_at = self._clock()
        data = dict(trigger_data)
        log: list[ExecutionLogEntry] = []

        def elapsed_ms() -> int:
            return int((time.monotonic() - started) * 1000)

        def note(message: str, details: dict[str, Any] | None = None) -> None:
            log.append(ExecutionLogEntry(message=message, timestamp=self._clock(), details=details))

        workflow = self._db.read().get("workflows", WorkflowDefinition, workflow_id)
        if workflow is None:
            logger.warning("Workflow not found")
            return WorkflowExecutionResult(
                execution_id="",
                status="failed",
                conditions_evaluated=False,
                duration_ms=elapsed_ms(),
                error_message=NOT_FOUND_MESSAGE,
                workflow_id=workflow_id,
            )

        if workflow.status != WorkflowStatus.ACTIVE:
            note("Workflow skipped - not active")
            execution_id = self._record(
                workflow,
                status="skipped",
                started_at=started_at,
                duration_ms=elapsed_ms(),
                error_message=NOT_ACTIVE_MESSAGE,
                trigger_data=data,
                log=log,
                trigger_event_id=trigger_event_id,
            )
            return WorkflowExecutionResult(
                execution_id=execution_id,
                status="skipped",
                conditions_evaluated=False,
                duration_ms=elapsed_ms(),
                error_message=NOT_ACTIVE_MESSAGE,
                workflow_id=workflow_id,
            )

        try:
            note("Workflow execution started")
            conditions_pass = evaluate_conditions(workflow.conditions, data)
            note(
                f"Conditions evaluated: {'passed' if conditions_pass else 'failed'}",
                {"conditions": [c.model_dump(mode="json") for c in workflow.conditions]},
            )

            if not conditions_pass:
                execution_id = self._record(
                    workflow,
                    status="skipped",
                    started_at=started_at,
                    duration_ms=elapsed_ms(),
                    error_message=CONDITIONS_NOT_MET_MESSAGE,
                    trigger_data=data,
                    log=log,
                    trigger_event_id=trigger_event_id,
                )
                logger.info("Workflow conditions not met")
                return WorkflowExecutionResult(
                    execution_id=execution_id,
                    status="skipped",
                    conditions_evaluated=True,
                    duration_ms=elapsed_ms(),
                    error_message=CONDITIONS_NOT_MET_MESSAGE,
                    workflow_id=workflow_id,
                )

            context = ActionContext(
                workflow_id=workflow.id,
                tenant_id=workflow.tenant_id or "",
                trigger_data=data,
                trigger_event_id=trigger_event_id,
                depth=depth,
            )
            note(f"Executing {len(workflow.actions)} actions")
            outcomes = self._run_actions(workflow, context)
            note("Actions executed", {"results": [o.model_dump(mode="json") for o in outcomes]})

            self._bump_counters(workflow_id, success=True)
            employee_id = data.get("employee_id")
            execution_id = self._record(
                workflow,
                status="success",
                started_at=started_at,
                duration_ms=elapsed_ms(),
                actions=outcomes,
                trigger_data=data,
                log=log,
                trigger_event_id=trigger_event_id,
                employee_id=employee_id if isinstance(employee_id, str) else None,
            )
            logger.info(
                "Workflow executed",
                extra={"execution_id": execution_id, "actions": len(outcomes)},
            )
            return WorkflowExecutionResult(
                execution_id=execution_id,
                status="success",
                conditions_evaluated=True,
                actions_executed=outcomes,
                duration_ms=elapsed_ms(),
                workflow_id=workflow_id,
            )

        except Exception as e:
            logger.exception("Workflow execution failed")
            message = str(e) or type(e).__name__
            note("Workflow execution failed", {"error": message})
            self._bump_counters(workflow_id, success=False)
            execution_id = self._record(
                workflow,
                status="failed",
                started_at=started_at,
                duration_ms=elapsed_ms(),
                error_message=message,
                trigger_data=data,
                log=log,
                trigger_event_id=trigger_event_id,
            )
            return WorkflowExecutionResult(
                execution_id=execution_id,
                status="failed",
                conditions_evaluated=False,
                duration_ms=elapsed_ms(),
                error_message=message,
                workflow_id=workflow_id,
            )

    def _run_actions(
        self, workflow: WorkflowDefinition, context: ActionContext
    ) -> list[ActionOutcome]:
        outcomes: list[ActionOutcome] = []
        for action in workflow.actions:
            handler = self._handlers.get(action.type)
            if handler is None:
                outcomes.append(
                    ActionOutcome(
                        type=action.type,
                        success=False,
                        error=f"Unknown action type: {action.type}",
                    )
                )
                continue
            try:
                outcomes.append(handler.execute(action, context))
            except Exception as e:
                logger.warning(
                    "Workflow action failed",
                    extra={"action": action.type, "error": str(e)},
                )
                outcomes.append(
                    ActionOutcome(type=action.type, success=False, error=str(e) or type(e).__name__)
                )
        return outcomes

    def _bump_counters(self, workflow_id: str, *, success: bool) -> None:
        now = self._clock()
        with self._db.transaction() as tables:
            current = tables.get("workflows", WorkflowDefinition, workflow_id)
            if current is None:
                return
            updates: dict[str, object] = {
                "execution_count": current.execution_count + 1,
                "last_executed_at": now,
                "updated_at": now,
            }
            if success:
                updates["success_count"] = current.success_count + 1
            else:
                updates["error_count"] = current.error_count + 1
            tables.upsert("workflows", current.model_copy(update=updates))

    def _record(
        self,
        workflow: WorkflowDefinition,
        *,
        status: ExecutionStatus,
        started_at: datetime,
        duration_ms: int,
        trigger_data: dict[str, Any],
        log: list[ExecutionLogEntry],
        actions: list[ActionOutcome] | None = None,
        error_message: str | None = None,
        trigger_event_id: str | None = None,
        employee_id: str | None = None,
    ) -> str:
        execution = WorkflowExecution(
            id=new_id(),
            workflow_id=workflow.id,
            tenant_id=workflow.tenant_id,
            status=status,
            started_at=started_at,
            completed_at=self._clock(),
            duration_ms=duration_ms,
            actions_executed=actions or [],
            error_message=error_message,
            workflow_snapshot=workflow.model_dump(mode="json"),
            trigger_data=trigger_data,
            execution_log=list(log),
            trigger_event_id=trigger_event_id,
            employee_id=employee_id,
        )
        with self._db.transaction() as tables:
            tables.insert("workflow_executions", execution)
        return execution.id
