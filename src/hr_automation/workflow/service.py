"""Tenant-scoped workflow management.

All lookups are scoped to the caller's tenant: a workflow of another tenant
is indistinguishable from a missing one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from hr_automation.errors import BadRequestError, NotFoundError
from hr_automation.storage import JsonDatabase, new_id, utc_now
from hr_automation.workflow.engine import preview_workflow
from hr_automation.workflow.models import (
    ExecutionStatus,
    WorkflowAction,
    WorkflowCondition,
    WorkflowDefinition,
    WorkflowExecution,
    WorkflowTestResult,
)
from hr_automation.workflow.state_machine import WorkflowStatus, transition
from hr_automation.workflow.templates import BUILTIN_TEMPLATES

logger = logging.getLogger(__name__)


class WorkflowPage(BaseModel):
    workflows: list[WorkflowDefinition]
    total: int
    has_more: bool


class ExecutionPage(BaseModel):
    executions: list[WorkflowExecution]
    total: int
    has_more: bool


class StatusStat(BaseModel):
    status: str
    count: int
    avg_duration_ms: int


class WorkflowStats(BaseModel):
    workflow: WorkflowDefinition
    stats: list[StatusStat]


class WorkflowService:
    def __init__(self, db: JsonDatabase, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._db = db
        self._clock = clock

    # Templates ------------------------------------------------------------

    def seed_templates(self) -> int:
        """Insert built-in templates that are not present yet. Returns the number added."""

        now = self._clock()
        added = 0
        with self._db.transaction() as tables:
            existing = {t.name for t in tables.find("workflows", WorkflowDefinition, is_template=True)}
            for fields in BUILTIN_TEMPLATES:
                if fields["name"] in existing:
                    continue
                template = WorkflowDefinition.model_validate(
                    {
                        **fields,
                        "id": new_id(),
                        "tenant_id": None,
                        "is_template": True,
                        "status": WorkflowStatus.ACTIVE.value,
                        "created_at": now,
                        "updated_at": now,
                    }
                )
                tables.insert("workflows", template)
                added += 1
        if added:
            logger.info("Workflow templates seeded", extra={"count": added})
        return added

    def get_templates(self, *, category: str | None = None) -> list[WorkflowDefinition]:
        templates = [
            t
            for t in self._db.read().find("workflows", WorkflowDefinition, is_template=True)
            if t.tenant_id is None and (category is None or t.template_category == category)
        ]
        templates.sort(key=lambda t: t.created_at, reverse=True)
        return templates

    # Queries --------------------------------------------------------------

    def list(
        self,
        tenant_id: str,
        *,
        status: WorkflowStatus | None = None,
        template_category: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> WorkflowPage:
        match: dict[str, object] = {"tenant_id": tenant_id}
        if status is not None:
            match["status"] = status.value
        if template_category is not None:
            match["template_category"] = template_category
        workflows = self._db.read().find("workflows", WorkflowDefinition, **match)
        workflows.sort(key=lambda w: w.created_at, reverse=True)
        total = len(workflows)
        return WorkflowPage(
            workflows=workflows[offset : offset + limit],
            total=total,
            has_more=offset + limit < total,
        )

    def get(self, tenant_id: str, workflow_id: str) -> WorkflowDefinition:
        workflow = self._db.read().first(
            "workflows", WorkflowDefinition, id=workflow_id, tenant_id=tenant_id
        )
        if workflow is None:
            raise NotFoundError("Workflow not found")
        return workflow

    # Mutations ------------------------------------------------------------

    def create(
        self,
        tenant_id: str,
        *,
        created_by: str,
        name: str,
        trigger_type: str,
        actions: list[WorkflowAction],
        description: str | None = None,
        trigger_config: dict[str, Any] | None = None,
        conditions: list[WorkflowCondition] | None = None,
        status: WorkflowStatus = WorkflowStatus.DRAFT,
        template_id: str | None = None,
    ) -> WorkflowDefinition:
        if not actions:
            raise BadRequestError("A workflow needs at least one action")
        if status not in (WorkflowStatus.DRAFT, WorkflowStatus.ACTIVE):
            raise BadRequestError("A workflow can only be created as draft or active")

        template_category: str | None = None
        if template_id is not None:
            template = self._db.read().first(
                "workflows", WorkflowDefinition, id=template_id, is_template=True
            )
            if template is None:
                raise NotFoundError("Template not found")
            template_category = template.template_category

        now = self._clock()
        workflow = WorkflowDefinition(
            id=new_id(),
            tenant_id=tenant_id,
            name=name.strip(),
            description=description,
            trigger_type=trigger_type,
            trigger_config=trigger_config or {},
            conditions=conditions or [],
            actions=actions,
            status=status,
            is_template=False,
            template_category=template_category,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        with self._db.transaction() as tables:
            tables.insert("workflows", workflow)
        logger.info(
            "Workflow created",
            extra={"tenant_id": tenant_id, "workflow_id": workflow.id, "trigger": trigger_type},
        )
        return workflow

    def update(
        self, tenant_id: str, workflow_id: str, updates: Mapping[str, Any]
    ) -> WorkflowDefinition:
        allowed = {"name", "description", "trigger_config", "conditions", "actions"}
        unknown = set(updates) - allowed
        if unknown:
            raise BadRequestError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        with self._db.transaction() as tables:
            workflow = self._get_for_update(tables, tenant_id, workflow_id)
            if workflow.status == WorkflowStatus.ARCHIVED:
                raise BadRequestError("An archived workflow cannot be modified")
            merged = WorkflowDefinition.model_validate(
                {
                    **workflow.model_dump(mode="json"),
                    **_jsonable(updates),
                    "updated_at": self._clock(),
                }
            )
            if workflow.status == WorkflowStatus.ACTIVE and not merged.actions:
                raise BadRequestError("An active workflow needs at least one action")
            tables.upsert("workflows", merged)
        return merged

    def activate(self, tenant_id: str, workflow_id: str) -> WorkflowDefinition:
        return self._set_status(tenant_id, workflow_id, WorkflowStatus.ACTIVE)

    def pause(self, tenant_id: str, workflow_id: str) -> WorkflowDefinition:
        return self._set_status(tenant_id, workflow_id, WorkflowStatus.PAUSED)

    def delete(self, tenant_id: str, workflow_id: str) -> WorkflowDefinition:
        """Soft delete: archive the workflow; its execution history is kept."""

        return self._set_status(tenant_id, workflow_id, WorkflowStatus.ARCHIVED)

    def _set_status(
        self, tenant_id: str, workflow_id: str, to: WorkflowStatus
    ) -> WorkflowDefinition:
        with self._db.transaction() as tables:
            workflow = self._get_for_update(tables, tenant_id, workflow_id)
            if to == WorkflowStatus.ACTIVE and not workflow.actions:
                raise BadRequestError("A workflow needs at least one action")
            status = transition(current=workflow.status, to=to)
            updated = workflow.model_copy(update={"status": status, "updated_at": self._clock()})
            tables.upsert("workflows", updated)
        logger.info(
            "Workflow status changed",
            extra={"tenant_id": tenant_id, "workflow_id": workflow_id, "status": to.value},
        )
        return updated

    @staticmethod
    def _get_for_update(tables: Any, tenant_id: str, workflow_id: str) -> WorkflowDefinition:
        workflow = tables.first(
            "workflows", WorkflowDefinition, id=workflow_id, tenant_id=tenant_id
        )
        if workflow is None:
            raise NotFoundError("Workflow not found")
        return workflow

    # Executions -----------------------------------------------------------

    def get_execution_history(
        self,
        tenant_id: str,
        workflow_id: str,
        *,
        status: ExecutionStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> ExecutionPage:
        self.get(tenant_id, workflow_id)
        match: dict[str, object] = {"workflow_id": workflow_id}
        if status is not None:
            match["status"] = status
        executions = self._db.read().find("workflow_executions", WorkflowExecution, **match)
        executions.sort(key=lambda e: e.started_at, reverse=True)
        total = len(executions)
        return ExecutionPage(
            executions=executions[offset : offset + limit],
            total=total,
            has_more=offset + limit < total,
        )

    def get_stats(self, tenant_id: str, workflow_id: str) -> WorkflowStats:
        workflow = self.get(tenant_id, workflow_id)
        executions = self._db.read().find(
            "workflow_executions", WorkflowExecution, workflow_id=workflow_id
        )
        grouped: dict[str, list[int]] = {}
        for execution in executions:
            grouped.setdefault(execution.status, []).append(execution.duration_ms)
        stats = [
            StatusStat(
                status=status,
                count=len(durations),
                avg_duration_ms=int(sum(durations) / len(durations)),
            )
            for status, durations in sorted(grouped.items())
        ]
        return WorkflowStats(workflow=workflow, stats=stats)

    def test_workflow(
        self, tenant_id: str, workflow_id: str, test_data: Mapping[str, Any] | None = None
    ) -> WorkflowTestResult:
        workflow = self.get(tenant_id, workflow_id)
        return preview_workflow(workflow, test_data or {})


def _jsonable(updates: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in updates.items():
        if isinstance(value, list):
            out[key] = [v.model_dump(mode="json") if isinstance(v, BaseModel) else v for v in value]
        elif isinstance(value, BaseModel):
            out[key] = value.model_dump(mode="json")
        else:
            out[key] = value
    return out
