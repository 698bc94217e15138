"""Workflow management endpoints.

Any member of the tenant may read workflows; changes and dry runs require an HR manager.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query

from hr_automation.server.deps import RequestContext, get_services, hr_context, tenant_context
from hr_automation.server.models import (
    CreateWorkflowRequest,
    UpdateWorkflowRequest,
    WorkflowTestRequest,
)
from hr_automation.services import Services
from hr_automation.workflow.models import WorkflowDefinition
from hr_automation.workflow.service import ExecutionPage, WorkflowPage, WorkflowStats
from hr_automation.workflow.state_machine import WorkflowStatus

router = APIRouter(prefix="/workflows", tags=["workflows"])


@router.get("", response_model=WorkflowPage)
def list_workflows(
    status: WorkflowStatus | None = None,
    category: str | None = None,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(tenant_context),
    services: Services = Depends(get_services),
) -> WorkflowPage:
    return services.workflows.list(
        ctx.tenant_id, status=status, template_category=category, limit=limit, offset=offset
    )


@router.get("/templates", response_model=list[WorkflowDefinition])
def list_templates(
    category: str | None = None,
    _: RequestContext = Depends(tenant_context),
    services: Services = Depends(get_services),
) -> list[WorkflowDefinition]:
    return services.workflows.get_templates(category=category)


@router.get("/{workflow_id}", response_model=WorkflowDefinition)
def get_workflow(
    workflow_id: str,
    ctx: RequestContext = Depends(tenant_context),
    services: Services = Depends(get_services),
) -> WorkflowDefinition:
    return services.workflows.get(ctx.tenant_id, workflow_id)


@router.post("", response_model=WorkflowDefinition, status_code=201)
def create_workflow(
    req: CreateWorkflowRequest,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> WorkflowDefinition:
    return services.workflows.create(
        ctx.tenant_id,
        created_by=ctx.user_id,
        name=req.name,
        description=req.description,
        trigger_type=req.trigger_type,
        trigger_config=req.trigger_config,
        conditions=req.conditions,
        actions=req.actions,
        status=WorkflowStatus(req.status),
        template_id=req.template_id,
    )


@router.patch("/{workflow_id}", response_model=WorkflowDefinition)
def update_workflow(
    workflow_id: str,
    req: UpdateWorkflowRequest,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> WorkflowDefinition:
    return services.workflows.update(ctx.tenant_id, workflow_id, req.changes())


@router.post("/{workflow_id}/activate", response_model=WorkflowDefinition)
def activate_workflow(
    workflow_id: str,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> WorkflowDefinition:
    return services.workflows.activate(ctx.tenant_id, workflow_id)


@router.post("/{workflow_id}/pause", response_model=WorkflowDefinition)
def pause_workflow(
    workflow_id: str,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> WorkflowDefinition:
    return services.workflows.pause(ctx.tenant_id, workflow_id)


@router.delete("/{workflow_id}")
def delete_workflow(
    workflow_id: str,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> dict[str, bool]:
    services.workflows.delete(ctx.tenant_id, workflow_id)
    return {"success": True}


@router.get("/{workflow_id}/executions", response_model=ExecutionPage)
def list_executions(
    workflow_id: str,
    status: Literal["running", "success", "failed", "skipped"] | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(tenant_context),
    services: Services = Depends(get_services),
) -> ExecutionPage:
    return services.workflows.get_execution_history(
        ctx.tenant_id, workflow_id, status=status, limit=limit, offset=offset
    )


@router.get("/{workflow_id}/stats", response_model=WorkflowStats)
def workflow_stats(
    workflow_id: str,
    ctx: RequestContext = Depends(tenant_context),
    services: Services = Depends(get_services),
) -> WorkflowStats:
    return services.workflows.get_stats(ctx.tenant_id, workflow_id)


@router.post("/{workflow_id}/test")
def test_workflow(
    workflow_id: str,
    req: WorkflowTestRequest,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> dict[str, object]:
    return services.workflows.test_workflow(ctx.tenant_id, workflow_id, req.test_data).to_json()
