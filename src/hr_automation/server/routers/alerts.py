from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query

from hr_automation.alerts import Alert, AlertPage
from hr_automation.server.deps import RequestContext, get_services, tenant_context
from hr_automation.services import Services

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=AlertPage)
def list_alerts(
    status: Literal["active", "dismissed", "completed"] | None = "active",
    severity: Literal["info", "warning", "urgent"] | None = None,
    mine: bool = False,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(tenant_context),
    services: Services = Depends(get_services),
) -> AlertPage:
    return services.alerts.list(
        ctx.tenant_id,
        status=status,
        severity=severity,
        assignee_id=ctx.user_id if mine else None,
        limit=limit,
        offset=offset,
    )


@router.get("/urgent-count")
def urgent_count(
    ctx: RequestContext = Depends(tenant_context),
    services: Services = Depends(get_services),
) -> dict[str, int]:
    return {"count": services.alerts.urgent_count(ctx.tenant_id, assignee_id=ctx.user_id)}


@router.post("/{alert_id}/dismiss", response_model=Alert)
def dismiss_alert(
    alert_id: str,
    ctx: RequestContext = Depends(tenant_context),
    services: Services = Depends(get_services),
) -> Alert:
    return services.alerts.dismiss(ctx.tenant_id, alert_id, user_id=ctx.user_id)


@router.post("/{alert_id}/complete", response_model=Alert)
def complete_alert(
    alert_id: str,
    ctx: RequestContext = Depends(tenant_context),
    services: Services = Depends(get_services),
) -> Alert:
    return services.alerts.complete(ctx.tenant_id, alert_id, user_id=ctx.user_id)
