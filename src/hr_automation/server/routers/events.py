from __future__ import annotations

from fastapi import APIRouter, Depends

from hr_automation.events.registry import get_event_documentation, list_event_names
from hr_automation.server.deps import RequestContext, get_services, hr_context, tenant_context
from hr_automation.server.models import PublishEventRequest
from hr_automation.services import Services

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/catalog")
def event_catalog(_: RequestContext = Depends(tenant_context)) -> list[dict[str, object]]:
    return [get_event_documentation(name) for name in list_event_names()]


@router.post("")
def publish_event(
    req: PublishEventRequest,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> dict[str, object]:
    """Publish an event into the caller's tenant and run the workflows it triggers."""

    published = services.bus.publish(req.name, {**req.data, "tenant_id": ctx.tenant_id})
    return {
        "event": published.event.model_dump(mode="json"),
        "executions": [result.to_json() for result in published.results],
    }
