"""Team, employee and user endpoints."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query

from hr_automation.directory.models import Employee, User
from hr_automation.directory.service import TeamMembersPage
from hr_automation.server.deps import RequestContext, get_services, hr_context
from hr_automation.server.models import (
    ChangeEmployeeStatusRequest,
    HireEmployeeRequest,
    SignUpRequest,
)
from hr_automation.services import Services

router = APIRouter(tags=["directory"])


@router.get("/team/members", response_model=TeamMembersPage)
def team_members(
    status: Literal["all", "active", "inactive"] = "all",
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> TeamMembersPage:
    return services.directory.list_team_members(
        ctx.tenant_id, status=status, search=search, page=page, limit=limit
    )


@router.post("/employees", response_model=Employee, status_code=201)
def hire_employee(
    req: HireEmployeeRequest,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> Employee:
    return services.directory.hire_employee(ctx.tenant_id, **req.model_dump())


@router.post("/employees/{employee_id}/status", response_model=Employee)
def change_employee_status(
    employee_id: str,
    req: ChangeEmployeeStatusRequest,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> Employee:
    return services.directory.change_employee_status(
        ctx.tenant_id,
        employee_id,
        req.status,
        changed_by=ctx.user_id,
        reason=req.reason,
    )


@router.post("/users", response_model=User, status_code=201)
def sign_up(req: SignUpRequest, services: Services = Depends(get_services)) -> User:
    """Create a user without any company access (stand-in for account sign-up)."""

    return services.directory.create_user(
        email=req.email, first_name=req.first_name, last_name=req.last_name
    )
