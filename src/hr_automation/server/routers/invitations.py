"""Invitation endpoints.

Managing invitations requires an HR manager. Token validation is public and
acceptance only needs an authenticated user: the invitee has no access to the
company yet.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query

from hr_automation.directory.models import User
from hr_automation.directory.service import InvitableEmployee
from hr_automation.invitations.models import (
    AcceptResult,
    CreateInvitationResult,
    Invitation,
    InvitationPage,
    InviteLink,
    TokenValidation,
)
from hr_automation.server.deps import RequestContext, current_user, get_services, hr_context
from hr_automation.server.models import AcceptInvitationRequest, CreateInvitationRequest
from hr_automation.services import Services

router = APIRouter(prefix="/invitations", tags=["invitations"])


def _public(invitation: Invitation) -> dict[str, object]:
    return invitation.model_dump(mode="json", exclude={"token"})


@router.post("", response_model=CreateInvitationResult, status_code=201)
def create_invitation(
    req: CreateInvitationRequest,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> CreateInvitationResult:
    return services.invitations.create(
        ctx.tenant_id,
        invited_by=ctx.user_id,
        email=req.email,
        role=req.role,
        employee_id=req.employee_id,
        send_email=req.send_email,
        personal_message=req.personal_message,
    )


@router.get("", response_model=InvitationPage)
def list_invitations(
    status: Literal["all", "pending", "accepted", "expired", "revoked"] = "all",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=50),
    search: str | None = None,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> InvitationPage:
    return services.invitations.list(
        ctx.tenant_id, status=status, page=page, limit=limit, search=search
    )


@router.get("/invitable-employees", response_model=list[InvitableEmployee])
def invitable_employees(
    search: str | None = None,
    limit: int = Query(default=20, ge=1, le=50),
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> list[InvitableEmployee]:
    return services.directory.list_invitable_employees(ctx.tenant_id, search=search, limit=limit)


@router.get("/validate/{token}", response_model=TokenValidation, response_model_exclude_none=True)
def validate_token(token: str, services: Services = Depends(get_services)) -> TokenValidation:
    return services.invitations.validate_token(token)


@router.post("/accept", response_model=AcceptResult)
def accept_invitation(
    req: AcceptInvitationRequest,
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> AcceptResult:
    return services.invitations.accept(req.token, user_id=user.id)


@router.post("/{invitation_id}/resend")
def resend_invitation(
    invitation_id: str,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> dict[str, object]:
    return _public(services.invitations.resend(ctx.tenant_id, invitation_id))


@router.post("/{invitation_id}/revoke")
def revoke_invitation(
    invitation_id: str,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> dict[str, object]:
    return _public(
        services.invitations.revoke(ctx.tenant_id, invitation_id, revoked_by=ctx.user_id)
    )


@router.get("/{invitation_id}/link", response_model=InviteLink)
def invite_link(
    invitation_id: str,
    ctx: RequestContext = Depends(hr_context),
    services: Services = Depends(get_services),
) -> InviteLink:
    return services.invitations.get_invite_link(ctx.tenant_id, invitation_id)
