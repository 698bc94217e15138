"""Invitation records and the shapes returned by the invitation service."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from hr_automation.directory.models import Pagination

InvitationStatus = Literal["pending", "accepted", "expired", "revoked"]
InvitableRole = Literal["employee", "manager", "hr_manager", "tenant_admin"]

INVITABLE_ROLES: tuple[str, ...] = ("employee", "manager", "hr_manager", "tenant_admin")


class Invitation(BaseModel):
    id: str
    tenant_id: str
    email: str | None = None
    role: InvitableRole = "employee"
    employee_id: str | None = None
    token: str
    status: InvitationStatus = "pending"
    expires_at: datetime
    invited_by: str

    email_sent_at: datetime | None = None
    last_email_sent_at: datetime | None = None
    email_resent_count: int = 0

    accepted_at: datetime | None = None
    accepted_by_user_id: str | None = None
    revoked_at: datetime | None = None
    revoked_by: str | None = None

    personal_message: str | None = None
    created_at: datetime
    updated_at: datetime

    def is_past_expiry(self, now: datetime) -> bool:
        return self.expires_at < now


class CreatedInvitation(BaseModel):
    id: str
    email: str | None
    role: InvitableRole
    expires_at: datetime
    invite_url: str


class CreateInvitationResult(BaseModel):
    invitation: CreatedInvitation
    email_sent: bool


class InvitationListItem(BaseModel):
    id: str
    email: str | None
    role: InvitableRole
    status: InvitationStatus
    employee_id: str | None
    expires_at: datetime
    email_sent_at: datetime | None
    email_resent_count: int
    accepted_at: datetime | None
    created_at: datetime
    invited_by_name: str


class InvitationPage(BaseModel):
    invitations: list[InvitationListItem]
    pagination: Pagination


class InviteLink(BaseModel):
    invite_url: str
    expires_at: datetime


TokenError = Literal["invalid", "used", "revoked", "expired"]


class TokenInvitation(BaseModel):
    id: str
    email: str | None
    role: InvitableRole
    tenant_name: str
    employee_id: str | None


class TokenEmployee(BaseModel):
    first_name: str
    last_name: str
    phone: str | None


class TokenExistingUser(BaseModel):
    id: str
    name: str


class TokenValidation(BaseModel):
    valid: bool
    error: TokenError | None = None
    message: str | None = None
    invitation: TokenInvitation | None = None
    employee: TokenEmployee | None = None
    existing_user: TokenExistingUser | None = None


class AcceptResult(BaseModel):
    success: bool = True
    tenant_id: str
    already_accepted: bool = False
    already_had_access: bool = False
