"""Invitation lifecycle: create, list, resend, revoke, validate and accept.

An invitation is `pending` until it is accepted, revoked or found past its
expiry. Expiry is detected lazily (whenever an invitation is read) and by the
`expire_stale` sweep; in both cases the `expired` status is persisted even
when the operation that noticed it then fails.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Literal

from hr_automation.config import AutomationSettings
from hr_automation.directory.models import Employee, Membership, Pagination, Tenant, User
from hr_automation.errors import (
    BadRequestError,
    ConflictError,
    DeliveryError,
    NotFoundError,
)
from hr_automation.invitations.emails import (
    InvitationEmail,
    invitation_html,
    invitation_subject,
    invitation_text,
)
from hr_automation.invitations.models import (
    INVITABLE_ROLES,
    AcceptResult,
    CreatedInvitation,
    CreateInvitationResult,
    Invitation,
    InvitationListItem,
    InvitationPage,
    InvitationStatus,
    InviteLink,
    TokenEmployee,
    TokenExistingUser,
    TokenInvitation,
    TokenValidation,
)
from hr_automation.invitations.tokens import generate_invite_token, invite_url
from hr_automation.notifications.mailer import EmailMessage, Mailer, SendResult
from hr_automation.storage import JsonDatabase, Tables, new_id, utc_now

logger = logging.getLogger(__name__)

MAX_PERSONAL_MESSAGE_LENGTH = 500
UNKNOWN_INVITER = "Unknown"
FALLBACK_INVITER = "An administrator"

NOT_FOUND_MESSAGE = "Invitation not found"
EXPIRED_MESSAGE = "This invitation has expired"
NOT_PENDING_MESSAGE = "This invitation is no longer pending"


class InvitationService:
    def __init__(
        self,
        db: JsonDatabase,
        *,
        mailer: Mailer,
        settings: AutomationSettings,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._db = db
        self._mailer = mailer
        self._settings = settings
        self._clock = clock

    # Create ---------------------------------------------------------------

    def create(
        self,
        tenant_id: str,
        *,
        invited_by: str,
        email: str | None = None,
        role: str = "employee",
        employee_id: str | None = None,
        send_email: bool = False,
        personal_message: str | None = None,
    ) -> CreateInvitationResult:
        email = email.strip().lower() if email else None
        if role not in INVITABLE_ROLES:
            raise BadRequestError(f"Role cannot be invited: {role}")
        if personal_message and len(personal_message) > MAX_PERSONAL_MESSAGE_LENGTH:
            raise BadRequestError(
                f"Personal message must be at most {MAX_PERSONAL_MESSAGE_LENGTH} characters"
            )
        if send_email and not email:
            raise BadRequestError("An email address is required to send the invitation by email")

        now = self._clock()
        token, expires_at = generate_invite_token(
            ttl_days=self._settings.invitation_ttl_days, now=now
        )

        with self._db.transaction() as tables:
            if email:
                existing = tables.first("users", User, email=email)
                if existing is not None and tables.first(
                    "memberships", Membership, user_id=existing.id, tenant_id=tenant_id
                ):
                    raise ConflictError("This user already has access to this company")
                if tables.first(
                    "invitations", Invitation, tenant_id=tenant_id, email=email, status="pending"
                ):
                    raise ConflictError("An invitation is already pending for this email")

            if employee_id is not None:
                if tables.first("employees", Employee, id=employee_id, tenant_id=tenant_id) is None:
                    raise NotFoundError("Employee not found")
                if tables.first("users", User, employee_id=employee_id) is not None:
                    raise ConflictError("This employee already has a user account")

            invitation = Invitation(
                id=new_id(),
                tenant_id=tenant_id,
                email=email,
                role=role,  # type: ignore[arg-type]
                employee_id=employee_id,
                token=token,
                expires_at=expires_at,
                invited_by=invited_by,
                personal_message=personal_message,
                created_at=now,
                updated_at=now,
            )
            tables.insert("invitations", invitation)

        logger.info(
            "Invitation created",
            extra={"tenant_id": tenant_id, "invitation_id": invitation.id, "role": role},
        )

        email_sent = False
        if send_email and email:
            result = self._send_invitation_email(invitation)
            email_sent = result.success
            if email_sent:
                sent_at = self._clock()
                self._update(
                    invitation.id,
                    email_sent_at=sent_at,
                    last_email_sent_at=sent_at,
                )
            else:
                logger.warning(
                    "Invitation email could not be sent",
                    extra={"invitation_id": invitation.id, "error": result.error},
                )

        return CreateInvitationResult(
            invitation=CreatedInvitation(
                id=invitation.id,
                email=invitation.email,
                role=invitation.role,
                expires_at=invitation.expires_at,
                invite_url=invite_url(self._settings.app_url, invitation.token),
            ),
            email_sent=email_sent,
        )

    # List -----------------------------------------------------------------

    def list(
        self,
        tenant_id: str,
        *,
        status: Literal["all"] | InvitationStatus = "all",
        page: int = 1,
        limit: int = 20,
        search: str | None = None,
    ) -> InvitationPage:
        if not 1 <= limit <= 50:
            raise BadRequestError("limit must be between 1 and 50")
        if page < 1:
            raise BadRequestError("page must be at least 1")

        now = self._clock()
        with self._db.transaction() as tables:
            match: dict[str, object] = {"tenant_id": tenant_id}
            if status != "all":
                match["status"] = status
            invitations = tables.find("invitations", Invitation, **match)
            if search:
                needle = search.lower()
                invitations = [i for i in invitations if i.email and needle in i.email]
            invitations.sort(key=lambda i: i.created_at, reverse=True)

            total = len(invitations)
            offset = (page - 1) * limit
            page_items = invitations[offset : offset + limit]

            items: list[InvitationListItem] = []
            for invitation in page_items:
                if invitation.status == "pending" and invitation.is_past_expiry(now):
                    invitation = self._mark_expired(tables, invitation, now)
                inviter = tables.get("users", User, invitation.invited_by)
                items.append(
                    InvitationListItem(
                        id=invitation.id,
                        email=invitation.email,
                        role=invitation.role,
                        status=invitation.status,
                        employee_id=invitation.employee_id,
                        expires_at=invitation.expires_at,
                        email_sent_at=invitation.email_sent_at,
                        email_resent_count=invitation.email_resent_count,
                        accepted_at=invitation.accepted_at,
                        created_at=invitation.created_at,
                        invited_by_name=inviter.full_name if inviter else UNKNOWN_INVITER,
                    )
                )

        return InvitationPage(
            invitations=items,
            pagination=Pagination.build(page=page, limit=limit, total=total),
        )

    # Resend / revoke / link -----------------------------------------------

    def resend(self, tenant_id: str, invitation_id: str) -> Invitation:
        now = self._clock()
        expired = False
        with self._db.transaction() as tables:
            invitation = self._get_in_tenant(tables, tenant_id, invitation_id)
            if invitation.status != "pending":
                raise BadRequestError(NOT_PENDING_MESSAGE)
            max_resends = self._settings.invitation_max_resends
            if invitation.email_resent_count >= max_resends:
                raise BadRequestError(f"Maximum number of resends reached ({max_resends})")
            if not invitation.email:
                raise BadRequestError("An invitation without an email cannot be resent")
            if invitation.is_past_expiry(now):
                self._mark_expired(tables, invitation, now)
                expired = True
        if expired:
            raise BadRequestError(EXPIRED_MESSAGE)

        result = self._send_invitation_email(invitation)
        if not result.success:
            logger.warning(
                "Invitation email resend failed",
                extra={"invitation_id": invitation.id, "error": result.error},
            )
            raise DeliveryError("The invitation email could not be sent")

        updated = self._update(
            invitation.id,
            email_resent_count=invitation.email_resent_count + 1,
            last_email_sent_at=self._clock(),
        )
        logger.info(
            "Invitation email resent",
            extra={"invitation_id": invitation.id, "count": updated.email_resent_count},
        )
        return updated

    def revoke(self, tenant_id: str, invitation_id: str, *, revoked_by: str) -> Invitation:
        now = self._clock()
        with self._db.transaction() as tables:
            invitation = self._get_in_tenant(tables, tenant_id, invitation_id)
            if invitation.status != "pending":
                raise BadRequestError("Only pending invitations can be revoked")
            revoked = invitation.model_copy(
                update={
                    "status": "revoked",
                    "revoked_at": now,
                    "revoked_by": revoked_by,
                    "updated_at": now,
                }
            )
            tables.upsert("invitations", revoked)
        logger.info(
            "Invitation revoked", extra={"tenant_id": tenant_id, "invitation_id": invitation_id}
        )
        return revoked

    def get_invite_link(self, tenant_id: str, invitation_id: str) -> InviteLink:
        now = self._clock()
        expired = False
        with self._db.transaction() as tables:
            invitation = self._get_in_tenant(tables, tenant_id, invitation_id)
            if invitation.status != "pending":
                raise BadRequestError(NOT_PENDING_MESSAGE)
            if invitation.is_past_expiry(now):
                self._mark_expired(tables, invitation, now)
                expired = True
        if expired:
            raise BadRequestError(EXPIRED_MESSAGE)
        return InviteLink(
            invite_url=invite_url(self._settings.app_url, invitation.token),
            expires_at=invitation.expires_at,
        )

    # Token flow -----------------------------------------------------------

    def validate_token(self, token: str) -> TokenValidation:
        """Describe the invitation behind a token; token problems are reported, not raised."""

        now = self._clock()
        with self._db.transaction() as tables:
            invitation = tables.first("invitations", Invitation, token=token)
            if invitation is None:
                return TokenValidation(valid=False, error="invalid", message=NOT_FOUND_MESSAGE)
            if invitation.status == "accepted":
                return TokenValidation(
                    valid=False, error="used", message="This invitation has already been accepted"
                )
            if invitation.status == "revoked":
                return TokenValidation(
                    valid=False, error="revoked", message="This invitation has been revoked"
                )
            if invitation.status == "expired" or invitation.is_past_expiry(now):
                if invitation.status != "expired":
                    self._mark_expired(tables, invitation, now)
                return TokenValidation(valid=False, error="expired", message=EXPIRED_MESSAGE)

            tenant = tables.get("tenants", Tenant, invitation.tenant_id)
            existing = (
                tables.first("users", User, email=invitation.email) if invitation.email else None
            )
            employee = (
                tables.get("employees", Employee, invitation.employee_id)
                if invitation.employee_id
                else None
            )

        return TokenValidation(
            valid=True,
            invitation=TokenInvitation(
                id=invitation.id,
                email=invitation.email,
                role=invitation.role,
                tenant_name=tenant.name if tenant else "",
                employee_id=invitation.employee_id,
            ),
            employee=(
                TokenEmployee(
                    first_name=employee.first_name,
                    last_name=employee.last_name,
                    phone=employee.phone,
                )
                if employee
                else None
            ),
            existing_user=(
                TokenExistingUser(id=existing.id, name=existing.full_name) if existing else None
            ),
        )

    def accept(self, token: str, *, user_id: str) -> AcceptResult:
        """Accept an invitation for an authenticated user.

        Every write (membership, user link, invitation status) happens in one
        transaction; a failure leaves no partial state.
        """

        now = self._clock()
        expired = False
        with self._db.transaction() as tables:
            invitation = tables.first("invitations", Invitation, token=token)
            if invitation is None:
                raise NotFoundError(NOT_FOUND_MESSAGE)

            if invitation.status == "accepted":
                if invitation.accepted_by_user_id == user_id:
                    return AcceptResult(tenant_id=invitation.tenant_id, already_accepted=True)
                raise BadRequestError("This invitation has already been used")
            if invitation.status != "pending":
                raise BadRequestError(NOT_PENDING_MESSAGE)

            if invitation.is_past_expiry(now):
                self._mark_expired(tables, invitation, now)
                expired = True
            else:
                user = tables.get("users", User, user_id)
                if user is None:
                    raise NotFoundError("User not found")
                accepted = invitation.model_copy(
                    update={
                        "status": "accepted",
                        "accepted_at": now,
                        "accepted_by_user_id": user_id,
                        "updated_at": now,
                    }
                )

                if tables.first(
                    "memberships", Membership, user_id=user_id, tenant_id=invitation.tenant_id
                ):
                    tables.upsert("invitations", accepted)
                    return AcceptResult(
                        tenant_id=invitation.tenant_id, already_had_access=True
                    )

                tables.insert(
                    "memberships",
                    Membership(
                        id=new_id(),
                        user_id=user_id,
                        tenant_id=invitation.tenant_id,
                        role=invitation.role,
                        created_at=now,
                    ),
                )
                user_updates: dict[str, object] = {
                    "active_tenant_id": invitation.tenant_id,
                    "updated_at": now,
                }
                if invitation.employee_id:
                    user_updates["employee_id"] = invitation.employee_id
                tables.upsert("users", user.model_copy(update=user_updates))
                tables.upsert("invitations", accepted)

        if expired:
            raise BadRequestError(EXPIRED_MESSAGE)

        logger.info(
            "Invitation accepted",
            extra={
                "tenant_id": invitation.tenant_id,
                "invitation_id": invitation.id,
                "user_id": user_id,
            },
        )
        return AcceptResult(tenant_id=invitation.tenant_id)

    # Maintenance ----------------------------------------------------------

    def expire_stale(self, now: datetime | None = None) -> int:
        """Mark every pending invitation past its expiry as expired. Returns the count."""

        now = now or self._clock()
        count = 0
        with self._db.transaction() as tables:
            for invitation in tables.find("invitations", Invitation, status="pending"):
                if invitation.is_past_expiry(now):
                    self._mark_expired(tables, invitation, now)
                    count += 1
        if count:
            logger.info("Stale invitations expired", extra={"count": count})
        return count

    # Helpers --------------------------------------------------------------

    @staticmethod
    def _get_in_tenant(tables: Tables, tenant_id: str, invitation_id: str) -> Invitation:
        invitation = tables.first(
            "invitations", Invitation, id=invitation_id, tenant_id=tenant_id
        )
        if invitation is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return invitation

    @staticmethod
    def _mark_expired(tables: Tables, invitation: Invitation, now: datetime) -> Invitation:
        expired = invitation.model_copy(update={"status": "expired", "updated_at": now})
        tables.upsert("invitations", expired)
        return expired

    def _update(self, invitation_id: str, **updates: object) -> Invitation:
        with self._db.transaction() as tables:
            current = tables.get("invitations", Invitation, invitation_id)
            if current is None:
                raise NotFoundError(NOT_FOUND_MESSAGE)
            updated = current.model_copy(update={**updates, "updated_at": self._clock()})
            tables.upsert("invitations", updated)
        return updated

    def _send_invitation_email(self, invitation: Invitation) -> SendResult:
        if invitation.email is None:
            raise BadRequestError("An invitation without an email cannot be sent")
        tables = self._db.read()
        tenant = tables.get("tenants", Tenant, invitation.tenant_id)
        inviter = tables.get("users", User, invitation.invited_by)
        company = tenant.name if tenant else ""
        content = InvitationEmail(
            invitee_email=invitation.email,
            inviter_name=inviter.full_name if inviter else FALLBACK_INVITER,
            company_name=company,
            role=invitation.role,
            invite_url=invite_url(self._settings.app_url, invitation.token),
            expires_at=invitation.expires_at,
            personal_message=invitation.personal_message,
        )
        return self._mailer.send(
            EmailMessage(
                to=invitation.email,
                subject=invitation_subject(company),
                text=invitation_text(content),
                html=invitation_html(content),
            )
        )
