"""Request-scoped dependencies: services and the calling user's context.

The caller is identified by the `X-User-Id` header. Their tenant is their
active tenant and their role is their membership role in it.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Header, Request

from hr_automation.directory.models import HR_MANAGER_ROLES, User
from hr_automation.errors import ForbiddenError, UnauthorizedError
from hr_automation.services import Services


@dataclass(frozen=True, slots=True)
class RequestContext:
    user: User
    tenant_id: str
    role: str

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def is_hr_manager(self) -> bool:
        return self.role in HR_MANAGER_ROLES


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if not isinstance(services, Services):
        raise RuntimeError("Services are not configured on this app")
    return services


def current_user(
    x_user_id: str | None = Header(default=None),
    services: Services = Depends(get_services),
) -> User:
    if not x_user_id:
        raise UnauthorizedError("Authentication required")
    user = services.db.read().get("users", User, x_user_id)
    if user is None or user.status != "active":
        raise UnauthorizedError("Authentication required")
    return user


def tenant_context(
    user: User = Depends(current_user),
    services: Services = Depends(get_services),
) -> RequestContext:
    if user.active_tenant_id is None:
        raise ForbiddenError("No active company for this user")
    membership = services.directory.membership_for(user.id, user.active_tenant_id)
    if membership is None:
        raise ForbiddenError("You do not have access to this company")
    return RequestContext(user=user, tenant_id=user.active_tenant_id, role=membership.role)


def hr_context(ctx: RequestContext = Depends(tenant_context)) -> RequestContext:
    if not ctx.is_hr_manager:
        raise ForbiddenError("HR manager role required")
    return ctx
