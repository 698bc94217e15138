"""Directory service: tenants, users, memberships and employees.

Employee changes publish HR events (`employee.hired`,
`employee.status.changed`, `employee.terminated`) so that workflows can react.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel

from hr_automation.directory.models import (
    Employee,
    EmployeeStatus,
    Membership,
    Pagination,
    Role,
    Tenant,
    User,
)
from hr_automation.errors import BadRequestError, ConflictError, NotFoundError
from hr_automation.events.bus import EventBus
from hr_automation.storage import JsonDatabase, new_id, utc_now

logger = logging.getLogger(__name__)


class InvitableEmployee(BaseModel):
    id: str
    name: str
    email: str | None
    job_title: str | None
    employee_number: str | None


class TeamMember(BaseModel):
    id: str
    email: str
    name: str
    avatar_url: str | None
    role: str
    status: str
    last_login_at: datetime | None
    employee_id: str | None
    joined_at: datetime


class TeamMembersPage(BaseModel):
    members: list[TeamMember]
    pagination: Pagination


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class DirectoryService:
    def __init__(
        self,
        db: JsonDatabase,
        *,
        bus: EventBus | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._db = db
        self._bus = bus
        self._clock = clock

    # Tenants and users ----------------------------------------------------

    def create_tenant(self, name: str) -> Tenant:
        tenant = Tenant(id=new_id(), name=name.strip(), created_at=self._clock())
        with self._db.transaction() as tables:
            tables.insert("tenants", tenant)
        logger.info("Tenant created", extra={"tenant_id": tenant.id})
        return tenant

    def get_tenant(self, tenant_id: str) -> Tenant:
        tenant = self._db.read().get("tenants", Tenant, tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found")
        return tenant

    def create_user(self, *, email: str, first_name: str, last_name: str) -> User:
        normalized = _normalize_email(email)
        now = self._clock()
        user = User(
            id=new_id(),
            email=normalized,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            created_at=now,
            updated_at=now,
        )
        with self._db.transaction() as tables:
            if tables.first("users", User, email=normalized) is not None:
                raise ConflictError("A user with this email already exists")
            tables.insert("users", user)
        return user

    def get_user(self, user_id: str) -> User:
        user = self._db.read().get("users", User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def find_user_by_email(self, email: str) -> User | None:
        return self._db.read().first("users", User, email=_normalize_email(email))

    def add_membership(self, *, user_id: str, tenant_id: str, role: Role) -> Membership:
        membership = Membership(
            id=new_id(), user_id=user_id, tenant_id=tenant_id, role=role, created_at=self._clock()
        )
        with self._db.transaction() as tables:
            user = tables.get("users", User, user_id)
            if user is None:
                raise NotFoundError("User not found")
            if tables.get("tenants", Tenant, tenant_id) is None:
                raise NotFoundError("Tenant not found")
            if tables.first("memberships", Membership, user_id=user_id, tenant_id=tenant_id):
                raise ConflictError("This user already has access to this company")
            tables.insert("memberships", membership)
            if user.active_tenant_id is None:
                tables.upsert(
                    "users",
                    user.model_copy(
                        update={"active_tenant_id": tenant_id, "updated_at": self._clock()}
                    ),
                )
        return membership

    def membership_for(self, user_id: str, tenant_id: str) -> Membership | None:
        return self._db.read().first(
            "memberships", Membership, user_id=user_id, tenant_id=tenant_id
        )

    # Employees ------------------------------------------------------------

    def get_employee(self, tenant_id: str, employee_id: str) -> Employee:
        employee = self._db.read().first("employees", Employee, id=employee_id, tenant_id=tenant_id)
        if employee is None:
            raise NotFoundError("Employee not found")
        return employee

    def hire_employee(
        self,
        tenant_id: str,
        *,
        first_name: str,
        last_name: str,
        email: str | None = None,
        phone: str | None = None,
        job_title: str | None = None,
        employee_number: str | None = None,
        base_salary: float | None = None,
        hire_date: date | None = None,
        depth: int = 0,
    ) -> Employee:
        now = self._clock()
        employee = Employee(
            id=new_id(),
            tenant_id=tenant_id,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=_normalize_email(email) if email else None,
            phone=phone,
            job_title=job_title,
            employee_number=employee_number,
            base_salary=base_salary,
            hire_date=hire_date or now.date(),
            created_at=now,
            updated_at=now,
        )
        with self._db.transaction() as tables:
            if tables.get("tenants", Tenant, tenant_id) is None:
                raise NotFoundError("Tenant not found")
            tables.insert("employees", employee)

        logger.info(
            "Employee hired", extra={"tenant_id": tenant_id, "employee_id": employee.id}
        )
        self._publish(
            "employee.hired",
            {
                "tenant_id": tenant_id,
                "employee_id": employee.id,
                "employee_name": employee.full_name,
                "hire_date": employee.hire_date,
                "base_salary": employee.base_salary,
            },
            depth=depth,
        )
        return employee

    def change_employee_status(
        self,
        tenant_id: str,
        employee_id: str,
        new_status: EmployeeStatus,
        *,
        changed_by: str,
        reason: str | None = None,
        depth: int = 0,
    ) -> Employee:
        now = self._clock()
        with self._db.transaction() as tables:
            employee = tables.first("employees", Employee, id=employee_id, tenant_id=tenant_id)
            if employee is None:
                raise NotFoundError("Employee not found")
            old_status = employee.status
            if old_status == new_status:
                raise BadRequestError(f"Employee is already {new_status}")
            updates: dict[str, object] = {"status": new_status, "updated_at": now}
            if new_status == "terminated":
                updates["termination_date"] = now.date()
            elif old_status == "terminated":
                updates["termination_date"] = None
            updated = employee.model_copy(update=updates)
            tables.upsert("employees", updated)

        logger.info(
            "Employee status changed",
            extra={
                "tenant_id": tenant_id,
                "employee_id": employee_id,
                "old_status": old_status,
                "new_status": new_status,
            },
        )
        self._publish(
            "employee.status.changed",
            {
                "tenant_id": tenant_id,
                "employee_id": employee_id,
                "old_status": old_status,
                "new_status": new_status,
                "changed_by": changed_by,
                "reason": reason,
                "effective_date": now.date(),
            },
            depth=depth,
        )
        if new_status == "terminated":
            self._publish(
                "employee.terminated",
                {
                    "tenant_id": tenant_id,
                    "employee_id": employee_id,
                    "employee_name": updated.full_name,
                    "termination_date": now.date(),
                    "reason": reason or "",
                    "termination_type": "dismissal",
                },
                depth=depth,
            )
        return updated

    def _publish(self, name: str, data: dict[str, object], *, depth: int) -> None:
        if self._bus is None:
            return
        self._bus.publish(name, data, depth=depth)

    # Listings -------------------------------------------------------------

    def list_invitable_employees(
        self, tenant_id: str, *, search: str | None = None, limit: int = 20
    ) -> list[InvitableEmployee]:
        """Active employees of the tenant that have no linked user account."""

        tables = self._db.read()
        linked = {u.employee_id for u in tables.all("users", User) if u.employee_id}
        candidates = [
            e
            for e in tables.find("employees", Employee, tenant_id=tenant_id)
            if e.id not in linked and e.termination_date is None
        ]

        if search:
            needle = search.lower()
            candidates = [
                e
                for e in candidates
                if any(
                    needle in (value or "").lower()
                    for value in (e.first_name, e.last_name, e.email, e.employee_number)
                )
            ]

        candidates = candidates[:limit]

        return [
            InvitableEmployee(
                id=e.id,
                name=e.full_name,
                email=e.email,
                job_title=e.job_title,
                employee_number=e.employee_number,
            )
            for e in candidates
        ]

    def list_team_members(
        self,
        tenant_id: str,
        *,
        status: Literal["all", "active", "inactive"] = "all",
        search: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> TeamMembersPage:
        tables = self._db.read()
        users = {u.id: u for u in tables.all("users", User)}

        rows: list[tuple[User, Membership]] = []
        for membership in tables.find("memberships", Membership, tenant_id=tenant_id):
            user = users.get(membership.user_id)
            if user is None:
                continue
            if status != "all" and user.status != status:
                continue
            if search:
                needle = search.lower()
                if needle not in user.full_name.lower() and needle not in user.email:
                    continue
            rows.append((user, membership))

        rows.sort(key=lambda pair: pair[0].first_name.lower())
        total = len(rows)
        offset = (page - 1) * limit
        members = [
            TeamMember(
                id=user.id,
                email=user.email,
                name=user.full_name,
                avatar_url=user.avatar_url,
                role=membership.role,
                status=user.status,
                last_login_at=user.last_login_at,
                employee_id=user.employee_id,
                joined_at=membership.created_at,
            )
            for user, membership in rows[offset : offset + limit]
        ]
        return TeamMembersPage(
            members=members, pagination=Pagination.build(page=page, limit=limit, total=total)
        )
