"""Tenant, user, membership and employee records."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["employee", "manager", "hr_manager", "tenant_admin", "super_admin"]
HR_MANAGER_ROLES: frozenset[str] = frozenset({"hr_manager", "tenant_admin", "super_admin"})

UserStatus = Literal["active", "inactive"]
EmployeeStatus = Literal["active", "terminated", "suspended"]


class Tenant(BaseModel):
    id: str
    name: str
    created_at: datetime


class User(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    status: UserStatus = "active"
    employee_id: str | None = None
    active_tenant_id: str | None = None
    avatar_url: str | None = None
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Membership(BaseModel):
    """Grants a user access to a tenant with a role."""

    id: str
    user_id: str
    tenant_id: str
    role: Role
    created_at: datetime


class Employee(BaseModel):
    id: str
    tenant_id: str
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    job_title: str | None = None
    employee_number: str | None = None
    status: EmployeeStatus = "active"
    base_salary: float | None = Field(default=None, gt=0)
    hire_date: date | None = None
    termination_date: date | None = None
    created_at: datetime
    updated_at: datetime

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> Pagination:
        return cls(page=page, limit=limit, total=total, total_pages=-(-total // limit))
