"""Tenants, users, memberships and employees."""

from hr_automation.directory.models import (
    HR_MANAGER_ROLES,
    Employee,
    Membership,
    Pagination,
    Tenant,
    User,
)
from hr_automation.directory.service import DirectoryService

__all__ = [
    "HR_MANAGER_ROLES",
    "DirectoryService",
    "Employee",
    "Membership",
    "Pagination",
    "Tenant",
    "User",
]
