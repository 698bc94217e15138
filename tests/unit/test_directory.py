from __future__ import annotations

import pytest

from hr_automation.errors import BadRequestError, ConflictError, NotFoundError
from hr_automation.events.bus import EventRecord
from hr_automation.invitations.models import Invitation


def test_create_user_normalizes_email_and_rejects_duplicates(services) -> None:
    user = services.directory.create_user(
        email="  Kofi.Mensah@Acme.TEST ", first_name="Kofi", last_name="Mensah"
    )
    assert user.email == "kofi.mensah@acme.test"
    assert services.directory.find_user_by_email("KOFI.MENSAH@acme.test") is not None

    with pytest.raises(ConflictError):
        services.directory.create_user(
            email="kofi.mensah@acme.test", first_name="K", last_name="M"
        )


def test_first_membership_sets_active_tenant(services, company) -> None:
    assert company.admin.active_tenant_id == company.tenant.id

    other = services.directory.create_tenant("Other")
    services.directory.add_membership(user_id=company.admin.id, tenant_id=other.id, role="employee")
    assert services.directory.get_user(company.admin.id).active_tenant_id == company.tenant.id

    with pytest.raises(ConflictError):
        services.directory.add_membership(
            user_id=company.admin.id, tenant_id=other.id, role="manager"
        )


def test_add_membership_requires_user_and_tenant(services, company) -> None:
    with pytest.raises(NotFoundError):
        services.directory.add_membership(user_id="ghost", tenant_id=company.tenant.id, role="employee")
    with pytest.raises(NotFoundError):
        services.directory.add_membership(user_id=company.admin.id, tenant_id="nope", role="employee")


def test_status_change_publishes_events(services, company) -> None:
    employee = services.directory.hire_employee(
        company.tenant.id, first_name="Ama", last_name="Owusu", base_salary=250000
    )

    terminated = services.directory.change_employee_status(
        company.tenant.id, employee.id, "terminated", changed_by=company.admin.id, reason="End"
    )
    assert terminated.termination_date is not None

    names = [e.name for e in services.db.read().find("event_log", EventRecord)]
    assert names == ["employee.hired", "employee.status.changed", "employee.terminated"]

    reactivated = services.directory.change_employee_status(
        company.tenant.id, employee.id, "active", changed_by=company.admin.id
    )
    assert reactivated.termination_date is None

    with pytest.raises(BadRequestError):
        services.directory.change_employee_status(
            company.tenant.id, employee.id, "active", changed_by=company.admin.id
        )


def test_invitable_employees_exclude_linked_and_terminated(services, company) -> None:
    linked = services.directory.hire_employee(company.tenant.id, first_name="Linked", last_name="A")
    gone = services.directory.hire_employee(company.tenant.id, first_name="Gone", last_name="B")
    free = services.directory.hire_employee(
        company.tenant.id, first_name="Free", last_name="C", employee_number="EMP-7"
    )
    services.directory.change_employee_status(
        company.tenant.id, gone.id, "terminated", changed_by=company.admin.id
    )
    result = services.invitations.create(
        company.tenant.id, invited_by=company.admin.id, employee_id=linked.id
    )
    user = services.directory.create_user(email="l@acme.test", first_name="L", last_name="A")
    invitation = services.db.read().get("invitations", Invitation, result.invitation.id)
    assert invitation is not None
    services.invitations.accept(invitation.token, user_id=user.id)

    invitable = services.directory.list_invitable_employees(company.tenant.id)
    assert [e.id for e in invitable] == [free.id]

    assert services.directory.list_invitable_employees(company.tenant.id, search="emp-7")
    assert services.directory.list_invitable_employees(company.tenant.id, search="zzz") == []


def test_team_members(services, company) -> None:
    bob = services.directory.create_user(email="bob@acme.test", first_name="Bob", last_name="Z")
    services.directory.add_membership(user_id=bob.id, tenant_id=company.tenant.id, role="employee")
    services.directory.create_user(email="o@x.test", first_name="Out", last_name="S")

    page = services.directory.list_team_members(company.tenant.id)
    assert [m.name for m in page.members] == ["Awa Diallo", "Bob Z"]
    assert page.members[0].role == "tenant_admin"
    assert page.pagination.total == 2
    assert page.pagination.total_pages == 1

    found = services.directory.list_team_members(company.tenant.id, search="bob")
    assert [m.email for m in found.members] == ["bob@acme.test"]

    second = services.directory.list_team_members(company.tenant.id, page=2, limit=1)
    assert [m.name for m in second.members] == ["Bob Z"]
