from __future__ import annotations

import pytest

from hr_automation.errors import BadRequestError, NotFoundError
from hr_automation.workflow.models import WorkflowAction, WorkflowCondition
from hr_automation.workflow.state_machine import IllegalTransitionError, WorkflowStatus
from hr_automation.workflow.templates import BUILTIN_TEMPLATES

ALERT = WorkflowAction(type="create_alert", config={"title": "Heads up"})


def _create(services, company, **kwargs):
    params = {
        "created_by": company.admin.id,
        "name": "Leave watcher",
        "trigger_type": "leave.approved",
        "actions": [ALERT],
    }
    params.update(kwargs)
    return services.workflows.create(company.tenant.id, **params)


def test_templates_are_seeded_once(services) -> None:
    templates = services.workflows.get_templates()
    assert len(templates) == len(BUILTIN_TEMPLATES)
    assert all(t.is_template and t.tenant_id is None for t in templates)

    assert services.workflows.seed_templates() == 0
    assert len(services.workflows.get_templates()) == len(BUILTIN_TEMPLATES)


def test_create_defaults_to_draft(services, company) -> None:
    wf = _create(services, company, name="  Leave watcher  ")
    assert wf.status == WorkflowStatus.DRAFT
    assert wf.name == "Leave watcher"
    assert wf.created_by == company.admin.id
    assert wf.execution_count == 0


def test_create_requires_an_action(services, company) -> None:
    with pytest.raises(BadRequestError):
        _create(services, company, actions=[])


def test_create_rejects_archived_status(services, company) -> None:
    with pytest.raises(BadRequestError):
        _create(services, company, status=WorkflowStatus.ARCHIVED)


def test_create_from_template_copies_category(services, company) -> None:
    [template] = services.workflows.get_templates(category="offboarding")
    wf = _create(services, company, template_id=template.id)
    assert wf.template_category == "offboarding"

    with pytest.raises(NotFoundError, match="Template not found"):
        _create(services, company, template_id="nope")


def test_list_is_tenant_scoped_and_paginated(services, company, clock) -> None:
    for idx in range(3):
        _create(services, company, name=f"wf-{idx}")
        clock.advance(seconds=1)
    other = services.directory.create_tenant("Other")
    services.workflows.create(
        other.id, created_by="x", name="foreign", trigger_type="leave.approved", actions=[ALERT]
    )

    page = services.workflows.list(company.tenant.id, limit=2)
    assert page.total == 3
    assert page.has_more is True
    assert [w.name for w in page.workflows] == ["wf-2", "wf-1"]

    rest = services.workflows.list(company.tenant.id, limit=2, offset=2)
    assert [w.name for w in rest.workflows] == ["wf-0"]
    assert rest.has_more is False


def test_get_from_another_tenant_is_not_found(services, company) -> None:
    wf = _create(services, company)
    other = services.directory.create_tenant("Other")
    with pytest.raises(NotFoundError, match="Workflow not found"):
        services.workflows.get(other.id, wf.id)


def test_lifecycle(services, company) -> None:
    wf = _create(services, company)

    assert services.workflows.activate(company.tenant.id, wf.id).status == WorkflowStatus.ACTIVE
    assert services.workflows.pause(company.tenant.id, wf.id).status == WorkflowStatus.PAUSED
    assert services.workflows.activate(company.tenant.id, wf.id).status == WorkflowStatus.ACTIVE
    assert services.workflows.delete(company.tenant.id, wf.id).status == WorkflowStatus.ARCHIVED

    with pytest.raises(IllegalTransitionError):
        services.workflows.activate(company.tenant.id, wf.id)


def test_pause_from_draft_is_illegal(services, company) -> None:
    wf = _create(services, company)
    with pytest.raises(IllegalTransitionError):
        services.workflows.pause(company.tenant.id, wf.id)


def test_update_is_partial(services, company) -> None:
    wf = _create(services, company, description="before")
    condition = WorkflowCondition(field="days_count", operator="gt", value=5)

    updated = services.workflows.update(
        company.tenant.id, wf.id, {"name": "Renamed", "conditions": [condition]}
    )

    assert updated.name == "Renamed"
    assert updated.description == "before"
    assert updated.conditions == [condition]
    assert updated.actions == [ALERT]
    assert services.workflows.get(company.tenant.id, wf.id).name == "Renamed"


def test_update_rejects_status_and_archived(services, company) -> None:
    wf = _create(services, company)
    with pytest.raises(BadRequestError):
        services.workflows.update(company.tenant.id, wf.id, {"status": "active"})

    services.workflows.delete(company.tenant.id, wf.id)
    with pytest.raises(BadRequestError):
        services.workflows.update(company.tenant.id, wf.id, {"name": "x"})


def test_execution_history_and_stats(services, company) -> None:
    wf = _create(services, company, status=WorkflowStatus.ACTIVE)
    services.engine.execute_workflow(wf.id, {})
    services.engine.execute_workflow(wf.id, {})
    services.workflows.pause(company.tenant.id, wf.id)
    services.engine.execute_workflow(wf.id, {})

    history = services.workflows.get_execution_history(company.tenant.id, wf.id)
    assert history.total == 3
    assert sorted(e.status for e in history.executions) == ["skipped", "success", "success"]

    only_success = services.workflows.get_execution_history(
        company.tenant.id, wf.id, status="success"
    )
    assert only_success.total == 2

    stats = services.workflows.get_stats(company.tenant.id, wf.id)
    assert stats.workflow.execution_count == 2
    assert {s.status: s.count for s in stats.stats} == {"skipped": 1, "success": 2}


def test_test_workflow_is_a_dry_run(services, company) -> None:
    wf = _create(
        services,
        company,
        conditions=[WorkflowCondition(field="days_count", operator="gte", value=10)],
    )

    passing = services.workflows.test_workflow(company.tenant.id, wf.id, {"days_count": 12})
    failing = services.workflows.test_workflow(company.tenant.id, wf.id, {"days_count": 2})

    assert passing.conditions_pass is True
    assert passing.actions_preview == [ALERT]
    assert failing.conditions_pass is False
    assert services.workflows.get_execution_history(company.tenant.id, wf.id).total == 0
