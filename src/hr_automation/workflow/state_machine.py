"""Explicit lifecycle of a workflow definition.

draft -> active -> paused -> active ... ; any non-archived state -> archived.
Archived is terminal: a deleted workflow is never resurrected.
"""

from __future__ import annotations

from enum import Enum

from hr_automation.errors import BadRequestError


class WorkflowStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    ARCHIVED = "archived"


ALLOWED_TRANSITIONS: dict[WorkflowStatus, set[WorkflowStatus]] = {
    WorkflowStatus.DRAFT: {WorkflowStatus.ACTIVE, WorkflowStatus.ARCHIVED},
    WorkflowStatus.ACTIVE: {WorkflowStatus.PAUSED, WorkflowStatus.ARCHIVED},
    WorkflowStatus.PAUSED: {WorkflowStatus.ACTIVE, WorkflowStatus.ARCHIVED},
    WorkflowStatus.ARCHIVED: set(),
}


class IllegalTransitionError(BadRequestError):
    pass


def transition(*, current: WorkflowStatus, to: WorkflowStatus) -> WorkflowStatus:
    allowed = ALLOWED_TRANSITIONS.get(current, set())
    if to not in allowed:
        raise IllegalTransitionError(
            f"Illegal workflow transition: {current.value} -> {to.value}"
        )
    return to
