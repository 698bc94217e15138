"""Unit tests for the workflow lifecycle state machine."""

from __future__ import annotations

import pytest

from hr_automation.errors import BadRequestError
from hr_automation.workflow.state_machine import (
    ALLOWED_TRANSITIONS,
    IllegalTransitionError,
    WorkflowStatus,
    transition,
)


@pytest.mark.parametrize(
    ("current", "to"),
    [
        (WorkflowStatus.DRAFT, WorkflowStatus.ACTIVE),
        (WorkflowStatus.ACTIVE, WorkflowStatus.PAUSED),
        (WorkflowStatus.PAUSED, WorkflowStatus.ACTIVE),
        (WorkflowStatus.PAUSED, WorkflowStatus.ARCHIVED),
    ],
)
def test_allowed_transitions(current: WorkflowStatus, to: WorkflowStatus) -> None:
    assert transition(current=current, to=to) == to


def test_transition_rejects_illegal_transitions() -> None:
    with pytest.raises(IllegalTransitionError):
        transition(current=WorkflowStatus.DRAFT, to=WorkflowStatus.PAUSED)


def test_archived_is_terminal() -> None:
    assert ALLOWED_TRANSITIONS[WorkflowStatus.ARCHIVED] == frozenset()
    for target in WorkflowStatus:
        with pytest.raises(IllegalTransitionError):
            transition(current=WorkflowStatus.ARCHIVED, to=target)


def test_illegal_transition_is_a_bad_request() -> None:
    assert issubclass(IllegalTransitionError, BadRequestError)
