"""Condition evaluation against trigger data.

Conditions are combined with AND; an empty list always passes. Evaluation is
pure and never raises: a missing field, an unknown operator or values that
cannot be ordered simply make the condition fail.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Final

from hr_automation.workflow.models import WorkflowCondition


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()


def get_nested_value(data: Mapping[str, Any], path: str) -> Any:
    """Resolve a dot path (`employee.status`) into nested mappings.

    Returns `MISSING` when any segment is absent.
    """

    value: Any = data
    for key in path.split("."):
        if isinstance(value, Mapping) and key in value:
            value = value[key]
        else:
            return MISSING
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def values_equal(actual: Any, expected: Any) -> bool:
    """Strict equality: a missing value equals nothing and booleans never equal numbers."""

    if actual is MISSING or expected is MISSING:
        return False
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    if _is_number(actual) and _is_number(expected):
        return actual == expected
    if type(actual) is not type(expected) and not (
        isinstance(actual, str) and isinstance(expected, str)
    ):
        return False
    return bool(actual == expected)


def _orderable(actual: Any, expected: Any) -> bool:
    if _is_number(actual) and _is_number(expected):
        return True
    return isinstance(actual, str) and isinstance(expected, str)


def compare(actual: Any, operator: str, expected: Any) -> bool:
    if operator == "eq":
        return values_equal(actual, expected)
    if operator == "ne":
        return not values_equal(actual, expected)
    if operator in ("gt", "gte", "lt", "lte"):
        if not _orderable(actual, expected):
            return False
        if operator == "gt":
            return bool(actual > expected)
        if operator == "gte":
            return bool(actual >= expected)
        if operator == "lt":
            return bool(actual < expected)
        return bool(actual <= expected)
    if operator == "contains":
        return isinstance(actual, str) and str(expected).lower() in actual.lower()
    if operator == "in":
        if isinstance(expected, (str, bytes)) or not isinstance(expected, Sequence):
            return False
        return any(values_equal(actual, candidate) for candidate in expected)
    return False


def evaluate_condition(condition: WorkflowCondition, data: Mapping[str, Any]) -> bool:
    return compare(get_nested_value(data, condition.field), condition.operator, condition.value)


def evaluate_conditions(
    conditions: Sequence[WorkflowCondition], data: Mapping[str, Any]
) -> bool:
    return all(evaluate_condition(c, data) for c in conditions)
