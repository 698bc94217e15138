"""Built-in workflow templates.

Templates are system-wide definitions (no tenant) that tenants copy when
creating a workflow. They are seeded idempotently by name.
"""

from __future__ import annotations

from typing import Any

BUILTIN_TEMPLATES: list[dict[str, Any]] = [
    {
        "name": "Onboarding checklist on hire",
        "description": "Create an onboarding alert for HR when a new employee is hired.",
        "template_category": "onboarding",
        "trigger_type": "employee.hired",
        "conditions": [],
        "actions": [
            {
                "type": "create_alert",
                "config": {
                    "alert_type": "onboarding",
                    "severity": "info",
                    "title": "Prepare onboarding",
                    "description": "A new employee was hired. Prepare their onboarding.",
                },
            }
        ],
    },
    {
        "name": "Offboarding on termination",
        "description": "Raise an urgent alert to settle final pay when an employee is terminated.",
        "template_category": "offboarding",
        "trigger_type": "employee.status.changed",
        "conditions": [{"field": "new_status", "operator": "eq", "value": "terminated"}],
        "actions": [
            {
                "type": "create_alert",
                "config": {
                    "alert_type": "final_payroll",
                    "severity": "urgent",
                    "title": "Compute final pay",
                    "description": "An employee was terminated. Compute their final settlement.",
                },
            },
            {
                "type": "create_payroll_event",
                "config": {"event_name": "payroll.termination"},
            },
        ],
    },
    {
        "name": "Long leave notice",
        "description": "Warn HR when an approved leave lasts ten days or more.",
        "template_category": "time_off",
        "trigger_type": "leave.approved",
        "conditions": [{"field": "days_count", "operator": "gte", "value": 10}],
        "actions": [
            {
                "type": "create_alert",
                "config": {
                    "alert_type": "leave_notification",
                    "severity": "warning",
                    "title": "Long leave approved",
                    "description": "An approved leave of ten days or more needs a replacement plan.",
                },
            }
        ],
    },
]
