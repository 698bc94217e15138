"""Alerts: proactive notifications for HR managers.

Alerts are created by workflows (`create_alert` action) and closed by a
person, either dismissed or completed. Only active alerts can be closed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from hr_automation.errors import BadRequestError, NotFoundError
from hr_automation.storage import JsonDatabase, new_id, utc_now

logger = logging.getLogger(__name__)

Severity = Literal["info", "warning", "urgent"]
AlertStatus = Literal["active", "dismissed", "completed"]

_SEVERITY_RANK: dict[str, int] = {"urgent": 0, "warning": 1, "info": 2}


class Alert(BaseModel):
    id: str
    tenant_id: str
    type: str
    severity: Severity = "info"
    title: str | None = None
    message: str
    assignee_id: str | None = None
    employee_id: str | None = None
    action_url: str | None = None
    action_label: str | None = None
    due_date: datetime | None = None
    status: AlertStatus = "active"
    dismissed_at: datetime | None = None
    dismissed_by: str | None = None
    completed_at: datetime | None = None
    completed_by: str | None = None
    metadata: dict[str, object] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class AlertPage(BaseModel):
    alerts: list[Alert]
    total: int
    has_more: bool


class AlertService:
    def __init__(self, db: JsonDatabase, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._db = db
        self._clock = clock

    def create(
        self,
        tenant_id: str,
        *,
        type: str,
        message: str,
        severity: Severity = "info",
        title: str | None = None,
        assignee_id: str | None = None,
        employee_id: str | None = None,
        action_url: str | None = None,
        action_label: str | None = None,
        due_date: datetime | None = None,
        metadata: dict[str, object] | None = None,
    ) -> Alert:
        now = self._clock()
        alert = Alert(
            id=new_id(),
            tenant_id=tenant_id,
            type=type,
            severity=severity,
            title=title,
            message=message,
            assignee_id=assignee_id,
            employee_id=employee_id,
            action_url=action_url,
            action_label=action_label,
            due_date=due_date,
            metadata=metadata or {},
            created_at=now,
            updated_at=now,
        )
        with self._db.transaction() as tables:
            tables.insert("alerts", alert)
        logger.info(
            "Alert created",
            extra={"tenant_id": tenant_id, "alert_id": alert.id, "severity": severity},
        )
        return alert

    def get(self, tenant_id: str, alert_id: str) -> Alert:
        alert = self._db.read().first("alerts", Alert, id=alert_id, tenant_id=tenant_id)
        if alert is None:
            raise NotFoundError("Alert not found")
        return alert

    def list(
        self,
        tenant_id: str,
        *,
        status: AlertStatus | None = None,
        severity: Severity | None = None,
        assignee_id: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> AlertPage:
        match: dict[str, object] = {"tenant_id": tenant_id}
        if status is not None:
            match["status"] = status
        if severity is not None:
            match["severity"] = severity
        if assignee_id is not None:
            match["assignee_id"] = assignee_id
        alerts = self._db.read().find("alerts", Alert, **match)

        # Urgent first, then soonest due date (undated last), then newest.
        alerts.sort(key=lambda a: a.created_at, reverse=True)
        alerts.sort(
            key=lambda a: (
                _SEVERITY_RANK[a.severity],
                a.due_date is None,
                a.due_date.timestamp() if a.due_date else 0.0,
            )
        )
        total = len(alerts)
        return AlertPage(
            alerts=alerts[offset : offset + limit],
            total=total,
            has_more=offset + limit < total,
        )

    def dismiss(self, tenant_id: str, alert_id: str, *, user_id: str) -> Alert:
        return self._close(tenant_id, alert_id, user_id=user_id, to="dismissed")

    def complete(self, tenant_id: str, alert_id: str, *, user_id: str) -> Alert:
        return self._close(tenant_id, alert_id, user_id=user_id, to="completed")

    def _close(
        self,
        tenant_id: str,
        alert_id: str,
        *,
        user_id: str,
        to: Literal["dismissed", "completed"],
    ) -> Alert:
        now = self._clock()
        with self._db.transaction() as tables:
            alert = tables.first("alerts", Alert, id=alert_id, tenant_id=tenant_id)
            if alert is None:
                raise NotFoundError("Alert not found")
            if alert.status != "active":
                raise BadRequestError("Only active alerts can be closed")
            prefix = "dismissed" if to == "dismissed" else "completed"
            updated = alert.model_copy(
                update={
                    "status": to,
                    f"{prefix}_at": now,
                    f"{prefix}_by": user_id,
                    "updated_at": now,
                }
            )
            tables.upsert("alerts", updated)
        return updated

    def urgent_count(self, tenant_id: str, *, assignee_id: str) -> int:
        return len(
            self._db.read().find(
                "alerts",
                Alert,
                tenant_id=tenant_id,
                assignee_id=assignee_id,
                status="active",
                severity="urgent",
            )
        )
