from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from hr_automation.alerts import AlertService
from hr_automation.directory.service import DirectoryService
from hr_automation.errors import BadRequestError
from hr_automation.events.bus import EventBus
from hr_automation.notifications.mailer import EmailMessage, Mailer
from hr_automation.workflow.models import ActionOutcome, WorkflowAction

logger = logging.getLogger(__name__)

DEFAULT_PAYROLL_EVENT = "payroll.custom_event"


@dataclass(frozen=True, slots=True)
class ActionContext:
    """Everything an action may read about the run that invoked it."""

    workflow_id: str
    tenant_id: str
    trigger_data: dict[str, Any]
    trigger_event_id: str | None = None
    depth: int = 0

    @property
    def actor(self) -> str:
        return f"workflow:{self.workflow_id}"


class ActionHandler(Protocol):
    """A single action type.

    Handlers may raise; the engine records the exception as a failed action
    and carries on with the next one.
    """

    def execute(self, action: WorkflowAction, context: ActionContext) -> ActionOutcome: ...


def _config_str(config: dict[str, Any], key: str) -> str | None:
    value = config.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequestError(f"Action config '{key}' must be a string")
    return value


def _trigger_str(context: ActionContext, key: str) -> str | None:
    value = context.trigger_data.get(key)
    return value if isinstance(value, str) else None


@dataclass(frozen=True, slots=True)
class CreateAlert:
    alerts: AlertService
    bus: EventBus | None = None

    def execute(self, action: WorkflowAction, context: ActionContext) -> ActionOutcome:
        config = action.config
        title = _config_str(config, "title")
        message = _config_str(config, "description") or title or "Workflow alert"
        due_raw = _config_str(config, "due_date")
        alert = self.alerts.create(
            context.tenant_id,
            type=_config_str(config, "alert_type") or "workflow_trigger",
            severity=config.get("severity") or "info",
            title=title,
            message=message,
            employee_id=_config_str(config, "employee_id") or _trigger_str(context, "employee_id"),
            assignee_id=_config_str(config, "assignee_id"),
            action_url=_config_str(config, "action_url"),
            action_label=_config_str(config, "action_label"),
            due_date=datetime.fromisoformat(due_raw) if due_raw else None,
            metadata={"workflow_id": context.workflow_id},
        )
        if self.bus is not None:
            self.bus.publish(
                "alert.created",
                {
                    "tenant_id": context.tenant_id,
                    "alert_id": alert.id,
                    "type": alert.type,
                    "severity": alert.severity,
                    "assignee_id": alert.assignee_id,
                    "employee_id": alert.employee_id,
                    "message": alert.message,
                    "created_at": alert.created_at,
                },
                depth=context.depth + 1,
            )
        return ActionOutcome(type=action.type, success=True, data={"alert_id": alert.id})


@dataclass(frozen=True, slots=True)
class SendNotification:
    mailer: Mailer

    def execute(self, action: WorkflowAction, context: ActionContext) -> ActionOutcome:
        config = action.config
        recipient = _config_str(config, "recipient")
        subject = _config_str(config, "subject") or "HR notification"
        if not recipient:
            logger.info(
                "Notification without recipient; logged only",
                extra={"workflow_id": context.workflow_id, "subject": subject},
            )
            return ActionOutcome(
                type=action.type,
                success=True,
                data={"message": "Notification logged", "recipient": None, "subject": subject},
            )

        result = self.mailer.send(
            EmailMessage(to=recipient, subject=subject, text=_config_str(config, "body") or subject)
        )
        if not result.success:
            return ActionOutcome(
                type=action.type,
                success=False,
                error=result.error or "Email delivery failed",
                data={"recipient": recipient},
            )
        return ActionOutcome(
            type=action.type,
            success=True,
            data={
                "message": "Notification sent",
                "recipient": recipient,
                "subject": subject,
                "message_id": result.message_id,
            },
        )


@dataclass(frozen=True, slots=True)
class CreatePayrollEvent:
    bus: EventBus

    def execute(self, action: WorkflowAction, context: ActionContext) -> ActionOutcome:
        event_name = _config_str(action.config, "event_name") or DEFAULT_PAYROLL_EVENT
        published = self.bus.publish(
            event_name,
            {
                **context.trigger_data,
                "tenant_id": context.tenant_id,
                "workflow_id": context.workflow_id,
                "custom_data": action.config.get("data"),
            },
            depth=context.depth + 1,
            allow_custom=True,
        )
        return ActionOutcome(
            type=action.type,
            success=True,
            data={
                "event_name": event_name,
                "event_id": published.event.id,
                "triggered_executions": len(published.results),
            },
        )


@dataclass(frozen=True, slots=True)
class UpdateEmployeeStatus:
    directory: DirectoryService

    def execute(self, action: WorkflowAction, context: ActionContext) -> ActionOutcome:
        config = action.config
        employee_id = _config_str(config, "employee_id") or _trigger_str(context, "employee_id")
        if not employee_id:
            raise BadRequestError("No employee to update")
        new_status = config.get("status")
        if new_status not in ("active", "terminated", "suspended"):
            raise BadRequestError(f"Invalid employee status: {new_status!r}")

        employee = self.directory.change_employee_status(
            context.tenant_id,
            employee_id,
            new_status,
            changed_by=context.actor,
            reason=_config_str(config, "reason"),
            depth=context.depth + 1,
        )
        return ActionOutcome(
            type=action.type,
            success=True,
            data={"employee_id": employee.id, "new_status": employee.status},
        )


def default_action_handlers(
    *,
    alerts: AlertService,
    directory: DirectoryService,
    mailer: Mailer,
    bus: EventBus,
) -> dict[str, ActionHandler]:
    return {
        "create_alert": CreateAlert(alerts=alerts, bus=bus),
        "send_notification": SendNotification(mailer=mailer),
        "create_payroll_event": CreatePayrollEvent(bus=bus),
        "update_employee_status": UpdateEmployeeStatus(directory=directory),
    }
