"""Service wiring shared by the API and the CLI."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from hr_automation.alerts import AlertService
from hr_automation.config import AutomationSettings
from hr_automation.directory.service import DirectoryService
from hr_automation.events.bus import EventBus
from hr_automation.invitations.service import InvitationService
from hr_automation.notifications.factory import MailerFactory
from hr_automation.notifications.mailer import Mailer
from hr_automation.storage import JsonDatabase, utc_now
from hr_automation.workflow.actions import default_action_handlers
from hr_automation.workflow.engine import WorkflowEngine
from hr_automation.workflow.service import WorkflowService


@dataclass(frozen=True, slots=True)
class Services:
    settings: AutomationSettings
    db: JsonDatabase
    bus: EventBus
    directory: DirectoryService
    alerts: AlertService
    mailer: Mailer
    engine: WorkflowEngine
    workflows: WorkflowService
    invitations: InvitationService

    def close(self) -> None:
        self.mailer.close()


def build_services(
    settings: AutomationSettings,
    *,
    mailer: Mailer | None = None,
    clock: Callable[[], datetime] = utc_now,
    seed_templates: bool = True,
) -> Services:
    """Build every service over one database and subscribe the engine to the bus."""

    db = JsonDatabase(settings.data_path)
    bus = EventBus(db, max_depth=settings.max_event_depth, clock=clock)
    directory = DirectoryService(db, bus=bus, clock=clock)
    alerts = AlertService(db, clock=clock)
    mailer = mailer or MailerFactory.create(settings)

    handlers = default_action_handlers(alerts=alerts, directory=directory, mailer=mailer, bus=bus)
    engine = WorkflowEngine(db, handlers, clock=clock)
    bus.subscribe(engine.handle_event)

    workflows = WorkflowService(db, clock=clock)
    if seed_templates:
        workflows.seed_templates()

    return Services(
        settings=settings,
        db=db,
        bus=bus,
        directory=directory,
        alerts=alerts,
        mailer=mailer,
        engine=engine,
        workflows=workflows,
        invitations=InvitationService(db, mailer=mailer, settings=settings, clock=clock),
    )
