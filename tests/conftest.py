"""Test configuration and fixtures."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from hr_automation.config import AutomationSettings
from hr_automation.directory.models import Tenant, User
from hr_automation.notifications.mailer import EmailMessage, Mailer, SendResult
from hr_automation.services import Services, build_services


class FakeClock:
    """Controllable replacement for `utc_now`."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingMailer(Mailer):
    """Mailer that keeps sent messages in memory and can be told to fail."""

    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []
        self.fail = False
        self.closed = False

    def send(self, message: EmailMessage) -> SendResult:
        if self.fail:
            return SendResult(success=False, error="smtp down")
        self.sent.append(message)
        return SendResult(success=True, message_id=f"msg-{len(self.sent)}")

    def close(self) -> None:
        self.closed = True


@dataclass
class Company:
    tenant: Tenant
    admin: User


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 15, 9, 0, tzinfo=UTC))


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def settings(tmp_path: Path) -> AutomationSettings:
    return AutomationSettings(
        _env_file=None,
        data_path=tmp_path / "data" / "hr.json",
        app_url="https://hr.example.test",
        mail_provider="log",
    )


@pytest.fixture
def services(
    settings: AutomationSettings, mailer: RecordingMailer, clock: FakeClock
) -> Services:
    return build_services(settings, mailer=mailer, clock=clock)


@pytest.fixture
def company(services: Services) -> Company:
    """A tenant with an administrator (HR manager role)."""

    tenant = services.directory.create_tenant("Acme SARL")
    admin = services.directory.create_user(
        email="admin@acme.test", first_name="Awa", last_name="Diallo"
    )
    services.directory.add_membership(user_id=admin.id, tenant_id=tenant.id, role="tenant_admin")
    return Company(tenant=tenant, admin=services.directory.get_user(admin.id))
