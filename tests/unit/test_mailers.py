from __future__ import annotations

import json

import pytest
import requests

from hr_automation.config import AutomationSettings
from hr_automation.notifications import EmailMessage, LogMailer, MailerFactory, ResendMailer

MESSAGE = EmailMessage(to="a@acme.test", subject="Hi", text="Hello", html="<p>Hello</p>")


class _FakeResponse:
    def __init__(self, status_code: int, body: dict[str, object] | None = None) -> None:
        self.status_code = status_code
        self._body = body or {}
        self.content = json.dumps(self._body).encode()

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> dict[str, object]:
        return self._body


class _FakeSession(requests.Session):
    def __init__(self, response: _FakeResponse | Exception) -> None:
        super().__init__()
        self.response = response
        self.calls: list[dict[str, object]] = []
        self.closed = False

    def post(self, url, json=None, timeout=None, **kwargs):  # type: ignore[override]
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    def close(self) -> None:
        self.closed = True
        super().close()


def test_resend_mailer_posts_json_with_bearer_token() -> None:
    session = _FakeSession(_FakeResponse(200, {"id": "email-1"}))
    mailer = ResendMailer(api_key="key-123", sender="HR <hr@acme.test>", session=session)

    result = mailer.send(MESSAGE)

    assert result.success is True
    assert result.message_id == "email-1"
    assert session.headers["Authorization"] == "Bearer key-123"
    [call] = session.calls
    assert call["url"] == "https://api.resend.com/emails"
    assert call["json"] == {
        "from": "HR <hr@acme.test>",
        "to": ["a@acme.test"],
        "subject": "Hi",
        "text": "Hello",
        "html": "<p>Hello</p>",
    }


@pytest.mark.parametrize(
    "response",
    [_FakeResponse(422, {"message": "invalid"}), requests.ConnectionError("offline")],
)
def test_resend_mailer_reports_failures(response) -> None:
    mailer = ResendMailer(api_key="k", sender="s@acme.test", session=_FakeSession(response))

    result = mailer.send(MESSAGE)

    assert result.success is False
    assert result.error


def test_resend_mailer_requires_credentials() -> None:
    with pytest.raises(ValueError):
        ResendMailer(api_key="", sender="s@acme.test")


def test_log_mailer_always_succeeds() -> None:
    result = LogMailer().send(MESSAGE)
    assert result.success is True
    assert result.message_id


def test_factory_selects_backend() -> None:
    assert isinstance(MailerFactory.create(AutomationSettings(_env_file=None)), LogMailer)

    resend = MailerFactory.create(
        AutomationSettings(_env_file=None, mail_provider="resend", mail_api_key="k")
    )
    assert isinstance(resend, ResendMailer)



def test_closing_resend_mailer_closes_its_session() -> None:
    session = _FakeSession(_FakeResponse(200))
    ResendMailer(api_key="k", sender="hr@acme.test", session=session).close()

    assert session.closed is True
