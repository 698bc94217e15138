from __future__ import annotations

from datetime import UTC, datetime

from hr_automation.invitations.emails import (
    InvitationEmail,
    invitation_html,
    invitation_subject,
    invitation_text,
)
from hr_automation.invitations.tokens import generate_invite_token, invite_url

EMAIL = InvitationEmail(
    invitee_email="kofi@acme.test",
    inviter_name="Awa <Diallo>",
    company_name="Acme & Co",
    role="hr_manager",
    invite_url="https://hr.example.test/invite/abc",
    expires_at=datetime(2026, 1, 22, 9, 0, tzinfo=UTC),
    personal_message="See you Monday",
)


def test_subject() -> None:
    assert invitation_subject("Acme & Co") == "You are invited to join Acme & Co"


def test_text_body() -> None:
    text = invitation_text(EMAIL)
    assert "Awa <Diallo> invited you to join Acme & Co as HR Manager." in text
    assert "https://hr.example.test/invite/abc" in text
    assert "22 January 2026" in text
    assert '"See you Monday"' in text


def test_html_body_is_escaped() -> None:
    html = invitation_html(EMAIL)
    assert "Awa &lt;Diallo&gt;" in html
    assert "Acme &amp; Co" in html
    assert 'href="https://hr.example.test/invite/abc"' in html
    assert "See you Monday" in html


def test_text_without_personal_message() -> None:
    text = invitation_text(
        InvitationEmail(
            invitee_email="x@acme.test",
            inviter_name="Awa",
            company_name="Acme",
            role="employee",
            invite_url="u",
            expires_at=datetime(2026, 1, 22, tzinfo=UTC),
        )
    )
    assert '"' not in text
    assert "as Employee." in text


def test_token_expiry_and_url() -> None:
    now = datetime(2026, 1, 15, tzinfo=UTC)
    token, expires_at = generate_invite_token(ttl_days=7, now=now)
    assert expires_at == datetime(2026, 1, 22, tzinfo=UTC)
    assert token
    assert invite_url("https://hr.example.test/", token) == f"https://hr.example.test/invite/{token}"
