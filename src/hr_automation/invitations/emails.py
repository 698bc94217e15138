"""Invitation email rendering (subject, plain text and HTML)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from html import escape

ROLE_LABELS: dict[str, str] = {
    "employee": "Employee",
    "manager": "Manager",
    "hr_manager": "HR Manager",
    "tenant_admin": "Administrator",
}


@dataclass(frozen=True, slots=True)
class InvitationEmail:
    invitee_email: str
    inviter_name: str
    company_name: str
    role: str
    invite_url: str
    expires_at: datetime
    personal_message: str | None = None

    @property
    def role_label(self) -> str:
        return ROLE_LABELS.get(self.role, self.role)

    @property
    def expiry_label(self) -> str:
        return self.expires_at.strftime("%d %B %Y")


def invitation_subject(company_name: str) -> str:
    return f"You are invited to join {company_name}"


def invitation_text(email: InvitationEmail) -> str:
    lines = [
        "Hello,",
        "",
        f"{email.inviter_name} invited you to join {email.company_name} as {email.role_label}.",
    ]
    if email.personal_message:
        lines += ["", f'"{email.personal_message}"']
    lines += [
        "",
        "Accept the invitation here:",
        email.invite_url,
        "",
        f"This invitation expires on {email.expiry_label}.",
        "",
        f"If you were not expecting this email ({email.invitee_email}), you can ignore it.",
    ]
    return "\n".join(lines) + "\n"


def invitation_html(email: InvitationEmail) -> str:
    message_block = ""
    if email.personal_message:
        message_block = (
            '<blockquote style="border-left:3px solid #ccc;padding-left:12px;color:#555">'
            f"{escape(email.personal_message)}</blockquote>"
        )
    url = escape(email.invite_url, quote=True)
    return (
        "<!DOCTYPE html>"
        '<html><body style="font-family:sans-serif;line-height:1.5">'
        "<p>Hello,</p>"
        f"<p><strong>{escape(email.inviter_name)}</strong> invited you to join "
        f"<strong>{escape(email.company_name)}</strong> as {escape(email.role_label)}.</p>"
        f"{message_block}"
        f'<p><a href="{url}">Accept the invitation</a></p>'
        f"<p>This invitation expires on {escape(email.expiry_label)}.</p>"
        f'<p style="color:#888;font-size:12px">Sent to {escape(email.invitee_email)}. '
        "If you were not expecting this email, you can ignore it.</p>"
        "</body></html>"
    )
