from __future__ import annotations

import secrets
from datetime import datetime, timedelta

TOKEN_BYTES = 32


def generate_invite_token(*, ttl_days: int, now: datetime) -> tuple[str, datetime]:
    """Return a fresh URL-safe token and its expiry."""

    return secrets.token_urlsafe(TOKEN_BYTES), now + timedelta(days=ttl_days)


def invite_url(app_url: str, token: str) -> str:
    return f"{app_url.rstrip('/')}/invite/{token}"
