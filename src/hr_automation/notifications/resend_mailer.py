"""HTTP mailer for the Resend email API."""

from __future__ import annotations

import logging

import requests

from hr_automation.notifications.mailer import EmailMessage, Mailer, SendResult

logger = logging.getLogger(__name__)


class ResendMailer(Mailer):
    """Deliver email through an HTTP JSON API with bearer authentication."""

    def __init__(
        self,
        *,
        api_key: str,
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        session: requests.Session | None = None,
        timeout: float = 15.0,
    ) -> None:
        if not api_key:
            raise ValueError("Mail API key is required")
        if not sender:
            raise ValueError("Mail sender is required")

        self._sender = sender
        self._api_url = api_url
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "User-Agent": "hr-automation",
            }
        )

    def send(self, message: EmailMessage) -> SendResult:
        payload: dict[str, object] = {
            "from": self._sender,
            "to": [message.to],
            "subject": message.subject,
            "text": message.text,
        }
        if message.html is not None:
            payload["html"] = message.html

        try:
            resp = self._session.post(self._api_url, json=payload, timeout=self._timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Email delivery failed", extra={"to": message.to, "error": str(e)})
            return SendResult(success=False, error=str(e))

        data = resp.json() if resp.content else {}
        message_id = data.get("id") if isinstance(data, dict) else None
        logger.info("Email delivered", extra={"to": message.to, "message_id": message_id})
        return SendResult(success=True, message_id=message_id if isinstance(message_id, str) else None)

    def close(self) -> None:
        self._session.close()
