"""Mailer that only logs outgoing messages (development default)."""

import logging
import uuid

from hr_automation.notifications.mailer import EmailMessage, Mailer, SendResult

logger = logging.getLogger(__name__)


class LogMailer(Mailer):
    def send(self, message: EmailMessage) -> SendResult:
        message_id = uuid.uuid4().hex
        logger.info(
            "Email not delivered (log mailer)",
            extra={"to": message.to, "subject": message.subject, "message_id": message_id},
        )
        return SendResult(success=True, message_id=message_id)
