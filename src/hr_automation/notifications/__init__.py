"""Mail delivery backends."""

from hr_automation.notifications.factory import MailerFactory
from hr_automation.notifications.log_mailer import LogMailer
from hr_automation.notifications.mailer import EmailMessage, Mailer, SendResult
from hr_automation.notifications.resend_mailer import ResendMailer

__all__ = [
    "EmailMessage",
    "LogMailer",
    "Mailer",
    "MailerFactory",
    "ResendMailer",
    "SendResult",
]
