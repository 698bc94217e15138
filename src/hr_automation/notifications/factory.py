"""Factory for creating mailers."""

import logging

from hr_automation.config import AutomationSettings
from hr_automation.notifications.log_mailer import LogMailer
from hr_automation.notifications.mailer import Mailer
from hr_automation.notifications.resend_mailer import ResendMailer

logger = logging.getLogger(__name__)


class MailerFactory:
    """Factory for creating mailer instances."""

    @staticmethod
    def create(settings: AutomationSettings) -> Mailer:
        """Create a mailer based on configuration.

        Args:
            settings: Service settings specifying the mail provider.

        Returns:
            Configured mailer instance.

        Raises:
            ValueError: If the provider is not supported or credentials are missing.
        """
        logger.info(f"Creating mailer: {settings.mail_provider}")

        if settings.mail_provider == "log":
            return LogMailer()
        elif settings.mail_provider == "resend":
            return ResendMailer(
                api_key=settings.mail_api_key,
                sender=settings.mail_from,
                api_url=settings.mail_api_url,
            )
        else:
            raise ValueError(f"Unsupported mail provider: {settings.mail_provider}")
