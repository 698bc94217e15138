"""Abstract base class for mail delivery backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EmailMessage:
    to: str
    subject: str
    text: str
    html: str | None = None


@dataclass(frozen=True, slots=True)
class SendResult:
    success: bool
    message_id: str | None = None
    error: str | None = None


class Mailer(ABC):
    """Abstract base class for mailers.

    This interface allows pluggable delivery backends (log-only, HTTP API, ...).
    Implementations report delivery failures through `SendResult` rather than
    raising, so callers decide whether a failed email fails their operation.
    """

    @abstractmethod
    def send(self, message: EmailMessage) -> SendResult:
        """Deliver a single email.

        Args:
            message: The email to deliver.

        Returns:
            Delivery outcome.
        """
        pass

    def close(self) -> None:
        """Release delivery resources (HTTP sessions). The default holds none."""
