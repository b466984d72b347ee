"""
Notification Service Abstract Base Class

Defines the interface for delivering one-time login codes by email.
Implemented by a SendGrid service (mail configured) and a log-only
service (no mail configuration).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


OTP_SUBJECT = "Your Login OTP"


@dataclass
class NotificationResult:
    """Result from sending a notification."""
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"


class BaseNotificationService(ABC):
    """Abstract base class for notification services."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> NotificationResult:
        """Send an email."""
        pass

    async def send_otp(self, to_email: str, otp_code: str) -> NotificationResult:
        """Send a one-time login code."""
        return await self.send_email(
            to_email=to_email,
            subject=OTP_SUBJECT,
            body_html=f"<p>Your OTP is: <strong>{otp_code}</strong></p>",
            body_text=f"Your OTP is: {otp_code}",
        )

    @abstractmethod
    async def health_check(self) -> bool:
        """Check service connectivity."""
        pass
