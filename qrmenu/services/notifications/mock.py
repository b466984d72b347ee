"""
Log-only Notification Service

Used when no mail delivery is configured. Nothing is sent: OTP codes are
written to the application log so a developer can complete the login.
"""

import random
import uuid
import logging
from typing import Optional

from qrmenu.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)

logger = logging.getLogger(__name__)


class MockNotificationService(BaseNotificationService):
    """Notification service that writes messages to the log."""

    def __init__(self, failure_rate: float = 0.0):
        self.failure_rate = failure_rate
        logger.info(f"MockNotificationService initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    async def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> NotificationResult:
        """Log the email instead of sending it."""
        if self._should_fail():
            logger.warning(f"Mock email failed (simulated) to {to_email}")
            return NotificationResult(
                success=False,
                error_message="Simulated email failure",
                provider="mock"
            )

        message_id = f"email_mock_{uuid.uuid4().hex[:12]}"
        logger.info(f"Mock email to {to_email}: {subject} (ID: {message_id})")

        return NotificationResult(
            success=True,
            message_id=message_id,
            provider="mock"
        )

    async def send_otp(self, to_email: str, otp_code: str) -> NotificationResult:
        """Surface the code through the log once the mock email is accepted."""
        result = await super().send_otp(to_email, otp_code)
        if result.success:
            logger.warning(f"OTP for {to_email}: {otp_code}")
        return result

    async def health_check(self) -> bool:
        """Mock always returns healthy."""
        return True
