"""
Notification Service Factory

Returns the SendGrid service when mail delivery is configured and the
log-only service otherwise.
"""

import logging

from qrmenu.core.config import Settings
from qrmenu.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)
from qrmenu.services.notifications.mock import MockNotificationService
from qrmenu.services.notifications.real import RealNotificationService

logger = logging.getLogger(__name__)


def get_notification_service(settings: Settings) -> BaseNotificationService:
    """Build the notification service for the given settings."""
    if settings.mail_configured:
        logger.info(f"Notification Service: Using RealNotificationService ({settings.env_mode.value} mode)")
        return RealNotificationService(settings)

    logger.info("Notification Service: Using MockNotificationService (mail delivery not configured)")
    return MockNotificationService()


__all__ = [
    "get_notification_service",
    "BaseNotificationService",
    "NotificationResult",
    "MockNotificationService",
    "RealNotificationService",
]
