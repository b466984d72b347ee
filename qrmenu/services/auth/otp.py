"""
OTP Issuer

Creates or refreshes a user's one-time login code and hands it to the
notification service. Signup and login share the same generation rule;
a new code always overwrites the previous one.
"""

import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from qrmenu.core.config import Settings
from qrmenu.models import User
from qrmenu.services.auth.base import Clock, OtpMode, utc_now
from qrmenu.services.notifications import BaseNotificationService
from qrmenu.services.results import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999

CONFLICT_MESSAGE = "Email already in use. Please use a non-existing email."
NOT_FOUND_MESSAGE = "User not found. Please sign up first."
SENT_MESSAGE = "OTP sent to email"
INTERNAL_MESSAGES = {
    OtpMode.SIGNUP: "Failed to sign up. Please try again later.",
    OtpMode.LOGIN: "Failed to login. Please check your connection or try again later.",
}


def generate_otp() -> str:
    """Return a 6-digit code drawn uniformly from [100000, 999999]."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


class OtpIssuer:
    """Issues OTP challenges for signup and login."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: BaseNotificationService,
        settings: Settings,
        clock: Clock = utc_now,
    ):
        self.session = session
        self.notifier = notifier
        self.ttl = timedelta(minutes=settings.otp_ttl_minutes)
        self.clock = clock

    async def signup(self, email: str, name: str, country: str) -> ServiceResult:
        return await self.issue(email, OtpMode.SIGNUP, name=name, country=country)

    async def login(self, email: str) -> ServiceResult:
        return await self.issue(email, OtpMode.LOGIN)

    async def issue(
        self,
        email: str,
        mode: OtpMode,
        name: Optional[str] = None,
        country: Optional[str] = None,
    ) -> ServiceResult:
        """
        Store a fresh code for ``email`` and dispatch it.

        The write and the dispatch share one transaction: if delivery fails
        the new code is rolled back and the user's previous state is kept.

        Returns:
            ServiceResult: ok, or CONFLICT / NOT_FOUND / INTERNAL
        """
        try:
            result = await self.session.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()

            if mode == OtpMode.SIGNUP:
                if user is not None:
                    return ServiceResult.fail(ErrorKind.CONFLICT, CONFLICT_MESSAGE)
                user = User(email=email, name=name, country=country)
                self.session.add(user)
            elif user is None:
                return ServiceResult.fail(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)

            code = generate_otp()
            user.otp_code = code
            user.otp_expires_at = self.clock() + self.ttl
            await self.session.flush()

            delivery = await self.notifier.send_otp(email, code)
            if not delivery.success:
                await self.session.rollback()
                logger.error(
                    f"OTP delivery to {email} failed via {delivery.provider}: {delivery.error_message}"
                )
                return ServiceResult.fail(ErrorKind.INTERNAL, INTERNAL_MESSAGES[mode])

            await self.session.commit()

        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            await self.session.rollback()
            if mode == OtpMode.SIGNUP:
                return ServiceResult.fail(ErrorKind.CONFLICT, CONFLICT_MESSAGE)
            logger.exception(f"{mode.value} error for {email}")
            return ServiceResult.fail(ErrorKind.INTERNAL, INTERNAL_MESSAGES[mode])
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception(f"{mode.value} error for {email}")
            return ServiceResult.fail(ErrorKind.INTERNAL, INTERNAL_MESSAGES[mode])

        logger.info(f"OTP issued for {email} ({mode.value}) via {self.notifier.provider_name}")
        return ServiceResult.ok(message=SENT_MESSAGE)
