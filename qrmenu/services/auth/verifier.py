"""
OTP Verifier

Consumes a user's pending code. The match check and the clear are one
conditional UPDATE, so of two concurrent requests carrying the same code
only the first sees the row still matching.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from qrmenu.models import User
from qrmenu.services.auth.base import (
    INVALID_OTP_MESSAGE,
    Clock,
    Identity,
    utc_now,
)
from qrmenu.services.results import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)


class OtpVerifier:
    """Validates submitted codes against the stored challenge."""

    def __init__(self, session: AsyncSession, clock: Clock = utc_now):
        self.session = session
        self.clock = clock

    async def verify(self, email: str, submitted_code: str) -> ServiceResult:
        """
        Check ``submitted_code`` for ``email`` and clear it on success.

        Every failure (unknown email, no pending code, mismatch, expired)
        yields the same UNAUTHORIZED result.

        Returns:
            ServiceResult: ok with an Identity, or UNAUTHORIZED
        """
        now = self.clock()
        stmt = (
            update(User)
            .where(
                User.email == email,
                User.otp_code.is_not(None),
                User.otp_code == submitted_code,
                User.otp_expires_at.is_not(None),
                User.otp_expires_at > now,
            )
            .values(otp_code=None, otp_expires_at=None)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)

        if result.rowcount != 1:
            await self.session.rollback()
            logger.info(f"OTP verification failed for {email}")
            return ServiceResult.fail(ErrorKind.UNAUTHORIZED, INVALID_OTP_MESSAGE)

        row = await self.session.execute(
            select(User.id, User.name, User.email).where(User.email == email)
        )
        user_id, name, user_email = row.one()
        await self.session.commit()

        logger.info(f"OTP verified for {email}")
        return ServiceResult.ok(Identity(id=user_id, email=user_email, name=name))
