"""
Session Issuer

Mints stateless JWT session tokens and binds them to responses as an
HTTP-only cookie. Nothing is stored server-side.
"""

import logging
from datetime import timedelta
from typing import Optional

from fastapi import Response
from jose import ExpiredSignatureError, JWTError, jwt

from qrmenu.core.config import ConfigurationError, Settings
from qrmenu.services.auth.base import Clock, Identity, utc_now

logger = logging.getLogger(__name__)


class SessionIssuer:
    """Signs, verifies and attaches session tokens."""

    def __init__(self, settings: Settings, clock: Clock = utc_now):
        if not settings.jwt_secret:
            raise ConfigurationError("Cannot sign sessions without JWT_SECRET")

        self.secret = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.ttl = timedelta(days=settings.session_ttl_days)
        self.cookie_name = settings.session_cookie_name
        self.max_age = settings.session_max_age_seconds
        self.secure = settings.secure_cookies
        self.clock = clock

    def issue_session(self, identity: Identity) -> str:
        """Return a signed token embedding id, email and expiry."""
        issued_at = self.clock()
        claims = {
            "id": identity.id,
            "email": identity.email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.ttl).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def attach(self, response: Response, token: str) -> None:
        """Set the session cookie on an outbound response."""
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=self.max_age,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite="strict",
        )

    def decode(self, token: str) -> Optional[Identity]:
        """
        Verify a token's signature and expiry.

        Returns:
            The embedded identity, or None if the token is not acceptable
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require_exp": True},
            )
        except ExpiredSignatureError:
            logger.debug("Rejected expired session token")
            return None
        except JWTError as e:
            logger.debug(f"Rejected session token: {e}")
            return None

        user_id = claims.get("id")
        email = claims.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str):
            return None
        return Identity(id=user_id, email=email)
