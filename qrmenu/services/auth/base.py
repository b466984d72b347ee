"""
Shared authentication types.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OtpMode(str, Enum):
    """Why a code is being issued."""
    SIGNUP = "signup"
    LOGIN = "login"


@dataclass(frozen=True)
class Identity:
    """
    A known caller.

    ``name`` is only present right after OTP verification; identities
    resolved from a session token carry id and email alone.
    """
    id: str
    email: str
    name: Optional[str] = None


UNAUTHORIZED_MESSAGE = "Unauthorized"
INVALID_OTP_MESSAGE = "Invalid or expired OTP"
