"""
Service Result Types

Services report expected failures by returning a ServiceResult with an
ErrorKind instead of raising; the HTTP layer maps kinds to status codes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Machine-readable failure categories."""
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    INTERNAL = "INTERNAL"


@dataclass
class ServiceResult:
    """
    Standardized result from a service operation.

    Attributes:
        success: Whether the operation succeeded
        value: Operation payload on success
        error_kind: Failure category when success is False
        message: Human-readable outcome
    """
    success: bool
    value: Optional[Any] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, value: Any = None, message: Optional[str] = None) -> "ServiceResult":
        return cls(success=True, value=value, message=message)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "ServiceResult":
        return cls(success=False, error_kind=kind, message=message)

    def to_dict(self) -> dict:
        """Convert a failure to the JSON error body."""
        return {
            "kind": self.error_kind.value if self.error_kind else None,
            "message": self.message,
        }
