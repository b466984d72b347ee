"""
Request Dependencies

Assembles the per-request context (database session plus the caller's
identity, when known) from the application-owned collaborators stored
on ``app.state``.
"""

from dataclasses import dataclass
from typing import NoReturn, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from qrmenu.core.config import Settings
from qrmenu.database import get_db
from qrmenu.services.auth import AuthorizationGate, Identity, SessionIssuer
from qrmenu.services.notifications import BaseNotificationService
from qrmenu.services.results import ErrorKind, ServiceResult


STATUS_BY_KIND = {
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@dataclass
class RequestContext:
    """Everything a handler needs about the current request."""
    db: AsyncSession
    identity: Optional[Identity] = None


def raise_for_result(result: ServiceResult) -> NoReturn:
    """Convert a failed service result into an HTTP error."""
    raise HTTPException(
        status_code=STATUS_BY_KIND.get(result.error_kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=result.to_dict(),
    )


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_notifier(request: Request) -> BaseNotificationService:
    return request.app.state.notifier


def get_session_issuer(request: Request) -> SessionIssuer:
    return request.app.state.session_issuer


def get_gate(sessions: SessionIssuer = Depends(get_session_issuer)) -> AuthorizationGate:
    return AuthorizationGate(sessions)


async def get_request_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
) -> RequestContext:
    """Build the context for any request; identity is None for anonymous callers."""
    resolved = gate.resolve(request.cookies)
    return RequestContext(db=db, identity=resolved.value if resolved.success else None)


async def require_auth(
    request: Request,
    db: AsyncSession = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
) -> RequestContext:
    """Build the context for a request that must come from a signed-in user."""
    resolved = gate.resolve(request.cookies)
    if not resolved.success:
        raise_for_result(resolved)
    return RequestContext(db=db, identity=resolved.value)
