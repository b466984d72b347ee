"""
Authorization Gate

Resolves the caller from the session cookie and answers ownership
questions for restaurant-scoped mutations.
"""

from typing import Mapping, Optional

from qrmenu.services.auth.base import UNAUTHORIZED_MESSAGE, Identity
from qrmenu.services.auth.session import SessionIssuer
from qrmenu.services.results import ErrorKind, ServiceResult


class AuthorizationGate:
    def __init__(self, sessions: SessionIssuer):
        self.sessions = sessions

    def resolve(self, cookies: Mapping[str, str]) -> ServiceResult:
        """
        Resolve the identity carried by the request's session cookie.

        Returns:
            ServiceResult: ok with an Identity, or UNAUTHORIZED when the
            cookie is missing, tampered with or expired
        """
        token = cookies.get(self.sessions.cookie_name)
        if not token:
            return ServiceResult.fail(ErrorKind.UNAUTHORIZED, UNAUTHORIZED_MESSAGE)

        identity = self.sessions.decode(token)
        if identity is None:
            return ServiceResult.fail(ErrorKind.UNAUTHORIZED, UNAUTHORIZED_MESSAGE)
        return ServiceResult.ok(identity)

    @staticmethod
    def ensure_owner(owner_id: Optional[str], identity: Identity) -> ServiceResult:
        """
        Allow the call only if ``identity`` owns the resource.

        A missing resource (``owner_id`` None) fails the same way as a
        foreign one.
        """
        if owner_id is None or owner_id != identity.id:
            return ServiceResult.fail(ErrorKind.UNAUTHORIZED, UNAUTHORIZED_MESSAGE)
        return ServiceResult.ok()
