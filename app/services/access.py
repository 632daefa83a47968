"""Access control: resolve a session token to a live principal and enforce role membership."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, TokenError, UnauthenticatedError
from app.core.security import TokenService
from app.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Authenticated identity: a valid token plus the user's current row."""

    id: int
    username: str
    email: str
    role: str


class AccessControl:
    """
    Token claims are a point-in-time snapshot. authenticate() re-reads the user
    on every call, so deleted, deactivated or re-roled accounts take effect
    immediately even while their old tokens are unexpired.
    """

    def __init__(self, tokens: TokenService) -> None:
        self._tokens = tokens

    def authenticate(self, db: Session, token: str | None) -> Principal:
        if not token:
            raise UnauthenticatedError("Not authenticated")
        try:
            claims = self._tokens.verify(token)
        except TokenError as exc:
            raise UnauthenticatedError(exc.message) from exc

        user = db.get(User, claims.user_id)
        if user is None:
            raise UnauthenticatedError("User not found")
        if not user.is_active or not user.is_verified:
            logger.info("Rejected token for inactive user id=%s", user.id)
            raise UnauthenticatedError("User account is inactive")
        return Principal(id=user.id, username=user.username, email=user.email, role=user.role)

    @staticmethod
    def authorize(principal: Principal, allowed_roles: Iterable[str]) -> None:
        if principal.role not in set(allowed_roles):
            raise ForbiddenError("Insufficient permissions")
