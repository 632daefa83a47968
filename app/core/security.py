"""Password hashing and JWT creation/verification for authentication."""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.errors import ConfigurationError, ExpiredTokenError, InvalidTokenError

logger = logging.getLogger(__name__)

# Bcrypt cost (rounds) when none is configured.
DEFAULT_BCRYPT_ROUNDS = 10
BCRYPT_MAX_BYTES = 72

DEFAULT_TOKEN_EXPIRE_MINUTES = 60 * 24

# Recommended minimum JWT secret length; shorter secrets only produce a warning.
JWT_SECRET_MIN_LEN = 32

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


class PasswordHasher:
    """Hash and verify user passwords with bcrypt at a configurable cost."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        if rounds < 4 or rounds > 31:
            raise ConfigurationError("BCRYPT_ROUNDS must be between 4 and 31")
        self.rounds = rounds
        self._dummy_hash: str | None = None

    @staticmethod
    def _encode(password: str) -> bytes:
        # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

    def hash(self, password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        return bcrypt.hashpw(self._encode(password), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """Verify a plain password against a stored hash."""
        try:
            return bcrypt.checkpw(self._encode(password), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, password: str) -> bool:
        """Spend the same bcrypt work as a real check, for lookups that found no user."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash(secrets.token_urlsafe(16))
        self.verify(password, self._dummy_hash)
        return False

    def needs_rehash(self, hashed: str) -> bool:
        """True when the stored hash was made with a lower cost than the configured one."""
        try:
            stored_rounds = int(hashed.split("$")[2])
        except (IndexError, ValueError):
            return True
        return stored_rounds < self.rounds


@dataclass(frozen=True)
class TokenClaims:
    """Identity and role to embed in a session token."""

    user_id: int
    username: str
    email: str
    role: str


@dataclass(frozen=True)
class SessionClaims:
    """Verified payload of a session token."""

    user_id: int
    username: str
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """
    Issue and verify stateless, signed session tokens (JWT).

    There is no revocation list: logout means the client discards its token.
    Expiry is checked against the injected clock, not the wall clock, so tests
    can move time forward.
    """

    def __init__(
        self,
        secret: str | None,
        algorithm: str = "HS256",
        expire_minutes: int = DEFAULT_TOKEN_EXPIRE_MINUTES,
        clock: Clock | None = None,
    ) -> None:
        if not secret or not secret.strip():
            raise ConfigurationError("JWT_SECRET is not configured")
        if len(secret.encode("utf-8")) < JWT_SECRET_MIN_LEN:
            logger.warning(
                "JWT_SECRET is shorter than %s bytes; tokens are easier to forge.",
                JWT_SECRET_MIN_LEN,
            )
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(minutes=expire_minutes)
        self._clock = clock or utcnow

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, claims: TokenClaims) -> str:
        """Create a JWT with sub (user id), username, email, role, iat and exp."""
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": str(claims.user_id),
            "username": claims.username,
            "email": claims.email,
            "role": claims.role,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> SessionClaims:
        """
        Check signature, structure and expiry; return the claims.
        Raises ExpiredTokenError or InvalidTokenError.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "require": ["sub", "iat", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError("Invalid token") from exc

        try:
            user_id = int(payload["sub"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC)
            username = str(payload["username"])
            email = str(payload["email"])
            role = str(payload["role"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError("Invalid token payload") from exc

        if self._clock() >= expires_at:
            raise ExpiredTokenError("Token has expired")

        return SessionClaims(
            user_id=user_id,
            username=username,
            email=email,
            role=role,
            issued_at=issued_at,
            expires_at=expires_at,
        )
