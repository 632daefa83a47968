"""Immutable security components built once from Settings and shared across requests."""

from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from app.core.crypto import SecretCipher
from app.core.security import PasswordHasher, TokenService

if TYPE_CHECKING:
    from app.core.config import Settings


@dataclass(frozen=True)
class Components:
    cipher: SecretCipher
    hasher: PasswordHasher
    tokens: TokenService


def build_components(settings: "Settings") -> Components:
    """Construct the components; raises ConfigurationError on missing or malformed key material."""
    encryption_key = settings.ENCRYPTION_KEY.get_secret_value() if settings.ENCRYPTION_KEY else None
    jwt_secret = settings.JWT_SECRET.get_secret_value() if settings.JWT_SECRET else None
    return Components(
        cipher=SecretCipher(encryption_key),
        hasher=PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        tokens=TokenService(
            jwt_secret,
            algorithm=settings.JWT_ALGORITHM,
            expire_minutes=settings.JWT_EXPIRE_MINUTES,
        ),
    )


@lru_cache
def get_components() -> Components:
    """Return the process-wide components (safe to call from dependencies)."""
    from app.core.config import get_settings

    return build_components(get_settings())


def get_cipher() -> SecretCipher:
    return get_components().cipher


def get_password_hasher() -> PasswordHasher:
    return get_components().hasher


def get_token_service() -> TokenService:
    return get_components().tokens
