"""Pydantic request/response schemas."""

from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    MessageResponse,
    PasswordChangeRequest,
    RegisterRequest,
    TokenResponse,
)
from app.schemas.common import Pagination
from app.schemas.credential import (
    CredentialCreate,
    CredentialListResponse,
    CredentialRead,
    CredentialSecretRead,
    CredentialUpdate,
)
from app.schemas.health import HealthResponse
from app.schemas.resource import (
    ClientCreate,
    ClientListResponse,
    ClientRead,
    ClientUpdate,
    ResourceCreate,
    ResourceListResponse,
    ResourceRead,
    ResourceUpdate,
)
from app.schemas.user import UserCreate, UserRead, UsersListResponse

__all__ = [
    "ClientCreate",
    "ClientListResponse",
    "ClientRead",
    "ClientUpdate",
    "CredentialCreate",
    "CredentialListResponse",
    "CredentialRead",
    "CredentialSecretRead",
    "CredentialUpdate",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "Pagination",
    "PasswordChangeRequest",
    "RegisterRequest",
    "ResourceCreate",
    "ResourceListResponse",
    "ResourceRead",
    "ResourceUpdate",
    "TokenResponse",
    "UserCreate",
    "UserRead",
    "UsersListResponse",
]
