"""Registration, JWT login and auth dependencies (get_current_user, require_roles, require_admin)."""

from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.container import get_password_hasher, get_token_service
from app.core.database import get_db
from app.core.security import PasswordHasher, TokenService
from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    MessageResponse,
    PasswordChangeRequest,
    RegisterRequest,
    TokenResponse,
)
from app.schemas.user import UserRead
from app.services.access import AccessControl, Principal
from app.services.users import UserLifecycle

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_user_lifecycle(
    db: Annotated[Session, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> UserLifecycle:
    return UserLifecycle(db, hasher, tokens)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> Principal:
    """Dependency: require a valid Bearer JWT for a live, active user. Raises 401 otherwise."""
    token = credentials.credentials if credentials is not None else None
    return AccessControl(tokens).authenticate(db, token)


def require_roles(*roles: str) -> Callable[..., Principal]:
    """Dependency factory: authenticated user whose role is one of `roles`. Raises 403 otherwise."""
    allowed = frozenset(roles)

    def dependency(current_user: Annotated[Principal, Depends(get_current_user)]) -> Principal:
        AccessControl.authorize(current_user, allowed)
        return current_user

    return dependency


require_admin = require_roles("admin")


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    lifecycle: Annotated[UserLifecycle, Depends(get_user_lifecycle)],
) -> UserRead:
    """
    Create a pending account (role technician or viewer).
    The user cannot log in until an admin approves the registration.
    """
    user = lifecycle.register(
        username=body.username,
        email=body.email,
        password=body.password,
        full_name=body.full_name,
        role=body.role,
    )
    return UserRead.model_validate(user)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    lifecycle: Annotated[UserLifecycle, Depends(get_user_lifecycle)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    result = lifecycle.login(body.email, body.password)
    return TokenResponse(
        access_token=result.token,
        token_type="bearer",
        expires_in=result.expires_in,
        user=UserRead.model_validate(result.user),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(_user: Annotated[Principal, Depends(get_current_user)]) -> MessageResponse:
    """Tokens are stateless; logging out means the client discards its token."""
    return MessageResponse(message="Logout successful. Please remove the token from client storage.")


@router.get("/me", response_model=UserRead)
def me(
    current_user: Annotated[Principal, Depends(get_current_user)],
    lifecycle: Annotated[UserLifecycle, Depends(get_user_lifecycle)],
) -> UserRead:
    return UserRead.model_validate(lifecycle.get_user(current_user.id))


@router.get("/verify", response_model=CurrentUser)
def verify(current_user: Annotated[Principal, Depends(get_current_user)]) -> CurrentUser:
    """Check that the presented token is still valid for an active account."""
    return CurrentUser(
        id=current_user.id,
        username=current_user.username,
        email=current_user.email,
        role=current_user.role,
    )


@router.put("/password", response_model=UserRead)
def change_password(
    body: PasswordChangeRequest,
    current_user: Annotated[Principal, Depends(get_current_user)],
    lifecycle: Annotated[UserLifecycle, Depends(get_user_lifecycle)],
) -> UserRead:
    user = lifecycle.change_password(current_user.id, body.current_password, body.new_password)
    return UserRead.model_validate(user)
