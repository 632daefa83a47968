"""Admin user management: approval queue, direct creation, deactivation."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.v1.auth import get_user_lifecycle, require_admin
from app.schemas.user import (
    RejectedUser,
    UserActionResponse,
    UserCreate,
    UserRead,
    UserRejectResponse,
    UsersListResponse,
)
from app.services.access import Principal
from app.services.users import UserLifecycle

router = APIRouter()

Admin = Annotated[Principal, Depends(require_admin)]
Lifecycle = Annotated[UserLifecycle, Depends(get_user_lifecycle)]


@router.get("", response_model=UsersListResponse)
def list_users(_admin: Admin, lifecycle: Lifecycle) -> UsersListResponse:
    """List all users, newest first."""
    return UsersListResponse(users=[UserRead.model_validate(u) for u in lifecycle.list_users()])


@router.get("/pending", response_model=UsersListResponse)
def list_pending_users(_admin: Admin, lifecycle: Lifecycle) -> UsersListResponse:
    """Registrations awaiting approval."""
    return UsersListResponse(users=[UserRead.model_validate(u) for u in lifecycle.list_pending()])


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, admin: Admin, lifecycle: Lifecycle) -> UserRead:
    """Create an account that is active and verified immediately."""
    user = lifecycle.admin_create(
        username=body.username,
        email=body.email,
        password=body.password,
        acting_admin_id=admin.id,
        full_name=body.full_name,
        role=body.role,
    )
    return UserRead.model_validate(user)


@router.put("/{user_id}/approve", response_model=UserActionResponse)
def approve_user(user_id: int, admin: Admin, lifecycle: Lifecycle) -> UserActionResponse:
    user = lifecycle.approve(user_id, acting_admin_id=admin.id)
    return UserActionResponse(message="User approved successfully", user=UserRead.model_validate(user))


@router.delete("/{user_id}/reject", response_model=UserRejectResponse)
def reject_user(user_id: int, _admin: Admin, lifecycle: Lifecycle) -> UserRejectResponse:
    """Delete a pending registration; approved users must be deactivated instead."""
    ref = lifecycle.reject(user_id)
    return UserRejectResponse(
        message="User registration rejected and deleted successfully",
        user=RejectedUser(id=ref.id, username=ref.username, email=ref.email),
    )


@router.put("/{user_id}/deactivate", response_model=UserActionResponse)
def deactivate_user(user_id: int, admin: Admin, lifecycle: Lifecycle) -> UserActionResponse:
    user = lifecycle.deactivate(user_id, acting_admin_id=admin.id)
    return UserActionResponse(message="User deactivated successfully", user=UserRead.model_validate(user))


@router.put("/{user_id}/reactivate", response_model=UserActionResponse)
def reactivate_user(user_id: int, _admin: Admin, lifecycle: Lifecycle) -> UserActionResponse:
    user = lifecycle.reactivate(user_id)
    return UserActionResponse(message="User reactivated successfully", user=UserRead.model_validate(user))
