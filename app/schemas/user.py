"""Schemas for user records and admin user management."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserRead(BaseModel):
    """Public projection of a user (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    full_name: str | None = None
    role: str
    is_active: bool
    is_verified: bool
    approved_by: int | None = None
    approved_at: datetime | None = None
    created_at: datetime | None = None


class UserCreate(BaseModel):
    """Admin-created account: active and verified immediately."""

    username: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=256)
    full_name: str | None = Field(default=None, max_length=255)
    role: str = Field(default="technician", description="admin, technician or viewer")


class UsersListResponse(BaseModel):
    users: list[UserRead]


class UserActionResponse(BaseModel):
    message: str
    user: UserRead


class RejectedUser(BaseModel):
    id: int
    username: str
    email: str


class UserRejectResponse(BaseModel):
    message: str
    user: RejectedUser
