"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, Field

from app.schemas.user import UserRead


class RegisterRequest(BaseModel):
    """Self-registration. The account stays pending until an admin approves it."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    email: str = Field(..., min_length=1, max_length=255, description="Email address")
    password: str = Field(..., min_length=1, max_length=256, description="Password")
    full_name: str | None = Field(default=None, max_length=255)
    role: str = Field(default="technician", description="technician or viewer")


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=255, description="Email address")
    password: str = Field(..., min_length=1, max_length=256, description="Password")


class TokenResponse(BaseModel):
    """JWT access token and the public user record returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserRead


class CurrentUser(BaseModel):
    """Authenticated principal (id, username, email, role) for dependency injection."""

    id: int
    username: str
    email: str
    role: str


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=256)
    new_password: str = Field(..., min_length=1, max_length=256)


class MessageResponse(BaseModel):
    message: str
