"""Request/response schemas for credential endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import Pagination

CredentialType = Literal["ssh", "database", "admin", "api", "ftp", "other"]


class CredentialCreate(BaseModel):
    """New credential; the password (and SSH key, if any) is encrypted before storage."""

    resource_id: int = Field(..., ge=1)
    credential_type: CredentialType
    username: str | None = Field(default=None, max_length=255)
    password: str = Field(..., min_length=1, max_length=4096)
    ssh_key: str | None = Field(default=None, max_length=16384)
    notes: str | None = None
    expires_at: datetime | None = None


class CredentialUpdate(BaseModel):
    """Partial update. Sending password rotates it; sending ssh_key=null removes the key."""

    credential_type: CredentialType | None = None
    username: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, min_length=1, max_length=4096)
    ssh_key: str | None = Field(default=None, max_length=16384)
    notes: str | None = None
    expires_at: datetime | None = None


class CredentialRead(BaseModel):
    """Credential metadata without any secret material (list and write responses)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    resource_id: int
    resource_name: str | None = None
    client_id: int | None = None
    client_name: str | None = None
    credential_type: str
    username: str | None = None
    notes: str | None = None
    expires_at: datetime | None = None
    last_rotated_at: datetime
    is_active: bool
    created_by: int | None = None
    created_by_username: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    has_password: bool
    has_ssh_key: bool


class CredentialSecretRead(CredentialRead):
    """Single-credential view with decrypted secrets."""

    password: str
    ssh_key: str | None = None


class CredentialListResponse(BaseModel):
    data: list[CredentialRead]
    pagination: Pagination
