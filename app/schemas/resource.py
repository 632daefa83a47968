"""Request/response schemas for clients and resources."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from app.core.validators import is_valid_email
from app.schemas.common import Pagination

ResourceType = Literal["server", "vm", "database", "saas", "other"]

# Whitespace is stripped before the length check, so "   " is rejected.
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


def _check_email(value: str | None) -> str | None:
    if value is None or value == "":
        return None
    if not is_valid_email(value):
        raise ValueError("Invalid email format")
    return value.lower()


class ClientCreate(BaseModel):
    name: Name
    contact_email: str | None = Field(default=None, max_length=255)
    notes: str | None = None

    @field_validator("contact_email")
    @classmethod
    def validate_contact_email(cls, v: str | None) -> str | None:
        return _check_email(v)


class ClientUpdate(BaseModel):
    """Partial update; only fields present in the body change."""

    name: Name | None = None
    contact_email: str | None = Field(default=None, max_length=255)
    notes: str | None = None

    @field_validator("contact_email")
    @classmethod
    def validate_contact_email(cls, v: str | None) -> str | None:
        return _check_email(v)


class ClientRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    contact_email: str | None = None
    notes: str | None = None
    is_active: bool
    created_by: int | None = None
    created_by_username: str | None = None
    created_at: datetime | None = None


class ClientListResponse(BaseModel):
    data: list[ClientRead]
    pagination: Pagination


class ResourceCreate(BaseModel):
    client_id: int = Field(..., ge=1)
    name: Name
    resource_type: ResourceType = "server"
    hostname: str | None = Field(default=None, max_length=255)
    port: int | None = Field(default=None, ge=1, le=65535)
    notes: str | None = None


class ResourceUpdate(BaseModel):
    """Partial update. A resource cannot move to another client."""

    name: Name | None = None
    resource_type: ResourceType | None = None
    hostname: str | None = Field(default=None, max_length=255)
    port: int | None = Field(default=None, ge=1, le=65535)
    notes: str | None = None


class ResourceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    client_name: str | None = None
    name: str
    resource_type: str
    hostname: str | None = None
    port: int | None = None
    notes: str | None = None
    is_active: bool
    created_by: int | None = None
    created_by_username: str | None = None
    created_at: datetime | None = None


class ResourceListResponse(BaseModel):
    data: list[ResourceRead]
    pagination: Pagination
