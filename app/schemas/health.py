"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness plus the two things the vault cannot work without: its database and its key."""

    status: Literal["ok", "degraded"] = Field(default="ok", description="ok when every check passes")
    service: str = Field(default="credential-vault", description="Service name")
    version: str = Field(description="API version")
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"]
    encryption: Literal["ready", "unavailable"]
