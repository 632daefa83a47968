"""Public health check: database reachability and key material readiness."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.container import get_cipher
from app.core.database import check_db_connected, get_db
from app.core.errors import ConfigurationError
from app.schemas.health import HealthResponse

API_VERSION = "0.1.0"

router = APIRouter()


def _encryption_status() -> str:
    try:
        get_cipher()
    except ConfigurationError:
        return "unavailable"
    return "ready"


@router.get("/", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """Never exposes configuration values; only whether each dependency is usable."""
    database = "connected" if check_db_connected(db) else "disconnected"
    encryption = _encryption_status()
    healthy = database == "connected" and encryption == "ready"
    return HealthResponse(
        status="ok" if healthy else "degraded",
        version=API_VERSION,
        environment=settings.APP_ENV,
        database=database,
        encryption=encryption,
    )
