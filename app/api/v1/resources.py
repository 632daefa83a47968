"""Client and resource endpoints (the records credentials belong to)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user, require_admin, require_roles
from app.core.database import get_db
from app.schemas.auth import MessageResponse
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
from app.services import resources as resource_service
from app.services.access import Principal
from app.services.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

clients_router = APIRouter()
resources_router = APIRouter()

require_editor = require_roles("admin", "technician")

Db = Annotated[Session, Depends(get_db)]
AnyUser = Annotated[Principal, Depends(get_current_user)]
Editor = Annotated[Principal, Depends(require_editor)]
Admin = Annotated[Principal, Depends(require_admin)]


@clients_router.get("", response_model=ClientListResponse)
def list_clients(
    db: Db,
    _user: AnyUser,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> ClientListResponse:
    return resource_service.list_clients(db, page=page, limit=limit)


@clients_router.get("/{client_id}", response_model=ClientRead)
def get_client(client_id: int, db: Db, _user: AnyUser) -> ClientRead:
    return resource_service.get_client(db, client_id)


@clients_router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
def create_client(body: ClientCreate, db: Db, user: Editor) -> ClientRead:
    return resource_service.create_client(db, body, created_by=user.id)


@clients_router.put("/{client_id}", response_model=ClientRead)
def update_client(client_id: int, body: ClientUpdate, db: Db, _user: Editor) -> ClientRead:
    return resource_service.update_client(db, client_id, body)


@clients_router.delete("/{client_id}", response_model=MessageResponse)
def delete_client(client_id: int, db: Db, _admin: Admin) -> MessageResponse:
    """Soft delete; the client's resources and credentials disappear from every listing."""
    resource_service.delete_client(db, client_id)
    return MessageResponse(message="Client deleted successfully")


@resources_router.get("", response_model=ResourceListResponse)
def list_resources(
    db: Db,
    _user: AnyUser,
    client_id: int | None = Query(default=None, ge=1),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> ResourceListResponse:
    return resource_service.list_resources(db, client_id=client_id, page=page, limit=limit)


@resources_router.get("/{resource_id}", response_model=ResourceRead)
def get_resource(resource_id: int, db: Db, _user: AnyUser) -> ResourceRead:
    return resource_service.get_resource(db, resource_id)


@resources_router.post("", response_model=ResourceRead, status_code=status.HTTP_201_CREATED)
def create_resource(body: ResourceCreate, db: Db, user: Editor) -> ResourceRead:
    return resource_service.create_resource(db, body, created_by=user.id)


@resources_router.put("/{resource_id}", response_model=ResourceRead)
def update_resource(resource_id: int, body: ResourceUpdate, db: Db, _user: Editor) -> ResourceRead:
    return resource_service.update_resource(db, resource_id, body)


@resources_router.delete("/{resource_id}", response_model=MessageResponse)
def delete_resource(resource_id: int, db: Db, _admin: Admin) -> MessageResponse:
    """Soft delete; credentials on the resource drop out of every listing."""
    resource_service.delete_resource(db, resource_id)
    return MessageResponse(message="Resource deleted successfully")
