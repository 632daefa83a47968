"""
Client and resource registry: the records credentials are attached to.

Deletion is soft. A resource is visible only while both it and its client are
active; anything else reads as not found.
"""

import logging

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.models import Client, Resource, User
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
from app.services import pagination
from app.services.pagination import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)


def _reject_nulls(changes: dict, required: tuple[str, ...]) -> None:
    if not changes:
        raise ValidationError("No fields to update")
    for field in required:
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null")


# Clients


def _client_query() -> Select:
    return (
        select(Client, User.username)
        .outerjoin(User, Client.created_by == User.id)
        .where(Client.is_active.is_(True))
    )


def _client_read(row) -> ClientRead:
    client, created_by_username = row
    read = ClientRead.model_validate(client)
    read.created_by_username = created_by_username
    return read


def _load_client_row(db: Session, client_id: int):
    row = db.execute(_client_query().where(Client.id == client_id)).first()
    if row is None:
        raise NotFoundError("Client not found")
    return row


def list_clients(db: Session, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> ClientListResponse:
    page, limit = pagination.clamp(page, limit)
    stmt = _client_query()
    total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    rows = db.execute(
        stmt.order_by(Client.name, Client.id).limit(limit).offset((page - 1) * limit)
    ).all()
    return ClientListResponse(
        data=[_client_read(row) for row in rows],
        pagination=pagination.build(page, limit, total),
    )


def get_client(db: Session, client_id: int) -> ClientRead:
    return _client_read(_load_client_row(db, client_id))


def create_client(db: Session, data: ClientCreate, created_by: int | None = None) -> ClientRead:
    client = Client(
        name=data.name,
        contact_email=data.contact_email,
        notes=data.notes,
        is_active=True,
        created_by=created_by,
    )
    db.add(client)
    db.commit()
    logger.info("Created client id=%s", client.id)
    return get_client(db, client.id)


def update_client(db: Session, client_id: int, data: ClientUpdate) -> ClientRead:
    changes = data.model_dump(exclude_unset=True)
    _reject_nulls(changes, ("name",))
    client = _load_client_row(db, client_id)[0]
    for field, value in changes.items():
        setattr(client, field, value)
    db.commit()
    logger.info("Updated client id=%s fields=%s", client_id, sorted(changes))
    return get_client(db, client_id)


def delete_client(db: Session, client_id: int) -> None:
    """Soft delete. The client's resources and credentials become unreachable with it."""
    result = db.execute(
        update(Client)
        .where(Client.id == client_id, Client.is_active.is_(True))
        .values(is_active=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError("Client not found")
    db.commit()
    logger.info("Soft-deleted client id=%s", client_id)


# Resources


def _resource_query() -> Select:
    return (
        select(Resource, Client.name, User.username)
        .join(Client, Resource.client_id == Client.id)
        .outerjoin(User, Resource.created_by == User.id)
        .where(Resource.is_active.is_(True), Client.is_active.is_(True))
    )


def _resource_read(row) -> ResourceRead:
    resource, client_name, created_by_username = row
    read = ResourceRead.model_validate(resource)
    read.client_name = client_name
    read.created_by_username = created_by_username
    return read


def _load_resource_row(db: Session, resource_id: int):
    row = db.execute(_resource_query().where(Resource.id == resource_id)).first()
    if row is None:
        raise NotFoundError("Resource not found")
    return row


def active_resource(db: Session, resource_id: int) -> Resource:
    """The resource row, if it and its client are both active."""
    return _load_resource_row(db, resource_id)[0]


def list_resources(
    db: Session,
    client_id: int | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> ResourceListResponse:
    page, limit = pagination.clamp(page, limit)
    stmt = _resource_query()
    if client_id is not None:
        stmt = stmt.where(Resource.client_id == client_id)
    total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    rows = db.execute(
        stmt.order_by(Resource.name, Resource.id).limit(limit).offset((page - 1) * limit)
    ).all()
    return ResourceListResponse(
        data=[_resource_read(row) for row in rows],
        pagination=pagination.build(page, limit, total),
    )


def get_resource(db: Session, resource_id: int) -> ResourceRead:
    return _resource_read(_load_resource_row(db, resource_id))


def create_resource(db: Session, data: ResourceCreate, created_by: int | None = None) -> ResourceRead:
    client = _load_client_row(db, data.client_id)[0]
    resource = Resource(
        client_id=client.id,
        name=data.name,
        resource_type=data.resource_type,
        hostname=data.hostname,
        port=data.port,
        notes=data.notes,
        is_active=True,
        created_by=created_by,
    )
    db.add(resource)
    db.commit()
    logger.info("Created resource id=%s for client id=%s", resource.id, client.id)
    return get_resource(db, resource.id)


def update_resource(db: Session, resource_id: int, data: ResourceUpdate) -> ResourceRead:
    changes = data.model_dump(exclude_unset=True)
    _reject_nulls(changes, ("name", "resource_type"))
    resource = active_resource(db, resource_id)
    for field, value in changes.items():
        setattr(resource, field, value)
    db.commit()
    logger.info("Updated resource id=%s fields=%s", resource_id, sorted(changes))
    return get_resource(db, resource_id)


def delete_resource(db: Session, resource_id: int) -> None:
    """Soft delete. Credentials on the resource drop out of every listing."""
    active_resource(db, resource_id)
    result = db.execute(
        update(Resource)
        .where(Resource.id == resource_id, Resource.is_active.is_(True))
        .values(is_active=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError("Resource not found")
    db.commit()
    logger.info("Soft-deleted resource id=%s", resource_id)
