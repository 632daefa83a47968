"""Credential endpoints. Only GET /credentials/{id} returns decrypted secrets."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user, require_admin, require_roles
from app.core.container import get_cipher
from app.core.crypto import SecretCipher
from app.core.database import get_db
from app.schemas.auth import MessageResponse
from app.schemas.credential import (
    CredentialCreate,
    CredentialListResponse,
    CredentialRead,
    CredentialSecretRead,
    CredentialUpdate,
)
from app.services import credentials as credential_service
from app.services.access import Principal
from app.services.credentials import CredentialRecordCodec
from app.services.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter()

require_editor = require_roles("admin", "technician")


def get_credential_codec(
    cipher: Annotated[SecretCipher, Depends(get_cipher)],
) -> CredentialRecordCodec:
    return CredentialRecordCodec(cipher)


@router.get("", response_model=CredentialListResponse)
def list_credentials(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[Principal, Depends(get_current_user)],
    resource_id: int | None = Query(default=None, ge=1),
    client_id: int | None = Query(default=None, ge=1),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> CredentialListResponse:
    """List active credentials. Secrets are never included; see has_password and has_ssh_key."""
    return credential_service.list_credentials(
        db, resource_id=resource_id, client_id=client_id, page=page, limit=limit
    )


@router.get("/{credential_id}", response_model=CredentialSecretRead)
def get_credential(
    credential_id: int,
    db: Annotated[Session, Depends(get_db)],
    codec: Annotated[CredentialRecordCodec, Depends(get_credential_codec)],
    _user: Annotated[Principal, Depends(require_editor)],
) -> CredentialSecretRead:
    """Return one credential with its password (and SSH key) decrypted."""
    return credential_service.get_credential(db, codec, credential_id)


@router.post("", response_model=CredentialRead, status_code=status.HTTP_201_CREATED)
def create_credential(
    body: CredentialCreate,
    db: Annotated[Session, Depends(get_db)],
    codec: Annotated[CredentialRecordCodec, Depends(get_credential_codec)],
    user: Annotated[Principal, Depends(require_editor)],
) -> CredentialRead:
    return credential_service.create_credential(db, codec, body, created_by=user.id)


@router.put("/{credential_id}", response_model=CredentialRead)
def update_credential(
    credential_id: int,
    body: CredentialUpdate,
    db: Annotated[Session, Depends(get_db)],
    codec: Annotated[CredentialRecordCodec, Depends(get_credential_codec)],
    _user: Annotated[Principal, Depends(require_editor)],
) -> CredentialRead:
    """Partial update. A new password is re-encrypted under a fresh IV and bumps last_rotated_at."""
    return credential_service.update_credential(db, codec, credential_id, body)


@router.delete("/{credential_id}", response_model=MessageResponse)
def delete_credential(
    credential_id: int,
    db: Annotated[Session, Depends(get_db)],
    _admin: Annotated[Principal, Depends(require_admin)],
) -> MessageResponse:
    credential_service.delete_credential(db, credential_id)
    return MessageResponse(message="Credential deleted successfully")
