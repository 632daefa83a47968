"""
Credential storage: seal secrets on write, open them only on single-credential reads.

The list path never decrypts; it reports has_password/has_ssh_key instead so
that bulk reads cannot leak plaintext.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session

from app.core.crypto import SecretCipher
from app.core.errors import DecryptionFailedError, NotFoundError, ValidationError
from app.core.security import Clock, utcnow
from app.models import Client, Credential, Resource, User
from app.schemas.credential import (
    CredentialCreate,
    CredentialListResponse,
    CredentialRead,
    CredentialSecretRead,
    CredentialUpdate,
)
from app.services import pagination
from app.services.pagination import DEFAULT_PAGE_SIZE
from app.services.resources import active_resource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SealedSecret:
    encrypted_password: str
    iv: str


def _as_utc(value: datetime) -> datetime:
    # Some backends (SQLite) hand back naive datetimes for timezone-aware columns.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class CredentialRecordCodec:
    """Turn plaintext credential secrets into stored ciphertext/IV pairs and back."""

    def __init__(self, cipher: SecretCipher, clock: Clock | None = None) -> None:
        self._cipher = cipher
        self._clock = clock or utcnow

    def seal(self, plaintext: str) -> SealedSecret:
        encrypted = self._cipher.encrypt(plaintext)
        return SealedSecret(encrypted_password=encrypted.ciphertext, iv=encrypted.iv)

    def open(self, encrypted_password: str, iv: str) -> str:
        return self._cipher.decrypt(encrypted_password, iv)

    def rotate(self, credential: Credential, new_password: str) -> None:
        """Replace the password pair under a fresh IV and move last_rotated_at forward."""
        sealed = self.seal(new_password)
        credential.encrypted_password = sealed.encrypted_password
        credential.encryption_iv = sealed.iv
        credential.last_rotated_at = self.next_rotation_time(credential.last_rotated_at)

    def set_ssh_key(self, credential: Credential, ssh_key: str | None) -> None:
        if not ssh_key:
            credential.encrypted_ssh_key = None
            credential.ssh_key_iv = None
            return
        sealed = self.seal(ssh_key)
        credential.encrypted_ssh_key = sealed.encrypted_password
        credential.ssh_key_iv = sealed.iv

    def next_rotation_time(self, previous: datetime | None = None) -> datetime:
        """Current time, nudged past `previous` so rotation timestamps strictly increase."""
        now = self._clock()
        if previous is not None and now <= _as_utc(previous):
            now = _as_utc(previous) + timedelta(microseconds=1)
        return now


def _base_query() -> Select:
    return (
        select(Credential, Resource.name, Resource.client_id, Client.name, User.username)
        .join(Resource, Credential.resource_id == Resource.id)
        .join(Client, Resource.client_id == Client.id)
        .outerjoin(User, Credential.created_by == User.id)
        .where(
            Credential.is_active.is_(True),
            Resource.is_active.is_(True),
            Client.is_active.is_(True),
        )
    )


def _to_read(row) -> CredentialRead:
    credential, resource_name, client_id, client_name, created_by_username = row
    return CredentialRead(
        id=credential.id,
        resource_id=credential.resource_id,
        resource_name=resource_name,
        client_id=client_id,
        client_name=client_name,
        credential_type=credential.credential_type,
        username=credential.username,
        notes=credential.notes,
        expires_at=credential.expires_at,
        last_rotated_at=credential.last_rotated_at,
        is_active=credential.is_active,
        created_by=credential.created_by,
        created_by_username=created_by_username,
        created_at=credential.created_at,
        updated_at=credential.updated_at,
        has_password=bool(credential.encrypted_password),
        has_ssh_key=bool(credential.encrypted_ssh_key),
    )


def _load_row(db: Session, credential_id: int):
    row = db.execute(_base_query().where(Credential.id == credential_id)).first()
    if row is None:
        raise NotFoundError("Credential not found")
    return row


def list_credentials(
    db: Session,
    *,
    resource_id: int | None = None,
    client_id: int | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> CredentialListResponse:
    """Active credentials, newest first. Secrets are reported as presence flags only."""
    page, limit = pagination.clamp(page, limit)

    stmt = _base_query()
    if resource_id is not None:
        stmt = stmt.where(Credential.resource_id == resource_id)
    if client_id is not None:
        stmt = stmt.where(Resource.client_id == client_id)

    total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    rows = db.execute(
        stmt.order_by(Credential.created_at.desc(), Credential.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    ).all()
    return CredentialListResponse(
        data=[_to_read(row) for row in rows],
        pagination=pagination.build(page, limit, total),
    )


def get_credential(db: Session, codec: CredentialRecordCodec, credential_id: int) -> CredentialSecretRead:
    """The only read path that decrypts. Raises DecryptionFailedError on a bad key or corrupted row."""
    row = _load_row(db, credential_id)
    credential = row[0]
    try:
        password = codec.open(credential.encrypted_password, credential.encryption_iv)
        ssh_key = (
            codec.open(credential.encrypted_ssh_key, credential.ssh_key_iv)
            if credential.encrypted_ssh_key
            else None
        )
    except DecryptionFailedError as exc:
        logger.error("Failed to decrypt credential id=%s (%s)", credential.id, type(exc).__name__)
        raise
    summary = _to_read(row)
    return CredentialSecretRead(**summary.model_dump(), password=password, ssh_key=ssh_key)


def create_credential(
    db: Session,
    codec: CredentialRecordCodec,
    data: CredentialCreate,
    created_by: int | None,
) -> CredentialRead:
    resource = active_resource(db, data.resource_id)

    sealed = codec.seal(data.password)
    credential = Credential(
        resource_id=resource.id,
        credential_type=data.credential_type,
        username=data.username or None,
        encrypted_password=sealed.encrypted_password,
        encryption_iv=sealed.iv,
        notes=data.notes or None,
        expires_at=data.expires_at,
        last_rotated_at=codec.next_rotation_time(),
        is_active=True,
        created_by=created_by,
    )
    codec.set_ssh_key(credential, data.ssh_key)
    db.add(credential)
    db.commit()
    logger.info("Created credential id=%s on resource id=%s", credential.id, resource.id)
    return _to_read(_load_row(db, credential.id))


def update_credential(
    db: Session,
    codec: CredentialRecordCodec,
    credential_id: int,
    data: CredentialUpdate,
) -> CredentialRead:
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")
    if "credential_type" in changes and changes["credential_type"] is None:
        raise ValidationError("credential_type cannot be null")
    if "password" in changes and changes["password"] is None:
        raise ValidationError("password cannot be null")

    credential = _load_row(db, credential_id)[0]
    for field in ("credential_type", "username", "notes", "expires_at"):
        if field in changes:
            setattr(credential, field, changes[field])
    if "password" in changes:
        codec.rotate(credential, changes["password"])
    if "ssh_key" in changes:
        codec.set_ssh_key(credential, changes["ssh_key"])

    db.commit()
    if "password" in changes:
        logger.info("Rotated password for credential id=%s", credential_id)
    else:
        logger.info("Updated credential id=%s fields=%s", credential_id, sorted(changes))
    return _to_read(_load_row(db, credential_id))


def delete_credential(db: Session, credential_id: int) -> None:
    """Soft delete: the row stays for audit history."""
    result = db.execute(
        update(Credential)
        .where(Credential.id == credential_id, Credential.is_active.is_(True))
        .values(is_active=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError("Credential not found")
    db.commit()
    logger.info("Soft-deleted credential id=%s", credential_id)
