"""ORM model for credentials stored encrypted at rest."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func

from app.models.base import Base


class Credential(Base):
    """
    Secret bound to exactly one resource.

    encrypted_password/encryption_iv (and encrypted_ssh_key/ssh_key_iv) are
    always written together. Deletion flips is_active; rows are never removed.
    """

    __tablename__ = "credentials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    resource_id = Column(Integer, ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True)
    credential_type = Column(String(32), nullable=False)
    username = Column(String(255), nullable=True)
    encrypted_password = Column(Text, nullable=False)
    encryption_iv = Column(String(32), nullable=False)
    encrypted_ssh_key = Column(Text, nullable=True)
    ssh_key_iv = Column(String(32), nullable=True)
    notes = Column(Text, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    last_rotated_at = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
