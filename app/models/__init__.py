"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.credential import Credential
from app.models.resource import Client, Resource
from app.models.user import User

__all__ = ["Base", "Client", "Credential", "Resource", "User"]
