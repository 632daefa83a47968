"""Shared helpers: isolated SQLite databases, a controllable clock and seeded records."""

import os
from datetime import UTC, datetime, timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.crypto import SecretCipher
from app.core.security import PasswordHasher, TokenService
from app.models import Base, Client, Resource, User

TEST_KEY = os.environ["ENCRYPTION_KEY"]
TEST_JWT_SECRET = os.environ["JWT_SECRET"]
STRONG_PASSWORD = "Secret123!"


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database with every table created; one connection shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=True)


def make_cipher() -> SecretCipher:
    return SecretCipher(TEST_KEY)


def make_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


def make_tokens(clock: FakeClock | None = None, expire_minutes: int = 60) -> TokenService:
    return TokenService(TEST_JWT_SECRET, expire_minutes=expire_minutes, clock=clock)


def add_user(
    db: Session,
    hasher: PasswordHasher,
    username: str,
    role: str = "technician",
    *,
    active: bool = True,
    verified: bool = True,
    password: str = STRONG_PASSWORD,
) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=hasher.hash(password),
        role=role,
        is_active=active,
        is_verified=verified,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_resource(db: Session, client_name: str = "Acme", resource_name: str = "db-01") -> Resource:
    client = Client(name=client_name, is_active=True)
    db.add(client)
    db.flush()
    resource = Resource(client_id=client.id, name=resource_name, resource_type="database", is_active=True)
    db.add(resource)
    db.commit()
    db.refresh(resource)
    return resource
