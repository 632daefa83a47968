"""
User lifecycle: registration, admin approval, rejection, deactivation and login.

States:
  pending   is_verified=False, is_active=False (self-registered, awaiting approval)
  active    is_verified=True,  is_active=True
  inactive  is_verified=True,  is_active=False
  rejected  row deleted (only reachable from pending)

Each transition is a single conditional UPDATE/DELETE on the expected state, so
concurrent requests cannot both succeed. Uniqueness of username and email is
left to the database and surfaced as DuplicateUserError.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import (
    AccountInactiveError,
    AlreadyActiveError,
    AlreadyApprovedError,
    AlreadyInactiveError,
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidStateError,
    NotFoundError,
    NotYetApprovedError,
    SelfDeactivationError,
    ValidationError,
)
from app.core.security import Clock, PasswordHasher, TokenClaims, TokenService, utcnow
from app.core.validators import (
    ROLES,
    SELF_REGISTER_ROLES,
    normalize_email,
    validate_new_account,
    validate_password,
)
from app.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "technician"


@dataclass(frozen=True)
class UserRef:
    """Identity of a user row that no longer exists (returned by reject)."""

    id: int
    username: str
    email: str


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User
    expires_in: int


class UserLifecycle:
    def __init__(
        self,
        db: Session,
        hasher: PasswordHasher,
        tokens: TokenService,
        clock: Clock | None = None,
    ) -> None:
        self._db = db
        self._hasher = hasher
        self._tokens = tokens
        self._clock = clock or utcnow

    # Reads

    def get_user(self, user_id: int) -> User:
        user = self._db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def list_users(self) -> list[User]:
        return list(self._db.scalars(select(User).order_by(User.created_at.desc(), User.id.desc())))

    def list_pending(self) -> list[User]:
        stmt = (
            select(User)
            .where(User.is_verified.is_(False))
            .order_by(User.created_at.desc(), User.id.desc())
        )
        return list(self._db.scalars(stmt))

    # Creation

    def register(
        self,
        username: str,
        email: str,
        password: str,
        full_name: str | None = None,
        role: str = DEFAULT_ROLE,
    ) -> User:
        """Self-registration: the account stays pending until an admin approves it."""
        username = username.strip()
        email = normalize_email(email)
        validate_new_account(username, email, password, role, SELF_REGISTER_ROLES)

        user = User(
            username=username,
            email=email,
            password_hash=self._hasher.hash(password),
            full_name=full_name or None,
            role=role,
            is_active=False,
            is_verified=False,
        )
        self._insert(user)
        logger.info("Registered pending user id=%s role=%s", user.id, user.role)
        return user

    def admin_create(
        self,
        username: str,
        email: str,
        password: str,
        acting_admin_id: int,
        full_name: str | None = None,
        role: str = DEFAULT_ROLE,
    ) -> User:
        """Admin-created accounts skip the approval queue."""
        username = username.strip()
        email = normalize_email(email)
        validate_new_account(username, email, password, role, ROLES)

        user = User(
            username=username,
            email=email,
            password_hash=self._hasher.hash(password),
            full_name=full_name or None,
            role=role,
            is_active=True,
            is_verified=True,
            approved_by=acting_admin_id,
            approved_at=self._clock(),
        )
        self._insert(user)
        logger.info("Admin id=%s created user id=%s role=%s", acting_admin_id, user.id, user.role)
        return user

    def _insert(self, user: User) -> None:
        self._db.add(user)
        try:
            self._db.commit()
        except IntegrityError as exc:
            self._db.rollback()
            raise DuplicateUserError("Username or email already exists") from exc
        self._db.refresh(user)

    # Transitions

    def approve(self, user_id: int, acting_admin_id: int) -> User:
        result = self._db.execute(
            update(User)
            .where(User.id == user_id, User.is_verified.is_(False))
            .values(
                is_verified=True,
                is_active=True,
                approved_by=acting_admin_id,
                approved_at=self._clock(),
            )
        )
        if result.rowcount == 0:
            self._db.rollback()
            self.get_user(user_id)
            raise AlreadyApprovedError("User is already approved")
        self._db.commit()
        logger.info("Admin id=%s approved user id=%s", acting_admin_id, user_id)
        return self.get_user(user_id)

    def reject(self, user_id: int) -> UserRef:
        """Delete a pending registration. Approved accounts must be deactivated instead."""
        user = self.get_user(user_id)
        ref = UserRef(id=user.id, username=user.username, email=user.email)

        result = self._db.execute(
            delete(User).where(User.id == user_id, User.is_verified.is_(False))
        )
        if result.rowcount == 0:
            self._db.rollback()
            self.get_user(user_id)
            raise InvalidStateError("Cannot reject an already approved user. Use deactivate instead.")
        self._db.commit()
        logger.info("Rejected and deleted pending user id=%s", user_id)
        return ref

    def deactivate(self, user_id: int, acting_admin_id: int) -> User:
        if user_id == acting_admin_id:
            raise SelfDeactivationError("You cannot deactivate your own account")
        result = self._db.execute(
            update(User)
            .where(User.id == user_id, User.is_active.is_(True))
            .values(is_active=False)
        )
        if result.rowcount == 0:
            self._db.rollback()
            self.get_user(user_id)
            raise AlreadyInactiveError("User is already inactive")
        self._db.commit()
        logger.info("Admin id=%s deactivated user id=%s", acting_admin_id, user_id)
        return self.get_user(user_id)

    def reactivate(self, user_id: int) -> User:
        result = self._db.execute(
            update(User)
            .where(
                User.id == user_id,
                User.is_active.is_(False),
                User.is_verified.is_(True),
            )
            .values(is_active=True)
        )
        if result.rowcount == 0:
            self._db.rollback()
            user = self.get_user(user_id)
            if user.is_active:
                raise AlreadyActiveError("User is already active")
            if not user.is_verified:
                raise NotYetApprovedError("User must be approved first before reactivation")
            raise InvalidStateError("User state changed concurrently; retry the request")
        self._db.commit()
        logger.info("Reactivated user id=%s", user_id)
        return self.get_user(user_id)

    # Authentication

    def login(self, email: str, password: str) -> LoginResult:
        """
        Verify credentials and issue a session token.

        Unknown email and wrong password raise the same InvalidCredentialsError so
        callers cannot enumerate accounts.
        """
        user = self._db.scalar(select(User).where(User.email == normalize_email(email)))
        if user is None:
            self._hasher.verify_dummy(password)
            raise InvalidCredentialsError("Invalid email or password")
        if not self._hasher.verify(password, user.password_hash):
            raise InvalidCredentialsError("Invalid email or password")
        if not user.is_verified:
            raise AccountInactiveError("User account is pending approval")
        if not user.is_active:
            raise AccountInactiveError("User account is inactive")

        if self._hasher.needs_rehash(user.password_hash):
            user.password_hash = self._hasher.hash(password)
            self._db.commit()
            self._db.refresh(user)

        token = self._tokens.issue(
            TokenClaims(user_id=user.id, username=user.username, email=user.email, role=user.role)
        )
        logger.info("User id=%s logged in", user.id)
        return LoginResult(token=token, user=user, expires_in=int(self._tokens.ttl.total_seconds()))

    def change_password(self, user_id: int, current_password: str, new_password: str) -> User:
        user = self.get_user(user_id)
        if not self._hasher.verify(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")
        validate_password(new_password)
        user.password_hash = self._hasher.hash(new_password)
        self._db.commit()
        self._db.refresh(user)
        logger.info("User id=%s changed password", user.id)
        return user
