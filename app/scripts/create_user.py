"""
Create an active, approved user (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user admin admin@example.com 'S3cure!pass' admin
With no arguments, ADMIN_DEFAULT_USERNAME, ADMIN_DEFAULT_EMAIL and
ADMIN_DEFAULT_PASSWORD are used and the role is admin.
"""
import argparse
import logging
import sys
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import session_scope
from app.core.errors import DuplicateUserError, ValidationError
from app.core.security import PasswordHasher, utcnow
from app.core.validators import ROLES, normalize_email, validate_new_account
from app.models.user import User
from app.services.users import DEFAULT_ROLE


def _resolve_args(args: argparse.Namespace) -> tuple[str, str, str, str] | None:
    if args.username and args.email and args.password:
        return args.username, args.email, args.password, args.role or DEFAULT_ROLE
    settings = get_settings()
    if settings.ADMIN_DEFAULT_USERNAME and settings.ADMIN_DEFAULT_EMAIL and settings.ADMIN_DEFAULT_PASSWORD:
        return (
            settings.ADMIN_DEFAULT_USERNAME,
            settings.ADMIN_DEFAULT_EMAIL,
            settings.ADMIN_DEFAULT_PASSWORD.get_secret_value(),
            "admin",
        )
    return None


def create_active_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    role: str,
    hasher: PasswordHasher,
    clock: Callable[[], datetime] = utcnow,
) -> User:
    """Insert a verified, active user stamped as approved now. The caller commits."""
    existing = db.query(User).filter((User.username == username) | (User.email == email)).first()
    if existing:
        raise DuplicateUserError(f"User '{username}' or email '{email}' already exists.")
    user = User(
        username=username,
        email=email,
        password_hash=hasher.hash(password),
        role=role,
        is_active=True,
        is_verified=True,
        approved_at=clock(),
    )
    db.add(user)
    db.flush()
    return user


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a vault user that can log in immediately.")
    parser.add_argument("username", nargs="?", help="Username (3-64 chars: letters, digits, . _ -)")
    parser.add_argument("email", nargs="?", help="Email address")
    parser.add_argument("password", nargs="?", help="Password (8-128 chars, upper, lower, digit, special)")
    parser.add_argument("role", nargs="?", default=None, choices=list(ROLES))
    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    resolved = _resolve_args(args)
    if resolved is None:
        print("Give USERNAME EMAIL PASSWORD or set the ADMIN_DEFAULT_* variables.", file=sys.stderr)
        return 1
    username, email, password, role = resolved
    username = username.strip()
    email = normalize_email(email)

    try:
        validate_new_account(username, email, password, role, ROLES)
    except ValidationError as exc:
        print(exc.message, file=sys.stderr)
        for error in exc.errors:
            print(f"  - {error}", file=sys.stderr)
        return 1

    settings = get_settings()
    hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    try:
        with session_scope() as db:
            create_active_user(db, username, email, password, role, hasher)
    except DuplicateUserError as exc:
        print(exc.message, file=sys.stderr)
        return 1
    print(f"Created user '{username}' with role '{role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
