"""Input validation shared by registration, admin user creation and password changes."""

import re

from app.core.errors import ValidationError

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 64
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
EMAIL_MAX_LEN = 255

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")

ROLES = ("admin", "technician", "viewer")
SELF_REGISTER_ROLES = ("technician", "viewer")


def is_valid_email(email: str | None) -> bool:
    if not email or len(email) > EMAIL_MAX_LEN:
        return False
    return EMAIL_PATTERN.match(email) is not None


def password_policy_errors(password: str | None) -> list[str]:
    """Return every policy rule the password breaks (empty list when it is acceptable)."""
    if not password or len(password) < PASSWORD_MIN_LEN:
        return [f"Password must be at least {PASSWORD_MIN_LEN} characters long"]
    if len(password) > PASSWORD_MAX_LEN:
        return [f"Password must be at most {PASSWORD_MAX_LEN} characters long"]

    errors = []
    if not any(c.isupper() for c in password):
        errors.append("Password must contain at least one uppercase letter")
    if not any(c.islower() for c in password):
        errors.append("Password must contain at least one lowercase letter")
    if not any(c.isdigit() for c in password):
        errors.append("Password must contain at least one number")
    if not any(not c.isalnum() and not c.isspace() for c in password):
        errors.append("Password must contain at least one special character")
    return errors


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_new_account(username: str, email: str, password: str, role: str, allowed_roles: tuple[str, ...]) -> None:
    """Raise ValidationError listing every problem with a new account's fields."""
    errors: list[str] = []
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN) or not USERNAME_PATTERN.match(username):
        errors.append(
            f"Username must be {USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} characters of letters, digits, '.', '_' or '-'"
        )
    if not is_valid_email(email):
        errors.append("Invalid email format")
    errors.extend(password_policy_errors(password))
    if role not in allowed_roles:
        errors.append(f"Invalid role. Must be one of: {', '.join(allowed_roles)}")
    if errors:
        raise ValidationError(errors[0] if len(errors) == 1 else "Validation failed", errors=errors)


def validate_password(password: str) -> None:
    errors = password_policy_errors(password)
    if errors:
        raise ValidationError(errors[0] if len(errors) == 1 else "Validation failed", errors=errors)
