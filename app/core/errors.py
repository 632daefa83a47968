"""Typed error hierarchy for the vault core; the API layer maps these to HTTP status codes."""


class VaultError(Exception):
    """Base error: carries a client-safe message and the HTTP status it maps to."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(VaultError):
    """Malformed input (caller's fault, never retried)."""

    status_code = 400

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)


class DuplicateUserError(VaultError):
    """Username or email already taken (database uniqueness constraint)."""

    status_code = 409


class InvalidCredentialsError(VaultError):
    """Unknown email or wrong password; deliberately does not say which."""

    status_code = 401


class AccountInactiveError(VaultError):
    """Password correct, but the account is pending approval or deactivated."""

    status_code = 401


class UnauthenticatedError(VaultError):
    status_code = 401


class ForbiddenError(VaultError):
    status_code = 403


class NotFoundError(VaultError):
    """Missing or soft-deleted record."""

    status_code = 404


class TokenError(VaultError):
    status_code = 401


class ExpiredTokenError(TokenError):
    pass


class InvalidTokenError(TokenError):
    pass


class DecryptionFailedError(VaultError):
    """Ciphertext could not be authenticated or decrypted (server fault)."""

    status_code = 500


class ConfigurationError(VaultError):
    """Missing or malformed key material; fatal at startup."""

    status_code = 500


class LifecycleError(VaultError):
    """A user lifecycle transition is not legal from the current state."""

    status_code = 400


class AlreadyApprovedError(LifecycleError):
    pass


class InvalidStateError(LifecycleError):
    pass


class SelfDeactivationError(LifecycleError):
    pass


class AlreadyInactiveError(LifecycleError):
    pass


class AlreadyActiveError(LifecycleError):
    pass


class NotYetApprovedError(LifecycleError):
    pass
