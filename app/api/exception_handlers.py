"""
Map vault errors to JSON responses.

Body shape: {"error": <error class name>, "message": <client-safe text>}, plus
"errors" for validation failures. Server-side failures (5xx) never echo
internal detail; it goes to the log instead.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import ValidationError, VaultError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def _validation_body(message: str, errors: list[str]) -> dict:
    body: dict = {"error": ValidationError.__name__, "message": message}
    if errors:
        body["errors"] = errors
    return body


def _describe(error: dict) -> str:
    # Drop the "body"/"query"/"path" prefix; clients know where they sent the field.
    location = [str(part) for part in error.get("loc", ())[1:]]
    message = error.get("msg", "Invalid value")
    return f"{'.'.join(location)}: {message}" if location else message


async def vault_error_handler(request: Request, exc: VaultError) -> JSONResponse:
    status_code = exc.status_code
    if status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
        body = {"error": type(exc).__name__, "message": INTERNAL_ERROR_MESSAGE}
    elif isinstance(exc, ValidationError):
        body = _validation_body(exc.message, exc.errors)
    else:
        body = {"error": type(exc).__name__, "message": exc.message}

    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies, query strings and path params answer like any other ValidationError."""
    errors = [_describe(error) for error in exc.errors()]
    message = errors[0] if len(errors) == 1 else "Validation failed"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_validation_body(message, errors),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "DatabaseError", "message": INTERNAL_ERROR_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(VaultError, vault_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
