"""Exception handlers mapping domain and request errors onto the envelope.

| Error                                   | Status |
|-----------------------------------------|--------|
| request validation, ValidationError     | 400    |
| ConflictError subclasses                | 400 (ItemNotFound 404) |
| ObjectNotFoundError                     | 404    |
| AuthError                               | 401 / 403 |
| anything else                           | 500    |
"""

import os

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from storefront.api.auth import AuthError
from storefront.api.envelope import ErrorDetail, failure
from storefront.shared.errors import ConflictError
from storefront.utils.logging import current_environment

logger = structlog.get_logger(__name__)


def development_mode():
    return current_environment() == "development" or os.getenv("STOREFRONT_DEBUG") == "1"


def _details(messages, code=None):
    """Flatten Protean's ``{field: [messages]}`` into error entries."""
    if isinstance(messages, dict):
        details = []
        for field, entries in messages.items():
            for entry in entries if isinstance(entries, list | tuple) else [entries]:
                details.append(ErrorDetail(field=None if field.startswith("_") else field, message=str(entry), code=code))
        return details
    return [ErrorDetail(message=str(messages), code=code)]


def _payload(exc):
    """What a Protean exception without ``messages`` was raised with."""
    return exc.args[0] if exc.args else str(exc)


def _first_message(details, fallback):
    return details[0].message if details else fallback


async def handle_request_validation(request: Request, exc: RequestValidationError):
    details = [
        ErrorDetail(
            field=".".join(str(part) for part in error.get("loc", ())[1:]) or None,
            message=error.get("msg", "Invalid value"),
        )
        for error in exc.errors()
    ]
    return failure(400, "Validation failed", details)


async def handle_conflict(request: Request, exc: ConflictError):
    details = [ErrorDetail(field=exc.field, message=exc.message, code=exc.code)]
    return failure(exc.status_code, exc.message, details)


async def handle_validation(request: Request, exc: ValidationError):
    details = _details(exc.messages)
    return failure(400, _first_message(details, "Validation failed"), details)


async def handle_invalid_operation(request: Request, exc: InvalidOperationError):
    details = _details(_payload(exc))
    return failure(400, _first_message(details, "Invalid operation"), details)


async def handle_not_found(request: Request, exc: ObjectNotFoundError):
    details = _details(_payload(exc))
    return failure(404, _first_message(details, "Not found"), details)


async def handle_auth(request: Request, exc: AuthError):
    return failure(exc.status_code, exc.message)


async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error", path=request.url.path, method=request.method)
    errors = [ErrorDetail(message=repr(exc))] if development_mode() else None
    return failure(500, "Server error", errors)


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette picks the most specific class, so ConflictError wins over ValidationError
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(ConflictError, handle_conflict)
    app.add_exception_handler(ValidationError, handle_validation)
    app.add_exception_handler(InvalidOperationError, handle_invalid_operation)
    app.add_exception_handler(ObjectNotFoundError, handle_not_found)
    app.add_exception_handler(AuthError, handle_auth)
    app.add_exception_handler(Exception, handle_unexpected)
