"""Map domain errors onto HTTP responses.

Every error body has the shape ``{"error": <kind>, "messages": {field: [..]}}``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import (
    ExpectedVersionError,
    InvalidDataError,
    InvalidOperationError,
    ObjectNotFoundError,
    ValidationError,
)

from bookshop.errors import BookshopError

logger = structlog.get_logger(__name__)

STATUS_BY_KIND = {
    "NotFound": 404,
    "AlreadyExists": 409,
    "InsufficientStock": 409,
    "InvalidState": 409,
    "InvalidCredential": 401,
    "ValidationFailed": 400,
    "InternalError": 500,
}


def _body(kind: str, exc: Exception) -> dict:
    messages = getattr(exc, "messages", None)
    if not isinstance(messages, dict) or not messages:
        messages = {"_error": [str(exc)]}
    return {"error": kind, "messages": messages}


async def _bookshop_error(request: Request, exc: BookshopError) -> JSONResponse:
    status = STATUS_BY_KIND.get(exc.kind, 500)
    if status >= 500:
        logger.error("Request failed", path=request.url.path, kind=exc.kind, error=str(exc))
    return JSONResponse(status_code=status, content=_body(exc.kind, exc))


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=_body("NotFound", exc))


async def _validation_error(request: Request, exc: ValidationError | InvalidDataError) -> JSONResponse:
    return JSONResponse(status_code=400, content=_body("ValidationFailed", exc))


async def _invalid_operation(request: Request, exc: InvalidOperationError | ExpectedVersionError) -> JSONResponse:
    return JSONResponse(status_code=409, content=_body("InvalidState", exc))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookshopError, _bookshop_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(InvalidDataError, _validation_error)
    app.add_exception_handler(InvalidOperationError, _invalid_operation)
    # A concurrent writer saved the aggregate first
    app.add_exception_handler(ExpectedVersionError, _invalid_operation)
