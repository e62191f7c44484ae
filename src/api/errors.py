"""Translate domain errors into HTTP responses.

This is the only place a DomainError becomes a status code and an
``{error, message}`` body. Anything untyped becomes a generic 500 without
internal detail.
"""

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.model.errors import DomainError, ValidationError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_CODE = "INTERNAL_SERVER_ERROR"
INTERNAL_ERROR_MESSAGE = "An internal server error occurred"


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": code, "message": message},
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    logger.warning("Domain error occurred", extra={
        "code": exc.code,
        "errorMessage": exc.message,
        "path": request.url.path,
    })
    return error_response(exc.status_code, exc.code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema failures on the body are reported like any other ValidationError."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = ValidationError.default_message
    return await domain_error_handler(request, ValidationError(message))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep framework-raised HTTP errors in the same {error, message} shape."""
    if isinstance(exc.detail, dict):
        code = exc.detail.get("error", HTTPStatus(exc.status_code).phrase.replace(" ", ""))
        message = exc.detail.get("message", "")
    else:
        code = HTTPStatus(exc.status_code).phrase.replace(" ", "")
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": code, "message": message},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unexpected error occurred",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_CODE, INTERNAL_ERROR_MESSAGE,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
