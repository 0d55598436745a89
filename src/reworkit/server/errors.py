"""Ingest server exceptions and error handlers."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from reworkit.buildlog import LogDecodeError
from reworkit.db.errors import ConstraintViolation, ResultNotFound

logger = logging.getLogger(__name__)


class ServerError(Exception):
    """Base exception for errors reported to HTTP clients."""

    def __init__(
        self,
        message: str,
        code: str = "SERVER_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(ServerError):
    """Missing or wrong SECRET header."""

    def __init__(self, message: str = "Invalid secret token"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_ERROR",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class MissingFieldError(ServerError):
    """A required multipart field was not sent."""

    def __init__(self, field: str):
        super().__init__(
            message=f"Missing {field} field",
            code="VALIDATION_ERROR",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"field": field},
        )


class InvalidFieldError(ServerError):
    """A multipart field was sent with a value the server cannot use."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"field": field},
        )


def _error_response(status_code: int, code: str, message: str, details: dict | None = None):
    content: dict[str, Any] = {"error": code, "message": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def install_exception_handlers(app: FastAPI) -> None:
    """Install exception handlers on FastAPI app."""

    @app.exception_handler(ServerError)
    async def server_error_handler(request: Request, exc: ServerError):
        logger.info("Rejecting %s %s: %s", request.method, request.url.path, exc.message)
        return _error_response(exc.status_code, exc.code, exc.message, exc.details)

    @app.exception_handler(ResultNotFound)
    async def not_found_handler(request: Request, exc: ResultNotFound):
        details = {"name": exc.name}
        if exc.arch is not None:
            details["arch"] = exc.arch
        return _error_response(status.HTTP_404_NOT_FOUND, "NOT_FOUND", str(exc), details)

    @app.exception_handler(ConstraintViolation)
    async def constraint_handler(request: Request, exc: ConstraintViolation):
        logger.warning("Constraint violation: %s", exc)
        return _error_response(status.HTTP_409_CONFLICT, "CONSTRAINT_VIOLATION", str(exc))

    @app.exception_handler(LogDecodeError)
    async def log_decode_handler(request: Request, exc: LogDecodeError):
        logger.warning("Rejected log upload: %s", exc)
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_LOG", str(exc), {"field": "log"}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            "An unexpected error occurred",
        )
