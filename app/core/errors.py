"""Error taxonomy and the FastAPI handlers that render it."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "An unexpected error occurred"


class AppError(Exception):
    """Base class for errors that map onto a structured JSON response."""

    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = GENERIC_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed input. The client can fix it and resubmit."""

    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST


class AccessDenied(AppError):
    code = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(AppError):
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(AppError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(AppError):
    code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class DomainRejection(AppError):
    """Expected business outcome (code inactive, full, ...).

    Routes translate these into 200 responses; they are never logged as errors.
    """

    code = "REJECTED"
    status_code = status.HTTP_200_OK


class StorageError(AppError):
    """Datastore failure the application did not anticipate."""

    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ConfigError(AppError):
    """Required configuration (e.g. DATABASE_URL) is missing."""

    code = "CONFIG_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Server configuration error") -> None:
        super().__init__(message)


def _body(code: str, message: str) -> dict:
    return {"code": code, "message": message}


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, StorageError):
        logger.error(
            "Storage error on %s %s: %s", request.method, request.url.path, exc.message,
            exc_info=exc,
        )
        return JSONResponse(_body(exc.code, GENERIC_MESSAGE), status_code=exc.status_code)
    if isinstance(exc, ConfigError):
        logger.error("Configuration error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(_body(exc.code, exc.message), status_code=exc.status_code)


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        loc = ".".join(str(p) for p in errors[0].get("loc", ()) if p != "body")
        message = f"{loc}: {errors[0].get('msg', 'invalid value')}" if loc else message
    return JSONResponse(
        _body(ValidationError.code, message),
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def _sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        _body(StorageError.code, GENERIC_MESSAGE),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
