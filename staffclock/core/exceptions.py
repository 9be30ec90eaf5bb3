"""
Error taxonomy and global exception handlers.

Every failure leaves the API as ``{"status": false, "reason", "message"}``
so clients can branch on a stable ``reason`` while showing ``message``.
Raw database / runtime error text is logged, never returned.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class AttendanceError(Exception):
    """Base class for rejections surfaced to API clients."""

    status_code: int = 400
    default_reason: str = "error"

    def __init__(self, message: str, reason: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason or self.default_reason


class ValidationError(AttendanceError):
    status_code = 422
    default_reason = "validation_error"


class NotFoundError(AttendanceError):
    status_code = 404
    default_reason = "not_found"


class ConflictError(AttendanceError):
    """Request is well-formed but the record is in the wrong state."""

    status_code = 400
    default_reason = "conflict"


class InternalError(AttendanceError):
    status_code = 500
    default_reason = "internal_error"


def _envelope(status_code: int, reason: str, message: str, **extra: object) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": False, "reason": reason, "message": message, **extra},
    )


async def _attendance_error_handler(_request: Request, exc: AttendanceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Internal attendance error: %s", exc.message, exc_info=exc)
        return _envelope(exc.status_code, exc.reason, "Internal server error")
    return _envelope(exc.status_code, exc.reason, exc.message)


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": False, "reason": "http_error", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _envelope(
        422,
        ValidationError.default_reason,
        "Validation errors",
        errors=jsonable_encoder(exc.errors()),
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return _envelope(409, "constraint_violation", "Database constraint violation")


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return _envelope(500, InternalError.default_reason, "Internal database error")


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return _envelope(500, InternalError.default_reason, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(AttendanceError, _attendance_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
