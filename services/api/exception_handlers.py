"""FastAPI exception handlers for bridge exceptions."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from wopi_bridge.exceptions import (
    BadRequestError,
    BridgeError,
    ObjectNotFoundError,
    PayloadTooLargeError,
    StorageError,
    UnauthorizedError,
)

STORAGE_FAILURE_MESSAGE = "Storage backend failure"


def status_for(exc: BridgeError) -> int:
    if isinstance(exc, UnauthorizedError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, BadRequestError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, ObjectNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, PayloadTooLargeError):
        return 413  # constant name differs across starlette versions
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def bridge_exception_handler(request: Request, exc: BridgeError) -> JSONResponse:
    """Map bridge exceptions onto HTTP responses without leaking backend detail."""
    status_code = status_for(exc)
    message = exc.message

    if isinstance(exc, StorageError) or status_code >= 500:
        logger.error(
            "{method} {path} failed: {type} - {message} {details}",
            method=request.method,
            path=request.url.path,
            type=type(exc).__name__,
            message=exc.message,
            details=exc.details,
        )
        message = STORAGE_FAILURE_MESSAGE if isinstance(exc, StorageError) else "Internal server error"
    else:
        logger.info(
            "{method} {path} rejected with {status}: {message}",
            method=request.method,
            path=request.url.path,
            status=status_code,
            message=exc.message,
        )

    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "message": message},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled exception on {path}", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "InternalServerError", "message": "Internal server error"},
    )
