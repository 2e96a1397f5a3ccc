"""Request correlation middleware."""

from __future__ import annotations

from typing import Callable
from uuid import uuid4

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

CORRELATION_HEADER = "X-WOPI-CorrelationID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind a per-request correlation id into the log context.

    The host application sends ``X-WOPI-CorrelationID`` on protocol calls;
    other callers get a fresh UUID. The id is echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid4().hex
        with logger.contextualize(correlation_id=correlation_id):
            response = await call_next(request)
            logger.debug(
                "{method} {path} -> {status}",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
            )
        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Content-Type-Options"] = "nosniff"
        return response
