"""Shared utilities for API routes."""

from __future__ import annotations

from fastapi import Request

from wopi_bridge.exceptions import BadRequestError, PayloadTooLargeError


def extract_token(request: Request) -> str | None:
    """Return the presented access token, or None when absent.

    The ``Authorization`` header wins over the ``access_token`` query
    parameter. A ``Bearer `` prefix on the header is optional.
    """
    header = (request.headers.get("authorization") or "").strip()
    if header.lower().startswith("bearer "):
        header = header[7:].strip()
    if header:
        return header
    query = (request.query_params.get("access_token") or "").strip()
    return query or None


async def read_body_capped(request: Request, limit: int) -> bytes:
    """Read the raw request body, failing as soon as it exceeds ``limit`` bytes."""
    declared = request.headers.get("content-length")
    if declared is not None:
        try:
            declared_length = int(declared)
        except ValueError as exc:
            raise BadRequestError("Invalid Content-Length header") from exc
        if declared_length > limit:
            raise PayloadTooLargeError("Request body too large", {"limit": str(limit), "length": declared})

    buffer = bytearray()
    async for chunk in request.stream():
        buffer.extend(chunk)
        if len(buffer) > limit:
            raise PayloadTooLargeError("Request body too large", {"limit": str(limit)})
    return bytes(buffer)
