"""FastAPI dependencies: application state and the access token gate."""

from __future__ import annotations

from fastapi import Request
from loguru import logger

from wopi_bridge.exceptions import TokenNotFoundError, UnauthorizedError
from wopi_bridge.settings import Settings
from wopi_bridge.storage import ObjectStorage
from wopi_bridge.tokens import StatelessTokenPolicy, TokenRegistry
from services.api.utils import extract_token

INVALID_TOKEN = "invalid or expired token"


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage


def get_token_policy(request: Request) -> TokenRegistry | StatelessTokenPolicy:
    return request.app.state.tokens


async def authorize_file(request: Request, file_id: str) -> str:
    """Validate the presented token and return the storage key it grants.

    ``file_id`` arrives already percent-decoded from the request path. With a
    token registry the key bound at issuance must match it exactly; in
    stateless mode the path is trusted as-is.
    """
    token = extract_token(request)
    if token is None:
        raise UnauthorizedError("missing token")

    policy = get_token_policy(request)
    if isinstance(policy, TokenRegistry):
        try:
            key = policy.resolve(token)
        except TokenNotFoundError as exc:
            raise UnauthorizedError(INVALID_TOKEN) from exc
        if key != file_id:
            logger.warning("Token presented for a file it was not issued for")
            raise UnauthorizedError(INVALID_TOKEN)
        return key

    if not policy.is_accepted(token):
        raise UnauthorizedError(INVALID_TOKEN)
    return file_id
