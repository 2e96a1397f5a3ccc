"""Access grant: issue a token for a file and build the editor launch URL.

This endpoint is unauthenticated; it must sit behind an authenticating
proxy in any real deployment.
"""

from __future__ import annotations

import time
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, Query
from loguru import logger

from wopi_bridge.exceptions import BadRequestError
from wopi_bridge.settings import Settings
from wopi_bridge.tokens import StatelessTokenPolicy, TokenRegistry
from services.api.deps import get_app_settings, get_token_policy
from services.api.schemas import AccessGrantResponse


router = APIRouter(tags=["access"])


def build_wopi_src(host_url: str, key: str) -> str:
    return f"{host_url}/wopi/files/{quote(key, safe='')}"


def build_launch_url(settings: Settings, wopi_src: str, token: str) -> str:
    # WOPISrc is itself a URL, so the key ends up encoded twice here
    query = urlencode({"WOPISrc": wopi_src, "access_token": token})
    return f"{settings.wopi.editor_base_url}{settings.wopi.editor_path}?{query}"


@router.get("/access", response_model=AccessGrantResponse)
async def grant_access(
    path: str | None = Query(None, description="Storage key of the file to open"),
    settings: Settings = Depends(get_app_settings),
    policy: TokenRegistry | StatelessTokenPolicy = Depends(get_token_policy),
) -> AccessGrantResponse:
    if not path:
        raise BadRequestError("Missing file path")
    if not path.rsplit("/", 1)[-1]:
        raise BadRequestError("File path must name a file, not a folder")

    token = policy.issue(path)
    expires_ms = 0
    if isinstance(policy, TokenRegistry):
        expires_ms = int((time.time() + policy.expires_in(token)) * 1000)
    logger.info("Issued access token for {key}", key=path)

    wopi_src = build_wopi_src(settings.wopi.host_base_url, path)
    return AccessGrantResponse(
        url=build_launch_url(settings, wopi_src, token),
        token=token,
        wopi_src=wopi_src,
        access_token_ttl=expires_ms,
    )
