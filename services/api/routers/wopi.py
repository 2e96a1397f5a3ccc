"""WOPI protocol endpoints: CheckFileInfo, GetFile and PutFile."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import StreamingResponse
from loguru import logger
from starlette.concurrency import run_in_threadpool

from wopi_bridge.settings import Settings
from wopi_bridge.storage import ObjectStorage
from services.api.deps import authorize_file, get_app_settings, get_storage
from services.api.schemas import CheckFileInfoResponse
from services.api.utils import read_body_capped


router = APIRouter(prefix="/wopi/files", tags=["wopi"])


# Content routes are registered first: keys may contain "/" so the
# metadata route's path parameter would otherwise swallow "/contents".
@router.get("/{file_id:path}/contents")
async def get_file(
    key: str = Depends(authorize_file),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
) -> StreamingResponse:
    """Stream the object bytes back verbatim."""
    chunks = await run_in_threadpool(storage.get_content, key)
    return StreamingResponse(chunks, media_type=settings.wopi.content_type)


@router.post("/{file_id:path}/contents")
async def put_file(
    request: Request,
    key: str = Depends(authorize_file),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Overwrite the object with the raw request body."""
    body = await read_body_capped(request, settings.wopi.max_body_bytes)
    await run_in_threadpool(storage.put_content, key, body, len(body))
    logger.info("Saved {size} bytes to {key}", size=len(body), key=key)
    return Response(status_code=200)


@router.get("/{file_id:path}", response_model=CheckFileInfoResponse)
async def check_file_info(
    key: str = Depends(authorize_file),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
) -> CheckFileInfoResponse:
    head = await run_in_threadpool(storage.head, key)
    return CheckFileInfoResponse(
        BaseFileName=key.rsplit("/", 1)[-1],
        Size=head.size,
        OwnerId=settings.wopi.owner_id,
        UserId=settings.wopi.user_id,
        Version=head.version,
        SupportsUpdate=True,
        UserCanWrite=True,
    )
