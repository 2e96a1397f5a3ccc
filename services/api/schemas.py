from __future__ import annotations

from pydantic import BaseModel, Field


class CheckFileInfoResponse(BaseModel):
    BaseFileName: str
    Size: int
    OwnerId: str
    UserId: str
    Version: str
    SupportsUpdate: bool = True
    UserCanWrite: bool = True


class AccessGrantResponse(BaseModel):
    url: str
    token: str
    wopi_src: str
    # expiry as epoch milliseconds, 0 when unknown
    access_token_ttl: int = Field(0, ge=0)


class ErrorResponse(BaseModel):
    error: str
    message: str
