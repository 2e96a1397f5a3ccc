"""Storage gateway (S3 or local filesystem)."""

from __future__ import annotations

from pathlib import Path

from wopi_bridge.exceptions import ConfigurationError
from wopi_bridge.settings import StorageSettings
from wopi_bridge.storage.base import ObjectHead, ObjectStorage
from wopi_bridge.storage.local import LocalStorage
from wopi_bridge.storage.s3 import S3Storage


def build_storage(settings: StorageSettings) -> ObjectStorage:
    if settings.backend == "local":
        return LocalStorage(Path(settings.local_root), chunk_size=settings.chunk_size)
    if not settings.bucket_name:
        raise ConfigurationError(
            "S3 bucket is not configured",
            {"bucket_env": settings.bucket_env},
        )
    return S3Storage(
        settings.bucket_name,
        prefix=settings.prefix,
        region=settings.region_name,
        endpoint_url=settings.endpoint_url,
        chunk_size=settings.chunk_size,
    )


__all__ = ["ObjectHead", "ObjectStorage", "LocalStorage", "S3Storage", "build_storage"]
