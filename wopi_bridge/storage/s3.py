from __future__ import annotations

from typing import Any, BinaryIO, Iterator, Optional

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    ReadTimeoutError,
)

from wopi_bridge.exceptions import BackendError, BackendUnavailableError, ObjectNotFoundError, StorageError
from wopi_bridge.storage.base import ObjectHead

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}
_UNAVAILABLE_CODES = {"500", "503", "InternalError", "ServiceUnavailable", "SlowDown", "RequestTimeout"}


class S3Storage:
    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        chunk_size: int = 64 * 1024,
        client: Any = None,
    ) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.chunk_size = chunk_size
        if client is None:
            session = boto3.session.Session(region_name=region) if region else boto3.session.Session()
            client = session.client("s3", endpoint_url=endpoint_url)
        self.client = client

    def _key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    def _translate(self, exc: Exception, operation: str, key: str) -> StorageError | ObjectNotFoundError:
        details = {"bucket": self.bucket, "key": key, "operation": operation, "reason": str(exc)}
        if isinstance(exc, ClientError):
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_CODES:
                return ObjectNotFoundError("Object not found", {"key": key})
            if code in _UNAVAILABLE_CODES:
                return BackendUnavailableError("Object store unavailable", details)
            return BackendError(f"{operation} failed", details)
        if isinstance(exc, (BotoConnectionError, ReadTimeoutError)):
            return BackendUnavailableError("Object store unavailable", details)
        return BackendError(f"{operation} failed", details)

    def head(self, key: str) -> ObjectHead:
        try:
            response = self.client.head_object(Bucket=self.bucket, Key=self._key(key))
        except (ClientError, BotoCoreError) as exc:
            raise self._translate(exc, "HeadObject", key) from exc
        return ObjectHead(size=int(response["ContentLength"]), modified_at=response["LastModified"])

    def get_content(self, key: str) -> Iterator[bytes]:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=self._key(key))
        except (ClientError, BotoCoreError) as exc:
            raise self._translate(exc, "GetObject", key) from exc
        return self._iter_body(response["Body"], key)

    def _iter_body(self, body: Any, key: str) -> Iterator[bytes]:
        try:
            yield from body.iter_chunks(self.chunk_size)
        except BotoCoreError as exc:
            raise self._translate(exc, "GetObject", key) from exc
        finally:
            body.close()

    def put_content(self, key: str, data: bytes | BinaryIO, content_length: int) -> None:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=self._key(key),
                Body=data,
                ContentLength=content_length,
            )
        except (ClientError, BotoCoreError) as exc:
            raise self._translate(exc, "PutObject", key) from exc


__all__ = ["S3Storage"]
