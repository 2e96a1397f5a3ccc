"""Storage gateway doubles and app builders shared by the API tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import BinaryIO, Iterator

from httpx import ASGITransport, AsyncClient

from wopi_bridge.exceptions import ObjectNotFoundError
from wopi_bridge.settings import Settings, TokenSettings, WopiSettings
from wopi_bridge.storage import ObjectHead

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class MemoryStorage:
    """In-memory gateway; every put advances the modification time by one second."""

    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects: dict[str, tuple[bytes, datetime]] = {}
        self.calls: list[tuple[str, str]] = []
        self._tick = 0
        for key, data in (objects or {}).items():
            self._store(key, data)

    def _store(self, key: str, data: bytes) -> None:
        self._tick += 1
        self.objects[key] = (data, EPOCH + timedelta(seconds=self._tick))

    def _lookup(self, key: str) -> tuple[bytes, datetime]:
        try:
            return self.objects[key]
        except KeyError:
            raise ObjectNotFoundError("Object not found", {"key": key}) from None

    def head(self, key: str) -> ObjectHead:
        self.calls.append(("head", key))
        data, modified_at = self._lookup(key)
        return ObjectHead(size=len(data), modified_at=modified_at)

    def get_content(self, key: str) -> Iterator[bytes]:
        self.calls.append(("get", key))
        data, _ = self._lookup(key)
        return iter([data[i:i + 2] for i in range(0, len(data), 2)])

    def put_content(self, key: str, data: bytes | BinaryIO, content_length: int) -> None:
        self.calls.append(("put", key))
        payload = data if isinstance(data, bytes) else data.read()
        assert len(payload) == content_length
        self._store(key, payload)


class UntouchableStorage:
    """Fails the test if the bridge reaches the storage gateway at all."""

    def head(self, key: str) -> ObjectHead:
        raise AssertionError(f"head({key!r}) must not be called")

    def get_content(self, key: str) -> Iterator[bytes]:
        raise AssertionError(f"get_content({key!r}) must not be called")

    def put_content(self, key: str, data: bytes | BinaryIO, content_length: int) -> None:
        raise AssertionError(f"put_content({key!r}) must not be called")


class FailingStorage:
    """Raises ``error`` from every operation."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    def head(self, key: str) -> ObjectHead:
        raise self.error

    def get_content(self, key: str) -> Iterator[bytes]:
        raise self.error

    def put_content(self, key: str, data: bytes | BinaryIO, content_length: int) -> None:
        raise self.error


def make_settings(*, max_body_bytes: int = 1024, stateless: bool = False) -> Settings:
    return Settings(
        wopi=WopiSettings(
            host_url="https://bridge.example",
            editor_url="https://office.example",
            max_body_bytes=max_body_bytes,
        ),
        tokens=TokenSettings(stateless_enabled=stateless),
    )


def make_client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
