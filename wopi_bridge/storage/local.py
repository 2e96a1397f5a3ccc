from __future__ import annotations

import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Iterator

from wopi_bridge.exceptions import BackendError, ObjectNotFoundError
from wopi_bridge.storage.base import ObjectHead


class LocalStorage:
    """Filesystem-backed storage rooted at ``root``; keys map to relative paths."""

    def __init__(self, root: Path, chunk_size: int = 64 * 1024) -> None:
        self.root = root.resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.chunk_size = chunk_size

    def _path(self, key: str, *, writing: bool = False) -> Path:
        parts = [part for part in PurePosixPath(key.replace("\\", "/")).parts if part not in {"", ".", "/"}]
        candidate = self.root.joinpath(*parts).resolve() if parts else self.root
        if self.root not in candidate.parents:
            if writing:
                raise BackendError("Key resolves outside the storage root", {"key": key})
            raise ObjectNotFoundError("Object not found", {"key": key})
        return candidate

    def head(self, key: str) -> ObjectHead:
        path = self._path(key)
        try:
            stat = path.stat()
        except FileNotFoundError as exc:
            raise ObjectNotFoundError("Object not found", {"key": key}) from exc
        except OSError as exc:
            raise BackendError("Stat failed", {"key": key, "reason": str(exc)}) from exc
        if not path.is_file():
            raise ObjectNotFoundError("Object not found", {"key": key})
        return ObjectHead(
            size=stat.st_size,
            modified_at=datetime.fromtimestamp(stat.st_mtime_ns / 1e9, tz=timezone.utc),
        )

    def get_content(self, key: str) -> Iterator[bytes]:
        path = self._path(key)
        try:
            fp = path.open("rb")
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise ObjectNotFoundError("Object not found", {"key": key}) from exc
        except OSError as exc:
            raise BackendError("Open failed", {"key": key, "reason": str(exc)}) from exc
        return self._iter_file(fp)

    def _iter_file(self, fp: BinaryIO) -> Iterator[bytes]:
        with fp:
            while chunk := fp.read(self.chunk_size):
                yield chunk

    def put_content(self, key: str, data: bytes | BinaryIO, content_length: int) -> None:
        path = self._path(key, writing=True)
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # write-then-rename so readers never see a partial object
            with tempfile.NamedTemporaryFile(dir=path.parent, prefix=".upload-", delete=False) as tmp:
                tmp_name = tmp.name
                if isinstance(data, (bytes, bytearray)):
                    tmp.write(data)
                else:
                    shutil.copyfileobj(data, tmp, self.chunk_size)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name:
                Path(tmp_name).unlink(missing_ok=True)
            raise BackendError("Write failed", {"key": key, "reason": str(exc)}) from exc


__all__ = ["LocalStorage"]
