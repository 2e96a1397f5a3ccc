from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Iterator, Protocol


@dataclass(frozen=True)
class ObjectHead:
    size: int
    modified_at: datetime

    @property
    def version(self) -> str:
        """Modification time in epoch milliseconds."""
        return str(int(self.modified_at.timestamp() * 1000))


class ObjectStorage(Protocol):
    """Key-addressed byte storage.

    Every method raises ``ObjectNotFoundError`` when the key is absent,
    ``BackendUnavailableError`` when the backend cannot be reached and
    ``BackendError`` for anything else.
    """

    def head(self, key: str) -> ObjectHead:
        ...

    def get_content(self, key: str) -> Iterator[bytes]:
        """Open the object and return a lazy chunk iterator.

        The fetch itself happens before this returns so an absent key fails
        here rather than on the first chunk.
        """
        ...

    def put_content(self, key: str, data: bytes | BinaryIO, content_length: int) -> None:
        ...


__all__ = ["ObjectHead", "ObjectStorage"]
