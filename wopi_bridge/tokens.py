"""Access token issuance and resolution.

Two strategies share the same surface (``issue`` plus a way to turn a
presented token into a storage key):

* ``TokenRegistry`` mints random tokens and binds each to exactly one key.
  Entries expire after ``ttl_seconds`` and the registry never holds more
  than ``max_entries``; the oldest issued entry is evicted first.
* ``StatelessTokenPolicy`` stores nothing and accepts any token that
  contains a marker string. The storage key is whatever the caller puts in
  the request path, so it provides no access control at all. It exists for
  local testing and is only wired in when explicitly enabled.
"""

from __future__ import annotations

import secrets
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from wopi_bridge.exceptions import TokenNotFoundError


def _default_token() -> str:
    # 32 random bytes -> 43 url-safe characters
    return secrets.token_urlsafe(32)


@dataclass(frozen=True)
class _Binding:
    key: str
    expires_at: float


class TokenRegistry:
    def __init__(
        self,
        *,
        ttl_seconds: float = 10 * 3600,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
        token_factory: Callable[[], str] = _default_token,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._token_factory = token_factory
        self._entries: OrderedDict[str, _Binding] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def issue(self, key: str) -> str:
        """Mint a token bound to ``key`` and return it."""
        with self._lock:
            now = self._clock()
            self._sweep_locked(now)
            while len(self._entries) >= self.max_entries:
                self._entries.popitem(last=False)
                logger.debug("Evicted oldest access token to stay within {limit}", limit=self.max_entries)
            token = self._token_factory()
            while token in self._entries:
                token = self._token_factory()
            self._entries[token] = _Binding(key=key, expires_at=now + self.ttl_seconds)
        return token

    def resolve(self, token: str) -> str:
        with self._lock:
            binding = self._entries.get(token)
            if binding is None or binding.expires_at <= self._clock():
                raise TokenNotFoundError("Unknown or expired access token")
            return binding.key

    def expires_in(self, token: str) -> float:
        """Seconds until ``token`` expires (0 when it is unknown or expired)."""
        with self._lock:
            binding = self._entries.get(token)
            if binding is None:
                return 0.0
            return max(0.0, binding.expires_at - self._clock())

    def revoke(self, token: str) -> bool:
        with self._lock:
            return self._entries.pop(token, None) is not None

    def sweep_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def _sweep_locked(self, now: float) -> int:
        # insertion order == expiry order since the ttl is fixed
        removed = 0
        while self._entries:
            token, binding = next(iter(self._entries.items()))
            if binding.expires_at > now:
                break
            del self._entries[token]
            removed += 1
        return removed


class StatelessTokenPolicy:
    def __init__(self, marker: str = "test") -> None:
        if not marker:
            raise ValueError("marker must be non-empty")
        self.marker = marker

    def is_accepted(self, token: str) -> bool:
        return self.marker in token

    def issue(self, key: str) -> str:
        return self.marker


__all__ = ["TokenRegistry", "StatelessTokenPolicy"]
