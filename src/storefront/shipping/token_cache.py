"""Keyed token store with expiry, injected into carrier clients.

Carrier clients never keep credentials in module globals; they receive a
cache and look tokens up by key. The in-memory implementation serves a single
process; a shared store can implement the same interface.
"""

import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class CachedToken:
    value: str
    expires_at: float


class TokenCache(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the live token for ``key`` or None if absent or expired."""
        ...

    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: float) -> None: ...

    @abstractmethod
    def invalidate(self, key: str) -> None: ...


class InMemoryTokenCache(TokenCache):
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, CachedToken] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: str, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = CachedToken(value=value, expires_at=self._clock() + ttl_seconds)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)
