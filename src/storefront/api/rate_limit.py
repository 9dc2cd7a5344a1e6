"""Per-client request limits for the public endpoints.

Counters live in a keyed store with expiry that is injected the same way the
carrier adapter is; the in-memory store serves a single process and a shared
store can implement the same interface for several instances.
"""

import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from fastapi import Request

from storefront import config
from storefront.errors import RateLimitedError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    key: str
    limit: int
    window_seconds: float


PLACE_ORDER = RateLimitRule(key="POST:/api/orders", limit=5, window_seconds=60)
LIST_PRODUCTS = RateLimitRule(key="GET:/api/products", limit=50, window_seconds=60)
PAYMENT_WEBHOOK = RateLimitRule(key="POST:/api/webhooks/mercadopago", limit=200, window_seconds=15 * 60)


@dataclass
class Window:
    count: int
    resets_at: float


@dataclass(frozen=True)
class Hit:
    count: int
    retry_after: float


class RateLimitStore(ABC):
    @abstractmethod
    def hit(self, key: str, window_seconds: float) -> Hit:
        """Count one request against ``key``; the window starts on its first request."""
        ...

    @abstractmethod
    def clear(self) -> None: ...


class InMemoryRateLimitStore(RateLimitStore):
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._windows: dict[str, Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, window_seconds: float) -> Hit:
        with self._lock:
            now = self._clock()
            self._windows = {k: w for k, w in self._windows.items() if w.resets_at > now}
            window = self._windows.get(key)
            if window is None:
                window = self._windows[key] = Window(count=0, resets_at=now + window_seconds)
            window.count += 1
            return Hit(count=window.count, retry_after=window.resets_at - now)

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()


_store_instance: RateLimitStore | None = None


def get_rate_limit_store() -> RateLimitStore:
    global _store_instance
    if _store_instance is None:
        _store_instance = InMemoryRateLimitStore()
    return _store_instance


def set_rate_limit_store(store: RateLimitStore) -> None:
    global _store_instance
    _store_instance = store


def reset_rate_limit_store() -> None:
    global _store_instance
    _store_instance = None


def client_id(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    ip = forwarded.split(",")[0].strip() or request.headers.get("x-real-ip", "")
    if not ip and request.client:
        ip = request.client.host
    return ip or "unknown"


def check_rate_limit(request: Request, rule: RateLimitRule) -> tuple[bool, float]:
    """Return whether the request is within ``rule`` and the seconds until its window resets."""
    if not config.rate_limit_enabled():
        return True, 0.0

    hit = get_rate_limit_store().hit(f"{rule.key}:{client_id(request)}", rule.window_seconds)
    return hit.count <= rule.limit, hit.retry_after


def rate_limit(rule: RateLimitRule, reject: bool = True) -> Callable[[Request], bool]:
    """FastAPI dependency enforcing ``rule`` per client.

    With ``reject`` the request fails with 429; without it the dependency
    yields False and the route decides how to answer.
    """

    def _dependency(request: Request) -> bool:
        allowed, retry_after = check_rate_limit(request, rule)
        if allowed:
            return True

        logger.warning("Rate limit exceeded", key=rule.key, client=client_id(request), limit=rule.limit)
        if reject:
            raise RateLimitedError(retry_after=retry_after)
        return False

    return _dependency
