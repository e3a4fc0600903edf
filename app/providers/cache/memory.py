import logging
import time
from collections.abc import Callable

from app.providers.cache.base import CacheStore

logger = logging.getLogger(__name__)


class InMemoryCacheStore(CacheStore):
    """Process-local cache store with per-entry expiry"""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self._clock() >= expires_at:
            # Concurrent writers may have replaced the entry already.
            if self._entries.get(key) is entry:
                del self._entries[key]
            logger.debug(f"Cache entry expired: {key}")
            return None

        return value

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        now = self._clock()
        self.purge_expired(now)
        self._entries[key] = (value, now + ttl_seconds)

    def purge_expired(self, now: float | None = None) -> int:
        """Drop every expired entry and return how many were removed"""
        now = self._clock() if now is None else now
        expired = [
            key for key, (_, expires_at) in self._entries.items() if now >= expires_at
        ]
        for key in expired:
            del self._entries[key]

        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    async def health_check(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._entries)
