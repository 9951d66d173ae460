"""In-process key-value backend with per-key expiry."""

import logging
import time
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


class MemoryClient:
    """
    Dictionary-backed stand-in for RedisClient.

    Used when STATE_BACKEND=memory (local development, single instance) and
    in tests. Expired keys are purged lazily on access. The clock is
    injectable so expiry can be tested without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._storage: Dict[str, str] = {}
        self._expiry: Dict[str, float] = {}
        self._clock = clock

    def _cleanup_expired(self) -> None:
        now = self._clock()
        expired = [key for key, deadline in self._expiry.items() if now >= deadline]
        for key in expired:
            self._storage.pop(key, None)
            self._expiry.pop(key, None)

    async def connect(self) -> None:
        logger.info("Using in-memory state backend")

    async def disconnect(self) -> None:
        self._storage.clear()
        self._expiry.clear()

    async def get(self, key: str) -> Optional[str]:
        self._cleanup_expired()
        return self._storage.get(key)

    async def set(self, key: str, value: str, expire: Optional[int] = None) -> None:
        self._storage[key] = value
        if expire:
            self._expiry[key] = self._clock() + expire
        else:
            self._expiry.pop(key, None)
        logger.debug(f"💾 Saved in memory: {key}")

    async def delete(self, key: str) -> None:
        self._storage.pop(key, None)
        self._expiry.pop(key, None)

    async def ping(self) -> bool:
        return True

    def ttl(self, key: str) -> Optional[float]:
        """Seconds left for ``key``, or None when it has no expiry."""
        deadline = self._expiry.get(key)
        if deadline is None:
            return None
        return max(0.0, deadline - self._clock())

    def __contains__(self, key: str) -> bool:
        self._cleanup_expired()
        return key in self._storage
