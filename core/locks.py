"""Per-key asyncio locks for serializing work on a single user."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class KeyedLock:
    """
    Hands out one asyncio.Lock per key.

    Locks are process-local: they serialize concurrent deliveries for the
    same user inside one instance only. Entries are dropped once no
    coroutine holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                self._waiters.pop(key, None)
                self._locks.pop(key, None)

    def __len__(self) -> int:
        return len(self._locks)


class NullLock:
    """Drop-in replacement for KeyedLock that never blocks."""

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        yield

    def __len__(self) -> int:
        return 0
