import asyncio
import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from core.exceptions import StoreError

logger = logging.getLogger(__name__)


class RedisClient:
    """Key-value backend on redis.asyncio. Values are plain strings."""

    def __init__(self, url: str, max_retries: int = 3, socket_timeout: float = 10):
        self.url = url
        self.redis_client: Optional[redis.Redis] = None
        self._connected = False
        self._max_retries = max_retries
        self._socket_timeout = socket_timeout

    async def connect(self):
        """Connect to Redis, retrying with a linear backoff."""
        for attempt in range(self._max_retries):
            try:
                self.redis_client = redis.from_url(
                    self.url,
                    decode_responses=True,
                    socket_timeout=self._socket_timeout,
                    socket_connect_timeout=self._socket_timeout,
                )
                await self.redis_client.ping()
                self._connected = True
                logger.info("✅ Connected to Redis")
                return
            except (RedisError, OSError) as e:
                logger.warning(
                    f"⚠️ Attempt {attempt + 1}/{self._max_retries} - Redis connection error: {e}"
                )
                if attempt < self._max_retries - 1:
                    await asyncio.sleep(1 * (attempt + 1))
                else:
                    logger.error(
                        f"❌ Could not connect to Redis after {self._max_retries} attempts"
                    )
                    self._connected = False

    async def disconnect(self):
        """Disconnect from Redis."""
        if self.redis_client:
            try:
                await self.redis_client.aclose()
                logger.info("🔌 Disconnected from Redis")
            except (RedisError, OSError) as e:
                logger.warning(f"⚠️ Error disconnecting from Redis: {e}")
            finally:
                self.redis_client = None
                self._connected = False

    async def _client(self) -> redis.Redis:
        if not self.redis_client:
            await self.connect()
        if not self.redis_client:
            raise StoreError("connect", self.url)
        return self.redis_client

    async def get(self, key: str) -> Optional[str]:
        """
        Raises:
            StoreError: If the read fails or the value is not valid UTF-8
        """
        client = await self._client()
        try:
            return await client.get(key)
        except (RedisError, OSError) as e:
            raise StoreError("get", key, e) from e
        except UnicodeDecodeError as e:
            logger.warning(f"⚠️ Undecodable value under {key}")
            raise StoreError("get", key, e) from e

    async def set(self, key: str, value: str, expire: Optional[int] = None) -> None:
        """Store ``value`` with TTL ``expire`` seconds (SET ... EX)."""
        client = await self._client()
        try:
            await client.set(key, value, ex=expire)
            logger.debug(f"💾 Saved to Redis: {key}")
        except (RedisError, OSError) as e:
            raise StoreError("set", key, e) from e

    async def delete(self, key: str) -> None:
        client = await self._client()
        try:
            await client.delete(key)
            logger.debug(f"🗑️ Deleted from Redis: {key}")
        except (RedisError, OSError) as e:
            raise StoreError("delete", key, e) from e

    async def ping(self) -> bool:
        if not self.redis_client:
            return False
        try:
            return bool(await self.redis_client.ping())
        except (RedisError, OSError) as e:
            logger.warning(f"⚠️ Redis ping failed: {e}")
            return False
