from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from order_workflow.core.ports.outbound.cache import CacheStore

logger = logging.getLogger(__name__)


@dataclass
class RedisCacheStore(CacheStore):
    """
    Cache backed by Redis. Payloads are stored as JSON strings with a per-key
    expiry. Redis or serialization failures are logged and swallowed: a failed
    read is a miss, a failed write is a no-op.

    The client must be created with ``decode_responses=True``.
    """

    client: aioredis.Redis

    @classmethod
    def from_url(cls, url: str) -> "RedisCacheStore":
        return cls(aioredis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self.client.get(key)
        except RedisError:
            logger.error("Error getting value from cache for key: %s", key, exc_info=True)
            return None
        if raw is None:
            logger.debug("Cache miss for key: %s", key)
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            logger.error("Undecodable cache entry for key: %s", key)
            return None
        logger.debug("Cache hit for key: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl: timedelta) -> None:
        try:
            payload = json.dumps(value)
            await self.client.set(key, payload, ex=max(1, int(ttl.total_seconds())))
        except (RedisError, TypeError, ValueError):
            logger.error("Error setting value in cache for key: %s", key, exc_info=True)
            return
        logger.debug("Value cached for key: %s with expiration: %s", key, ttl)

    async def remove(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError:
            logger.error("Error removing value from cache for key: %s", key, exc_info=True)
            return
        logger.debug("Cache entry removed for key: %s", key)

    async def close(self) -> None:
        await self.client.aclose()
