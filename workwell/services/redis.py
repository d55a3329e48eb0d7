"""
Redis Service for durable worker storage.

Thin async wrapper over redis.asyncio. Worker records are stored as JSON
documents, one key per worker, plus a set indexing every known id:

    workwell:worker:{id}   JSON WorkerRecord (camelCase)
    workwell:workers       SET of worker ids

Connection helpers swallow errors and report success as a bool. The worker
document methods let errors propagate so the repository can decide to fall
back.
"""

import logging
from typing import List, Optional

import redis.asyncio as aioredis

from workwell.config.settings import settings

logger = logging.getLogger("workwell.redis")

WORKER_KEY = "workwell:worker:{worker_id}"
WORKER_INDEX = "workwell:workers"


class RedisService:
    """Async Redis service for worker documents."""

    def __init__(self, url: str = None, timeout: float = None):
        self.url = url or settings.redis_url
        self.timeout = timeout or settings.redis_socket_timeout
        self.redis: Optional[aioredis.Redis] = None

    async def connect(self) -> bool:
        """Establish connection to Redis."""
        try:
            self.redis = aioredis.from_url(
                self.url,
                decode_responses=True,
                socket_timeout=self.timeout,
                socket_connect_timeout=self.timeout,
            )
            await self.redis.ping()
            return True
        except Exception as e:
            logger.warning("Redis connection to %s failed: %s", self.url, e)
            return False

    async def disconnect(self):
        """Close Redis connection."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None

    async def ping(self) -> bool:
        """Check if Redis is reachable."""
        try:
            if self.redis:
                await self.redis.ping()
                return True
        except Exception:
            pass
        return False

    # --- Worker documents ---

    async def get_worker(self, worker_id: int) -> Optional[str]:
        """Raw JSON document for one worker, or None."""
        return await self.redis.get(WORKER_KEY.format(worker_id=worker_id))

    async def get_workers(self) -> List[str]:
        """Raw JSON documents for every indexed worker."""
        ids = await self.redis.smembers(WORKER_INDEX)
        if not ids:
            return []
        keys = [WORKER_KEY.format(worker_id=worker_id) for worker_id in ids]
        docs = await self.redis.mget(keys)
        return [doc for doc in docs if doc is not None]

    async def put_worker(self, worker_id: int, document: str) -> None:
        """Write one worker document and index its id."""
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(WORKER_KEY.format(worker_id=worker_id), document)
            pipe.sadd(WORKER_INDEX, worker_id)
            await pipe.execute()


# Singleton
_redis_service: Optional[RedisService] = None


async def get_redis_service() -> RedisService:
    """Get or create the Redis service singleton."""
    global _redis_service
    if _redis_service is None:
        _redis_service = RedisService()
        await _redis_service.connect()
    return _redis_service


async def close_redis_service():
    """Close the Redis service connection."""
    global _redis_service
    if _redis_service:
        await _redis_service.disconnect()
        _redis_service = None
