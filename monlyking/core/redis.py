"""
Redis connection, caching and pub/sub utilities.
"""
import json
from typing import Optional, Any, AsyncIterator
from redis import asyncio as aioredis
import structlog

from monlyking.core.config import settings

logger = structlog.get_logger(__name__)


class RedisClient:
    """Async Redis client wrapper with caching and pub/sub utilities."""

    def __init__(self):
        self.redis: Optional[aioredis.Redis] = None

    async def connect(self):
        """Establish Redis connection."""
        self.redis = await aioredis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            max_connections=10,
        )

    async def disconnect(self):
        """Close Redis connection."""
        if self.redis:
            await self.redis.close()
            self.redis = None

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        if not self.redis:
            return None
        value = await self.redis.get(key)
        if value:
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value
        return None

    async def set(
        self,
        key: str,
        value: Any,
        expire: Optional[int] = None
    ) -> bool:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: Value to cache
            expire: Expiration time in seconds

        Returns:
            True if successful
        """
        if not self.redis:
            return False

        if not isinstance(value, str):
            value = json.dumps(value, default=str)

        await self.redis.set(key, value, ex=expire)
        return True

    async def publish(self, channel: str, payload: dict) -> int:
        """
        Publish an event to a channel.

        Returns:
            Number of subscribers that received it (0 when disconnected)
        """
        if not self.redis:
            return 0
        try:
            return await self.redis.publish(channel, json.dumps(payload, default=str))
        except aioredis.RedisError as e:
            # Events are advisory, the stored record is authoritative
            logger.warning("redis_publish_failed", channel=channel, error=str(e))
            return 0

    async def subscribe(self, channel: str) -> AsyncIterator[dict]:
        """Yield decoded events published on a channel."""
        if not self.redis:
            return
        pubsub = self.redis.pubsub()
        await pubsub.subscribe(channel)
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    yield json.loads(message["data"])
                except json.JSONDecodeError:
                    continue
        finally:
            await pubsub.unsubscribe(channel)
            await pubsub.close()


def chat_channel(room: str) -> str:
    return f"chats:{room}"


def notification_channel(user_id: int) -> str:
    return f"notifications:{user_id}"


# Global Redis client instance
redis_client = RedisClient()


async def get_redis() -> RedisClient:
    """Dependency for getting Redis client."""
    return redis_client
