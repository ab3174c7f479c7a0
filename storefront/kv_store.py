"""
Redis-backed key-value store for the storefront service.

Every key is prefixed with the configured namespace. Plain values are JSON
strings; order indices are native Redis lists so appends are atomic.
"""
import json
import logging
from typing import Any, List, Optional

import redis.asyncio as redis

from .config import KV_NAMESPACE, REDIS_URL

logger = logging.getLogger(__name__)


class KVStore:
    """Thin async wrapper around a Redis client."""

    def __init__(self, client: redis.Redis, namespace: str = KV_NAMESPACE):
        self.client = client
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(self._key(key))

    async def set(self, key: str, value: str) -> None:
        await self.client.set(self._key(key), value)

    async def delete(self, key: str) -> None:
        await self.client.delete(self._key(key))

    async def exists(self, key: str) -> bool:
        return bool(await self.client.exists(self._key(key)))

    async def get_json(self, key: str, default: Any = None) -> Any:
        """
        Get a JSON value.

        Args:
            key: Store key (without namespace)
            default: Returned when the key is absent

        Returns:
            The decoded value or default
        """
        value = await self.get(key)
        if value is None:
            return default
        return json.loads(value)

    async def set_json(self, key: str, value: Any) -> None:
        await self.set(key, json.dumps(value))

    async def append(self, key: str, member: str) -> int:
        """
        Atomically append a member to a list.

        Returns:
            Length of the list after the append
        """
        return await self.client.rpush(self._key(key), member)

    async def members(self, key: str) -> List[str]:
        """Return all list members in insertion order."""
        return await self.client.lrange(self._key(key), 0, -1)

    async def close(self) -> None:
        await self.client.aclose()


store = KVStore(redis.from_url(REDIS_URL, decode_responses=True))


def get_kv() -> KVStore:
    """
    Dependency function that provides the key-value store.

    Usage:
        Use as a FastAPI dependency to inject the store into route handlers.
    """
    return store
