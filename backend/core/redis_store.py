from __future__ import annotations

from typing import Optional

import redis.asyncio as redis

from .contracts import KeyValueStore
from .redis_client import redis_client as default_client


class RedisStore(KeyValueStore):
    def __init__(self, client: Optional[redis.Redis] = None):
        self.client = client or default_client

    async def set(self, key: str, value: str, expire: Optional[int] = None) -> None:
        await self.client.set(key, value)
        if expire:
            await self.client.expire(key, expire)

    async def get(self, key: str):
        return await self.client.get(key)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def close(self) -> None:
        await self.client.aclose()
