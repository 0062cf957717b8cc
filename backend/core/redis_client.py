# backend/core/redis_client.py
import redis.asyncio as redis

from .config import settings

redis_client = redis.Redis.from_url(settings.redis_url)
