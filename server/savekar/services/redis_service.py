# server/savekar/services/redis_service.py

import json
import logging
from typing import Optional

import redis
from flask import current_app

logger = logging.getLogger(__name__)

KEY_PREFIX = "savekar"


class RedisService:
    _client: Optional[redis.Redis] = None
    _initialized: bool = False

    def __init__(self):
        if not RedisService._initialized:
            self._connect()
        self.client = RedisService._client

    def _connect(self) -> None:
        RedisService._initialized = True

        redis_url = current_app.config.get("REDIS_URL")

        if not redis_url:
            logger.info("Redis not configured, metadata caching disabled")
            return

        try:
            if "upstash.io" in redis_url and redis_url.startswith("redis://"):
                redis_url = redis_url.replace("redis://", "rediss://", 1)

            RedisService._client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_timeout=10,
                socket_connect_timeout=10,
                retry_on_timeout=True,
                health_check_interval=30
            )

            RedisService._client.ping()
            logger.info("Redis connected")

        except redis.RedisError as e:
            logger.warning(f"Redis connection failed: {e}")
            RedisService._client = None

    @classmethod
    def reset(cls) -> None:
        cls._client = None
        cls._initialized = False

    def _available(self) -> bool:
        if self.client is None:
            return False
        try:
            self.client.ping()
            return True
        except redis.RedisError:
            return False

    def _key(self, *parts) -> str:
        return f"{KEY_PREFIX}:{':'.join(str(p) for p in parts)}"

    def ping(self) -> bool:
        return self._available()

    # Metadata caching
    def cache_metadata(self, url_hash: str, metadata: dict, ttl: int = None) -> bool:
        if not self._available():
            return False

        try:
            ttl = ttl or current_app.config.get("CACHE_TTL_METADATA", 86400)
            self.client.setex(self._key("metadata", url_hash), ttl, json.dumps(metadata))
            return True
        except (redis.RedisError, TypeError) as e:
            logger.debug(f"Cache write failed: {e}")
            return False

    def get_cached_metadata(self, url_hash: str) -> Optional[dict]:
        if not self._available():
            return None

        try:
            data = self.client.get(self._key("metadata", url_hash))
            return json.loads(data) if data else None
        except (redis.RedisError, ValueError):
            return None
