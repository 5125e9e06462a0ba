"""Redis cache for per-keyword eBay lookups.

Repeated part numbers are common (users resend lists with one line changed),
so each keyword's best listing is cached per search mode. The cache is
strictly best-effort: every Redis failure is logged and treated as a miss.
"""

import hashlib
import json
import logging
from datetime import datetime
from typing import Any, cast

import redis.asyncio as redis

from ..config import CacheConfig
from ..models import KeywordResult, SearchMode

logger = logging.getLogger(__name__)


class CacheService:
    """Caches keyword search results in Redis."""

    def __init__(self, config: CacheConfig):
        """Initialize the cache service.

        Args:
            config: Redis connection settings.
        """
        self.config = config
        self._redis: redis.Redis | None = None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def _get_client(self) -> redis.Redis | None:
        """Return active Redis client if connected."""
        if not self._connected or self._redis is None:
            return None
        return self._redis

    async def connect(self) -> bool:
        """Connect to the Redis server.

        Returns:
            True if the connection succeeded, False otherwise.
        """
        if not self.config.enabled:
            return False

        try:
            client = redis.from_url(
                self.config.redis_url,
                decode_responses=True,
                retry_on_timeout=True,
                health_check_interval=30,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            await client.ping()
            self._redis = client
            self._connected = True
            logger.info("Connected to Redis")
            return True

        except Exception as e:
            logger.warning(f"Could not connect to Redis: {e}")
            self._connected = False
            return False

    @staticmethod
    def _generate_key(mode: SearchMode, keyword: str) -> str:
        """Build a hashed cache key for a keyword in a search mode."""
        normalized = keyword.lower().strip()
        digest = hashlib.sha256(normalized.encode("utf-8")).hexdigest()
        return f"part_bot:keyword:{SearchMode(mode).value}:{digest}"

    async def get_keyword_result(self, mode: SearchMode, keyword: str) -> KeywordResult | None:
        """Return a cached result for the keyword, or None on a miss."""
        client = self._get_client()
        if client is None:
            return None

        try:
            cached = await client.get(self._generate_key(mode, keyword))
            if not cached:
                logger.debug(f"Cache miss for keyword: {keyword}")
                return None

            payload = cast(dict[str, Any], json.loads(cached))
            payload.pop("_cached_at", None)
            # The cached entry may belong to a differently-cased spelling
            payload["keyword"] = keyword
            logger.debug(f"Cache hit for keyword: {keyword}")
            return KeywordResult.model_validate(payload)

        except Exception as e:
            logger.warning(f"Failed to read keyword cache: {e}")
            return None

    async def set_keyword_result(self, mode: SearchMode, result: KeywordResult) -> bool:
        """Cache a found keyword result.

        Absent results are not cached so that newly listed parts show up
        on the next request.

        Returns:
            True if the result was written.
        """
        client = self._get_client()
        if client is None or not result.found:
            return False

        try:
            payload = result.model_dump(mode="json")
            payload["_cached_at"] = datetime.now().isoformat()
            await client.setex(
                self._generate_key(mode, result.keyword),
                self.config.keyword_ttl,
                json.dumps(payload, ensure_ascii=False),
            )
            return True

        except Exception as e:
            logger.warning(f"Failed to write keyword cache: {e}")
            return False

    async def close(self) -> None:
        """Close the Redis connection."""
        client = self._get_client()
        if client:
            try:
                await client.aclose()
                logger.info("Redis connection closed")
            except Exception as e:
                logger.warning(f"Error closing Redis: {e}")
            finally:
                self._connected = False
                self._redis = None
