"""Redis implementation of CacheStore.

Each (keyword, context) pair owns one Redis list. Inserts append a new
JSON record to the list and lookups read its first element, so the first
stored result for a key is authoritative and records are never updated
in place.
"""

import hashlib
import json
import time
import uuid

import redis.asyncio as redis
from redis.exceptions import RedisError

from textcache.config import Settings, get_redis_client
from textcache.entities import CacheEntryEntity
from textcache.errors import StorageError
from textcache.logging_config import get_logger

logger = get_logger(__name__)

_KEY_SEPARATOR = "\x1f"


class RedisCacheRepository:
    """Redis implementation of the CacheStore protocol.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str = "textcache",
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: asyncio Redis client. Must decode responses.
            key_prefix: Namespace for every key this repository writes.
        """
        self._client = redis_client
        self._prefix = key_prefix

    @classmethod
    def create(cls, settings: Settings) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository from settings.

        Args:
            settings: Application settings

        Returns:
            Configured RedisCacheRepository
        """
        return cls(
            redis_client=get_redis_client(settings),
            key_prefix=settings.cache_key_prefix,
        )

    def _make_key(self, keyword: str, context: str) -> str:
        digest = hashlib.sha256(
            f"{keyword}{_KEY_SEPARATOR}{context}".encode("utf-8")
        ).hexdigest()
        return f"{self._prefix}:{digest}"

    async def lookup(self, keyword: str, context: str) -> CacheEntryEntity | None:
        """Find the first stored entry for (keyword, context).

        Args:
            keyword: The primary input text
            context: Disambiguating text ("" for none)

        Returns:
            The stored entry, or None on a miss

        Raises:
            StorageError: If Redis fails or the stored record is corrupt
        """
        key = self._make_key(keyword, context)
        try:
            raw = await self._client.lindex(key, 0)
        except RedisError as e:
            raise StorageError(f"Cache lookup failed: {e}", {"key": key}) from e

        if raw is None:
            return None

        try:
            record = json.loads(raw)
            entry = CacheEntryEntity(
                keyword=record["keyword"],
                context=record["context"],
                result=record["result"],
                id=record.get("id"),
                created_at=record.get("created_at"),
            )
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise StorageError(f"Corrupt cache record: {e}", {"key": key}) from e

        # Digest collisions are not expected, but never serve a foreign record
        if entry.keyword != keyword or entry.context != context:
            logger.warning("Cache key collision", key=key)
            return None

        return entry

    async def insert(self, entry: CacheEntryEntity) -> CacheEntryEntity:
        """Append a new record for the entry.

        Args:
            entry: The entry to store; its ``id`` is ignored

        Returns:
            The stored entry with a fresh id and timestamp

        Raises:
            StorageError: If Redis fails
        """
        stored = CacheEntryEntity(
            keyword=entry.keyword,
            context=entry.context,
            result=entry.result,
            id=uuid.uuid4().hex,
            created_at=time.time(),
        )
        key = self._make_key(stored.keyword, stored.context)
        payload = json.dumps(
            {
                "id": stored.id,
                "keyword": stored.keyword,
                "context": stored.context,
                "result": stored.result,
                "created_at": stored.created_at,
            },
            ensure_ascii=False,
        )

        try:
            await self._client.rpush(key, payload)
        except RedisError as e:
            raise StorageError(f"Cache insert failed: {e}", {"key": key}) from e

        return stored

    async def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()
