"""
VeloxCache — Redis strategy for the global tier.

Shares cached state between every process and machine pointing at the
same Redis server. Connection use is synchronous with short socket
timeouts; read failures degrade to cache misses and write failures to
``False`` so a flaky cache never aborts a request.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..core import DEFAULT_TTL, CacheStrategy, Keys, Tags, is_multi_key
from ..serializers import SERIALIZATION_ERRORS, PickleCacheSerializer, deserialize_or_miss

logger = logging.getLogger("velox.cache.redis")

_MISS = object()


class RedisStrategy(CacheStrategy):
    """
    Redis-backed cache strategy (redis-py).

    Keys are namespaced with ``key_prefix`` so ``clear()`` only drops
    this application's entries instead of flushing the whole database.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        socket_timeout: float = 0.5,
        connect_timeout: float = 0.5,
        key_prefix: str = "vx:",
        serializer: Optional[Any] = None,
        client: Optional[Any] = None,
    ):
        """
        Args:
            url: Redis connection URL
            socket_timeout: Read/write timeout in seconds
            connect_timeout: Connect timeout in seconds
            key_prefix: Prefix applied to every key
            serializer: Value serializer, pickle when omitted
            client: Pre-built client (tests, shared pools)
        """
        self._url = url
        self._socket_timeout = socket_timeout
        self._connect_timeout = connect_timeout
        self._key_prefix = key_prefix
        self._serializer = serializer or PickleCacheSerializer()
        self._redis = client

    @property
    def name(self) -> str:
        return "redis"

    @property
    def client(self):
        """Lazily connected Redis client."""
        if self._redis is None:
            try:
                import redis
            except ImportError:
                raise ImportError(
                    "Redis strategy requires 'redis' package. "
                    "Install with: pip install velox[redis]"
                )

            self._redis = redis.Redis.from_url(
                self._url,
                socket_timeout=self._socket_timeout,
                socket_connect_timeout=self._connect_timeout,
            )
            logger.info(f"Redis cache configured: {self._url}")
        return self._redis

    def _make_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def store(self, key: str, value: Any, ttl: int = DEFAULT_TTL, tags: Tags = None) -> bool:
        import redis

        self.check_tags(tags)

        try:
            payload = self._serializer.serialize(value)
        except SERIALIZATION_ERRORS as e:
            logger.warning(f"Refusing to store '{key}': value is not serializable ({e})")
            return False

        try:
            if ttl and ttl > 0:
                stored = bool(self.client.set(self._make_key(key), payload, ex=int(ttl)))
            else:
                stored = bool(self.client.set(self._make_key(key), payload))
        except redis.RedisError as e:
            logger.warning(f"Redis SET failed for key '{key}': {e}")
            return False

        if stored:
            self.register_tags(key, tags, ttl)
        return stored

    def fetch(self, key: Keys, default: Any = None) -> Any:
        import redis

        try:
            if is_multi_key(key):
                keys = list(key)
                payloads = self.client.mget([self._make_key(k) for k in keys])
                found: Dict[str, Any] = {}
                for sub_key, payload in zip(keys, payloads):
                    if payload is None:
                        continue
                    value = deserialize_or_miss(self._serializer, sub_key, payload, _MISS)
                    if value is not _MISS:
                        found[sub_key] = value
                return found

            payload = self.client.get(self._make_key(key))
        except redis.RedisError as e:
            logger.warning(f"Redis GET failed (treating as miss): {e}")
            return {} if is_multi_key(key) else default

        if payload is None:
            return default
        return deserialize_or_miss(self._serializer, key, payload, default)

    def remove(self, key: Keys) -> bool:
        import redis

        keys = list(key) if is_multi_key(key) else [key]
        if not keys:
            return True

        try:
            self.client.delete(*[self._make_key(k) for k in keys])
        except redis.RedisError as e:
            logger.warning(f"Redis DELETE failed: {e}")
            return False
        return True

    def clear(self) -> None:
        keys = list(self.client.scan_iter(match=f"{self._key_prefix}*"))
        if keys:
            self.client.delete(*keys)

    def destroy(self) -> None:
        if self._redis is not None:
            self._redis.close()
            self._redis = None
