"""
VeloxCache — Two-tier caching with tag-based invalidation.

A ``Cache`` facade routes every call to one of two strategies selected
per call: ``local`` (process/machine local, fast) or ``global`` (shared
between machines). Either tier can be disabled without callers noticing.

Usage::

    from velox.cache import Cache, MemoryStrategy

    cache = Cache(local=MemoryStrategy(), global_enabled=False)
    cache.store_local("user|1", {"name": "Ann"}, ttl=60, tags="users")
    cache.fetch_local("user|1")
    cache.clear_by_tag_local("users")
"""

from .core import (
    DEFAULT_TTL,
    CacheStrategy,
    CacheTier,
    CacheTierConfig,
)

from .strategies.memory import MemoryStrategy
from .strategies.null import NullStrategy
from .strategies.redis import RedisStrategy

from .serializers import JsonCacheSerializer, PickleCacheSerializer, get_serializer
from .service import Cache
from .providers import create_cache, create_cache_strategy

__all__ = [
    "DEFAULT_TTL",
    "CacheStrategy",
    "CacheTier",
    "CacheTierConfig",
    "MemoryStrategy",
    "NullStrategy",
    "RedisStrategy",
    "JsonCacheSerializer",
    "PickleCacheSerializer",
    "get_serializer",
    "Cache",
    "create_cache",
    "create_cache_strategy",
]
