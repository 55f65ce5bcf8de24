"""
VeloxCache — Strategy and facade factories.

Builds the per-tier strategies and the two-tier ``Cache`` facade from
``VeloxConfig``. Called once by ``Application`` while wiring the
application context.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from velox.faults import ConfigurationError

from .core import CacheStrategy, CacheTierConfig
from .serializers import get_serializer
from .service import Cache
from .strategies.memory import MemoryStrategy
from .strategies.null import NullStrategy

if TYPE_CHECKING:
    from velox.config import VeloxConfig

logger = logging.getLogger("velox.cache.providers")


def create_cache_strategy(config: CacheTierConfig) -> CacheStrategy:
    """
    Factory: create a cache strategy from a tier configuration.

    Args:
        config: CacheTierConfig instance

    Returns:
        Configured CacheStrategy
    """
    backend_type = config.backend.lower()

    try:
        serializer = get_serializer(config.serializer)
    except ValueError as exc:
        raise ConfigurationError(str(exc), serializer=config.serializer) from exc

    if backend_type == "memory":
        return MemoryStrategy(max_size=config.max_size, serializer=serializer)

    elif backend_type == "redis":
        from .strategies.redis import RedisStrategy

        return RedisStrategy(
            url=config.redis_url,
            socket_timeout=config.socket_timeout,
            connect_timeout=config.connect_timeout,
            key_prefix=config.key_prefix,
            serializer=serializer,
        )

    elif backend_type == "null":
        return NullStrategy()

    else:
        raise ConfigurationError(f"Unknown cache backend: {backend_type}", backend=backend_type)


def create_cache(config: "VeloxConfig") -> Cache:
    """
    Factory: create the two-tier Cache facade from application config.

    A tier whose ``enabled`` flag or the matching ``use_*_cache`` switch
    is off gets no strategy at all; the facade short-circuits it.
    """
    local_enabled = config.use_local_cache and config.local_cache.enabled
    global_enabled = config.use_global_cache and config.global_cache.enabled

    cache = Cache(
        local=create_cache_strategy(config.local_cache) if local_enabled else None,
        global_=create_cache_strategy(config.global_cache) if global_enabled else None,
        local_enabled=local_enabled,
        global_enabled=global_enabled,
        default_ttl=config.ttl_default,
    )
    logger.debug(f"Cache created: {cache!r}")
    return cache
