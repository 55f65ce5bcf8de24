"""
VeloxCache — Core types and the strategy contract.

Defines the tier selector, per-tier configuration and the abstract
``CacheStrategy`` every backing store implements. Tag bookkeeping
(``tag -> {keys}`` index) is implemented once here on top of the
primitive ``store``/``fetch``/``remove`` operations so every strategy
gets identical semantics.

The tag index is maintained with a read-then-write cycle. Two processes
tagging keys under the same tag against a shared (global) backend can
lose one of the updates; such a key then simply is not removed by
``clear_by_tag`` and expires through its own TTL instead.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Sequence, Union

from velox.faults import InvalidArgumentError

logger = logging.getLogger("velox.cache")

DEFAULT_TTL = 3600
TAG_KEY_PREFIX = "velox.cache-tag-keys|"

Keys = Union[str, Sequence[str]]
Tags = Union[None, str, Iterable[str]]


class CacheTier(str, Enum):
    """Cache tier selector."""
    LOCAL = "local"     # Single-machine visible, fast
    GLOBAL = "global"   # Shared across machines, slower


@dataclass
class CacheTierConfig:
    """
    Configuration of a single cache tier.

    Loaded from the ``local_cache`` / ``global_cache`` sections of
    ``VeloxConfig``.
    """
    enabled: bool = True
    backend: str = "memory"          # "memory", "null", "redis"
    max_size: int = 10000            # Max entries for memory backend (0 = unbounded)
    key_prefix: str = "vx:"          # Key prefix for networked backends
    serializer: str = "pickle"       # "pickle", "json"

    # Redis-specific
    redis_url: str = "redis://localhost:6379/0"
    socket_timeout: float = 0.5
    connect_timeout: float = 0.5
    options: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "backend": self.backend,
            "max_size": self.max_size,
            "key_prefix": self.key_prefix,
            "serializer": self.serializer,
            "redis_url": self.redis_url,
            "socket_timeout": self.socket_timeout,
            "connect_timeout": self.connect_timeout,
            "options": dict(self.options),
        }


def is_multi_key(key: Keys) -> bool:
    """Whether ``key`` names several cache entries at once."""
    return not isinstance(key, str) and isinstance(key, (list, tuple, set, frozenset))


class CacheStrategy(ABC):
    """
    Abstract cache store.

    Contract:
    - ``store(key, value, ttl, tags)`` returns success as a bool. A ttl of
      0 never expires.
    - ``fetch(key, default)`` returns the value or ``default``; with a list
      of keys it returns a mapping holding only the keys that were found.
    - ``remove(key | keys)`` returns success as a bool.
    - Entries expire passively: fetching past the TTL is a miss.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name, used in logs and the CLI."""

    @abstractmethod
    def store(self, key: str, value: Any, ttl: int = DEFAULT_TTL, tags: Tags = None) -> bool:
        ...

    @abstractmethod
    def fetch(self, key: Keys, default: Any = None) -> Any:
        ...

    @abstractmethod
    def remove(self, key: Keys) -> bool:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    def destroy(self) -> None:
        """Release backend resources (connections, buffers)."""

    # ------------------------------------------------------------------
    # Tag index
    # ------------------------------------------------------------------

    @staticmethod
    def tag_key(tag: str) -> str:
        return f"{TAG_KEY_PREFIX}{tag}"

    @staticmethod
    def check_tags(tags: Tags) -> None:
        if tags is not None and not isinstance(tags, (str, list, tuple, set, frozenset)):
            raise InvalidArgumentError(
                "Invalid tags given, expected None, a string or a collection of strings",
                tags=tags,
            )

    def register_tags(self, key: str, tags: Tags, ttl: int) -> None:
        """Index ``key`` under a single tag or a collection of tags; called once ``key`` is stored."""
        self.check_tags(tags)
        if tags is None:
            return
        if isinstance(tags, str):
            self.associate_key_with_tag(key, tags, ttl)
        else:
            self.associate_key_with_tags(key, list(tags), ttl)

    def associate_key_with_tag(self, key: str, tag: str, ttl: int) -> None:
        """Append ``key`` to the key set of ``tag`` (idempotent)."""
        tag_key = self.tag_key(tag)
        keys = list(self.fetch(tag_key, []) or [])
        if key not in keys:
            keys.append(key)
            self.store(tag_key, keys, ttl)

    def associate_key_with_tags(self, key: str, tags: List[str], ttl: int) -> None:
        """
        Append ``key`` to the key sets of several tags.

        The existing key sets are read with a single batched fetch.
        """
        tag_keys = {tag: self.tag_key(tag) for tag in tags}
        existing = self.fetch(list(tag_keys.values())) or {}

        for tag_key in tag_keys.values():
            keys = list(existing.get(tag_key, []))
            if key not in keys:
                keys.append(key)
                self.store(tag_key, keys, ttl)

    def get_keys_by_tag(self, tag: str) -> List[str]:
        return list(self.fetch(self.tag_key(tag), []) or [])

    def clear_by_tag(self, tag: str) -> List[str]:
        """Remove every key indexed under ``tag`` and the index entry itself."""
        keys = self.get_keys_by_tag(tag)
        if keys:
            self.remove(keys)
        self.remove(self.tag_key(tag))
        logger.debug(f"Cleared {len(keys)} key(s) tagged '{tag}' from {self.name}")
        return keys

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
