"""
VeloxCache — In-process memory strategy.

The default local tier. Values are serialized on store (pickle by
default) so every fetch hands out a fresh copy; a cached ``Route`` can
never share its ``parameters`` with another request.

- LRU ordering via ``OrderedDict`` with O(1) access/eviction
- Passive expiry: expired entries are dropped when fetched, never swept
- Thread-safe via a single ``threading.Lock``
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Dict, Optional, Tuple

from ..core import DEFAULT_TTL, CacheStrategy, Keys, Tags, is_multi_key
from ..serializers import SERIALIZATION_ERRORS, PickleCacheSerializer, deserialize_or_miss

logger = logging.getLogger("velox.cache.memory")

_MISS = object()


class MemoryStrategy(CacheStrategy):
    """
    In-memory cache strategy with LRU capacity eviction.
    """

    def __init__(self, max_size: int = 10000, serializer: Optional[Any] = None, clock=time.monotonic):
        """
        Args:
            max_size: Maximum number of entries (0 = unbounded)
            serializer: Value serializer, pickle when omitted
            clock: Monotonic time source, injectable for expiry tests
        """
        self._max_size = max_size
        self._serializer = serializer or PickleCacheSerializer()
        self._clock = clock
        # key -> (expires_at | None, payload)
        self._store: "OrderedDict[str, Tuple[Optional[float], bytes]]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "memory"

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return self._get_payload(key) is not None

    def store(self, key: str, value: Any, ttl: int = DEFAULT_TTL, tags: Tags = None) -> bool:
        self.check_tags(tags)

        try:
            payload = self._serializer.serialize(value)
        except SERIALIZATION_ERRORS as e:
            logger.warning(f"Refusing to store '{key}': value is not serializable ({e})")
            return False

        expires_at = self._clock() + ttl if ttl and ttl > 0 else None

        with self._lock:
            if key in self._store:
                self._store.move_to_end(key)
            self._store[key] = (expires_at, payload)

            if self._max_size and len(self._store) > self._max_size:
                evicted, _ = self._store.popitem(last=False)
                logger.debug(f"Evicted '{evicted}' (capacity {self._max_size})")

        self.register_tags(key, tags, ttl)
        return True

    def fetch(self, key: Keys, default: Any = None) -> Any:
        if is_multi_key(key):
            found: Dict[str, Any] = {}
            with self._lock:
                payloads = {k: self._get_payload(k) for k in key}
            for sub_key, payload in payloads.items():
                if payload is None:
                    continue
                value = deserialize_or_miss(self._serializer, sub_key, payload, _MISS)
                if value is not _MISS:
                    found[sub_key] = value
            return found

        with self._lock:
            payload = self._get_payload(key)

        if payload is None:
            return default
        return deserialize_or_miss(self._serializer, key, payload, default)

    def remove(self, key: Keys) -> bool:
        keys = list(key) if is_multi_key(key) else [key]
        with self._lock:
            for sub_key in keys:
                self._store.pop(sub_key, None)
        return True

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def destroy(self) -> None:
        self.clear()

    def _get_payload(self, key: str) -> Optional[bytes]:
        """Return the raw payload, dropping the entry if it expired. Lock held."""
        entry = self._store.get(key)
        if entry is None:
            return None

        expires_at, payload = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._store[key]
            return None

        self._store.move_to_end(key)
        return payload
