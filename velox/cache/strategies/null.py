"""
VeloxCache — Null (no-op) strategy.

Used for testing, development, or when a tier should be configured but
hold nothing.
"""

from __future__ import annotations

from typing import Any

from ..core import DEFAULT_TTL, CacheStrategy, Keys, Tags, is_multi_key


class NullStrategy(CacheStrategy):
    """
    No-op cache strategy — every store succeeds, every fetch misses.
    """

    @property
    def name(self) -> str:
        return "null"

    def store(self, key: str, value: Any, ttl: int = DEFAULT_TTL, tags: Tags = None) -> bool:
        return True

    def fetch(self, key: Keys, default: Any = None) -> Any:
        if is_multi_key(key):
            return {}
        return default

    def remove(self, key: Keys) -> bool:
        return True

    def clear(self) -> None:
        pass
