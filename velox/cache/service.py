"""
VeloxCache — Two-tier cache facade.

``Cache`` holds one strategy per tier ("local" and "global") plus an
enabled flag for each. Callers never special-case a disabled tier:
stores and removes report success, fetches return the default, and the
backing strategy is not touched at all.

An instance lives on the application context; there is no process-wide
cache state.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

from velox.faults import ConfigurationError, InvalidArgumentError

from .core import DEFAULT_TTL, CacheStrategy, CacheTier, Keys, Tags, is_multi_key

logger = logging.getLogger("velox.cache.service")

TierSelector = Union[CacheTier, str]


class Cache:
    """
    Two-tier (local/global) cache facade with tag-based invalidation.

    Example:
        ```python
        cache = Cache(local=MemoryStrategy(), global_=RedisStrategy(url))
        cache.store_local("user|1", user, ttl=60, tags="users")
        cache.fetch(CacheTier.GLOBAL, "settings", default={})
        cache.clear_by_tag_local("users")
        ```
    """

    def __init__(
        self,
        local: Optional[CacheStrategy] = None,
        global_: Optional[CacheStrategy] = None,
        *,
        local_enabled: bool = True,
        global_enabled: bool = True,
        default_ttl: int = DEFAULT_TTL,
    ):
        self._strategies = {CacheTier.LOCAL: local, CacheTier.GLOBAL: global_}
        self._enabled = {CacheTier.LOCAL: local_enabled, CacheTier.GLOBAL: global_enabled}
        self.default_ttl = default_ttl

    # ------------------------------------------------------------------
    # Tier management
    # ------------------------------------------------------------------

    @staticmethod
    def resolve_tier(tier: TierSelector) -> CacheTier:
        """Normalize a tier selector, failing on anything unsupported."""
        try:
            return CacheTier(tier)
        except ValueError:
            raise ConfigurationError(f'Unsupported cache storage method "{tier}"', tier=tier) from None

    def set_strategy(self, tier: TierSelector, strategy: CacheStrategy, enabled: Optional[bool] = None) -> None:
        tier = self.resolve_tier(tier)
        self._strategies[tier] = strategy
        if enabled is not None:
            self._enabled[tier] = enabled

    def get_strategy(self, tier: TierSelector) -> Optional[CacheStrategy]:
        return self._strategies[self.resolve_tier(tier)]

    def set_enabled(self, tier: TierSelector, enabled: bool = True) -> None:
        self._enabled[self.resolve_tier(tier)] = enabled

    def is_enabled(self, tier: TierSelector) -> bool:
        return self._enabled[self.resolve_tier(tier)]

    def set_local_strategy(self, strategy: CacheStrategy, enabled: Optional[bool] = None) -> None:
        self.set_strategy(CacheTier.LOCAL, strategy, enabled)

    def set_global_strategy(self, strategy: CacheStrategy, enabled: Optional[bool] = None) -> None:
        self.set_strategy(CacheTier.GLOBAL, strategy, enabled)

    @property
    def local_strategy(self) -> Optional[CacheStrategy]:
        return self._strategies[CacheTier.LOCAL]

    @property
    def global_strategy(self) -> Optional[CacheStrategy]:
        return self._strategies[CacheTier.GLOBAL]

    def set_local_enabled(self, enabled: bool = True) -> None:
        self.set_enabled(CacheTier.LOCAL, enabled)

    def set_global_enabled(self, enabled: bool = True) -> None:
        self.set_enabled(CacheTier.GLOBAL, enabled)

    def is_local_enabled(self) -> bool:
        return self._enabled[CacheTier.LOCAL]

    def is_global_enabled(self) -> bool:
        return self._enabled[CacheTier.GLOBAL]

    def _active_strategy(self, tier: CacheTier) -> Optional[CacheStrategy]:
        """Strategy for an enabled tier, ``None`` when the tier is disabled."""
        if not self._enabled[tier]:
            return None

        strategy = self._strategies[tier]
        if strategy is None:
            raise ConfigurationError(f"{tier.value.capitalize()} cache strategy not set", tier=tier.value)
        return strategy

    # ------------------------------------------------------------------
    # Tier-selected operations
    # ------------------------------------------------------------------

    def store(
        self,
        tier: TierSelector,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
        tags: Tags = None,
    ) -> bool:
        strategy = self._active_strategy(self.resolve_tier(tier))
        if strategy is None:
            return True
        return strategy.store(key, value, self.default_ttl if ttl is None else ttl, tags)

    def fetch(self, tier: TierSelector, key: Keys, default: Any = None) -> Any:
        if is_multi_key(key) and default is not None:
            raise InvalidArgumentError(
                "Using a default value when fetching multiple keys is not allowed",
                keys=list(key),
            )

        strategy = self._active_strategy(self.resolve_tier(tier))
        if strategy is None:
            return {} if is_multi_key(key) else default
        return strategy.fetch(key, default)

    def remove(self, tier: TierSelector, key: Keys) -> bool:
        strategy = self._active_strategy(self.resolve_tier(tier))
        if strategy is None:
            return True
        return strategy.remove(key)

    def clear(self, tier: TierSelector) -> None:
        strategy = self._active_strategy(self.resolve_tier(tier))
        if strategy is not None:
            strategy.clear()

    def clear_by_tag(self, tier: TierSelector, tag: str) -> List[str]:
        strategy = self._active_strategy(self.resolve_tier(tier))
        if strategy is None:
            return []
        return strategy.clear_by_tag(tag)

    def get_keys_by_tag(self, tier: TierSelector, tag: str) -> List[str]:
        strategy = self._active_strategy(self.resolve_tier(tier))
        if strategy is None:
            return []
        return strategy.get_keys_by_tag(tag)

    # ------------------------------------------------------------------
    # Local/global shorthands
    # ------------------------------------------------------------------

    def store_local(self, key: str, value: Any, ttl: Optional[int] = None, tags: Tags = None) -> bool:
        return self.store(CacheTier.LOCAL, key, value, ttl, tags)

    def store_global(self, key: str, value: Any, ttl: Optional[int] = None, tags: Tags = None) -> bool:
        return self.store(CacheTier.GLOBAL, key, value, ttl, tags)

    def fetch_local(self, key: Keys, default: Any = None) -> Any:
        return self.fetch(CacheTier.LOCAL, key, default)

    def fetch_global(self, key: Keys, default: Any = None) -> Any:
        return self.fetch(CacheTier.GLOBAL, key, default)

    def remove_local(self, key: Keys) -> bool:
        return self.remove(CacheTier.LOCAL, key)

    def remove_global(self, key: Keys) -> bool:
        return self.remove(CacheTier.GLOBAL, key)

    def clear_local(self) -> None:
        self.clear(CacheTier.LOCAL)

    def clear_global(self) -> None:
        self.clear(CacheTier.GLOBAL)

    def clear_by_tag_local(self, tag: str) -> List[str]:
        return self.clear_by_tag(CacheTier.LOCAL, tag)

    def clear_by_tag_global(self, tag: str) -> List[str]:
        return self.clear_by_tag(CacheTier.GLOBAL, tag)

    def destroy(self) -> None:
        """Destroy both strategies and disable both tiers."""
        for tier, strategy in self._strategies.items():
            if strategy is not None:
                strategy.destroy()
            self._strategies[tier] = None
            self._enabled[tier] = False

    def __repr__(self) -> str:
        parts = []
        for tier in CacheTier:
            strategy = self._strategies[tier]
            state = "on" if self._enabled[tier] else "off"
            parts.append(f"{tier.value}={strategy.name if strategy else None}({state})")
        return f"<Cache {' '.join(parts)}>"
