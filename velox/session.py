"""
VeloxSession — Server-side session state.

``Session`` is a value map bound to an id and persisted through a
``SessionStrategy``. ``CacheSessionStrategy`` keeps the map in one cache
tier under ``velox.session|<id>``. Cookie handling is left to the
embedding server.
"""

from __future__ import annotations

import logging
import secrets
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional

from velox.cache.core import DEFAULT_TTL, CacheTier
from velox.cache.service import Cache

logger = logging.getLogger("velox.session")

SESSION_KEY_PREFIX = "velox.session|"


def generate_session_id() -> str:
    return secrets.token_hex(16)


class SessionStrategy(ABC):
    """Persistence contract for session value maps."""

    @abstractmethod
    def load(self, session_id: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def save(self, session_id: str, values: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def destroy(self, session_id: str) -> bool:
        ...


class CacheSessionStrategy(SessionStrategy):
    """Session storage in one tier of the application cache."""

    def __init__(self, cache: Cache, tier: CacheTier = CacheTier.GLOBAL, ttl: int = DEFAULT_TTL):
        self.cache = cache
        self.tier = Cache.resolve_tier(tier)
        self.ttl = ttl

    @staticmethod
    def make_key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    def load(self, session_id: str) -> Dict[str, Any]:
        return dict(self.cache.fetch(self.tier, self.make_key(session_id), None) or {})

    def save(self, session_id: str, values: Dict[str, Any]) -> bool:
        return self.cache.store(self.tier, self.make_key(session_id), dict(values), self.ttl)

    def destroy(self, session_id: str) -> bool:
        return self.cache.remove(self.tier, self.make_key(session_id))


class Session:
    """
    Session value map.

    Values are loaded on first access and written back by ``save()``.
    """

    def __init__(self, strategy: SessionStrategy, session_id: Optional[str] = None):
        self.strategy = strategy
        self._id = session_id or generate_session_id()
        self._values: Optional[Dict[str, Any]] = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def values(self) -> Dict[str, Any]:
        if self._values is None:
            self._values = self.strategy.load(self._id)
        return self._values

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self.values[name] = value

    def has(self, name: str) -> bool:
        return name in self.values

    def remove(self, name: str) -> None:
        self.values.pop(name, None)

    def clear(self) -> None:
        self._values = {}

    def save(self) -> bool:
        if self._values is None:
            return True
        return self.strategy.save(self._id, self._values)

    def destroy(self) -> bool:
        """Drop the stored state and start over under a fresh id."""
        result = self.strategy.destroy(self._id)
        self._id = generate_session_id()
        self._values = {}
        return result

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __repr__(self) -> str:
        return f"<Session {self._id}>"
