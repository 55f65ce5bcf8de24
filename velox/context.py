"""
Application context - explicit holder of shared collaborators.

Everything that used to be process-wide state (cache tiers, translators,
session, templates) lives on one ``AppContext`` that the application
builds and passes to routers, dispatchers, controllers and views.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from velox.cache.service import Cache
from velox.cache.strategies.memory import MemoryStrategy
from velox.config import VeloxConfig
from velox.i18n import TranslatorRegistry

if TYPE_CHECKING:
    from velox.session import Session
    from velox.view.engine import TemplateEngine


def _default_cache() -> Cache:
    return Cache(local=MemoryStrategy(), global_=MemoryStrategy())


@dataclass
class AppContext:
    config: VeloxConfig = field(default_factory=VeloxConfig)
    cache: Cache = field(default_factory=_default_cache)
    translators: TranslatorRegistry = field(default_factory=TranslatorRegistry)
    session: Optional["Session"] = None
    templates: Optional["TemplateEngine"] = None

    @property
    def debug(self) -> bool:
        return self.config.debug
