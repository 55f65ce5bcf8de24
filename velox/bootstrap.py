"""
Bootstrapper - per-request framework and application setup.

``bootstrap(request)`` runs before routing:

- framework: root logging, configured once per process when enabled
- application: translators (translation files are cached in the local
  tier under ``translations.<name>`` when the system cache is on) and
  the session

``on_request_complete(response)`` runs after a successful dispatch and
persists the session.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, TYPE_CHECKING

from velox.faults import ConfigurationError
from velox.session import CacheSessionStrategy, Session

if TYPE_CHECKING:
    from velox.context import AppContext
    from velox.http.request import HttpRequest
    from velox.http.response import HttpResponse

logger = logging.getLogger("velox.bootstrap")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
TRANSLATIONS_CACHE_PREFIX = "translations."
SESSION_PARAM = "velox_session"

_logging_configured = False


def configure_logging(level: str = "WARNING") -> None:
    """Configure root logging once per process."""
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    _logging_configured = True


def load_translation_file(path: str) -> Dict[str, Dict[Any, str]]:
    """Read ``key -> {language -> text}`` from a YAML or JSON file."""
    file = Path(path)
    if not file.exists():
        raise ConfigurationError(f"Translation file not found: {file}", path=str(file))

    text = file.read_text(encoding="utf-8")
    if file.suffix in (".yaml", ".yml"):
        import yaml

        return yaml.safe_load(text) or {}
    if file.suffix == ".json":
        return json.loads(text)
    raise ConfigurationError(f"Unsupported translation file format: {file.suffix}", path=str(file))


class Bootstrapper:
    """Framework and application bootstrap around each request."""

    def __init__(self, context: "AppContext"):
        self.context = context
        self._translations_loaded = False

    def bootstrap(self, request: "HttpRequest") -> None:
        self.bootstrap_framework()
        self.bootstrap_application(request)

    def bootstrap_framework(self) -> None:
        config = self.context.config
        if config.configure_logging:
            configure_logging(config.log_level)

    def bootstrap_application(self, request: "HttpRequest") -> None:
        self.load_translations()
        self.start_session(request)

    def load_translations(self) -> None:
        if self._translations_loaded:
            return

        config = self.context.config
        cache = self.context.cache

        for name, path in config.translation_files.items():
            cache_key = f"{TRANSLATIONS_CACHE_PREFIX}{name}"
            table = cache.fetch_local(cache_key) if config.use_system_cache else None
            if table is None:
                table = load_translation_file(path)
                if config.use_system_cache:
                    cache.store_local(cache_key, table)
            self.context.translators.get(name).add_translations(table)
            logger.debug(f"Loaded {len(table)} translation(s) into '{name}'")

        self._translations_loaded = True

    def start_session(self, request: "HttpRequest") -> Session:
        """Bind a fresh session to the request; stored values come back only through its id."""
        strategy = CacheSessionStrategy(self.context.cache, ttl=self.context.config.ttl_default)
        session = Session(strategy, request.get_param(SESSION_PARAM) or None)
        self.context.session = session
        return session

    def on_request_complete(self, response: "HttpResponse") -> None:
        if self.context.session is not None:
            self.context.session.save()
        logger.debug(f"Request complete: {response!r}")
