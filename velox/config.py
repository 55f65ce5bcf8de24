"""
Config system - Typed application configuration and layered loading.

``VeloxConfig`` holds every framework setting. ``ConfigLoader`` builds
one from several sources, later sources overriding earlier ones:

    config files (YAML/JSON) < .env file < environment variables < overrides

Environment variables use the ``VX_`` prefix with ``__`` for nesting,
e.g. ``VX_GLOBAL_CACHE__BACKEND=redis``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from glob import glob
from pathlib import Path
from typing import Any, Dict, List, Optional

from velox.cache.core import DEFAULT_TTL, CacheTierConfig
from velox.faults import ConfigurationError

logger = logging.getLogger("velox.config")


@dataclass
class VeloxConfig:
    """Framework configuration."""

    debug: bool = False

    # Caching
    use_cache: bool = True
    use_local_cache: Optional[bool] = None        # defaults to use_cache
    use_global_cache: Optional[bool] = None       # defaults to use_cache
    use_system_cache: Optional[bool] = None       # defaults to not debug
    cache_dispatch_resolve: bool = False
    ttl_default: int = DEFAULT_TTL
    ttl_routes: int = DEFAULT_TTL
    ttl_dispatch_resolve: int = DEFAULT_TTL
    local_cache: CacheTierConfig = field(default_factory=CacheTierConfig)
    global_cache: CacheTierConfig = field(default_factory=CacheTierConfig)

    # Routing & dispatch
    routes: Any = field(default_factory=dict)
    routes_file: Optional[str] = None
    controllers_package: str = "controllers"
    error_controller: str = "error"

    # Views
    template_dirs: List[str] = field(default_factory=list)
    layout: Optional[str] = "default"

    # Translations
    translations: Dict[str, Dict[str, Dict[Any, str]]] = field(default_factory=dict)
    translation_files: Dict[str, str] = field(default_factory=dict)
    language: Any = 1

    # Logging
    log_level: str = "WARNING"
    configure_logging: bool = False

    def __post_init__(self):
        if isinstance(self.local_cache, dict):
            self.local_cache = _tier_config(self.local_cache, "local_cache")
        if isinstance(self.global_cache, dict):
            self.global_cache = _tier_config(self.global_cache, "global_cache")
        if self.use_local_cache is None:
            self.use_local_cache = self.use_cache
        if self.use_global_cache is None:
            self.use_global_cache = self.use_cache
        if self.use_system_cache is None:
            self.use_system_cache = not self.debug

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VeloxConfig":
        """Build from a plain mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _tier_config(data: Dict[str, Any], section: str) -> CacheTierConfig:
    known = {f.name for f in fields(CacheTierConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown {section} options: {', '.join(unknown)}",
            section=section,
            options=unknown,
        )
    return CacheTierConfig(**data)


class ConfigLoader:
    """
    Accumulates settings from files, a .env file, the process environment
    and explicit overrides into one nested mapping (``config_data``).
    Each source is merged over the ones read before it.
    """

    _TRUE = frozenset({"true", "yes", "on"})
    _FALSE = frozenset({"false", "no", "off"})

    def __init__(self, env_prefix: str = "VX_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[List[str]] = None,
        env_prefix: str = "VX_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> "ConfigLoader":
        """
        Read every source in precedence order.

        ``paths`` may hold glob patterns; a pattern without wildcards that
        matches nothing is an error. A missing ``env_file`` is not.
        ``environ`` defaults to ``os.environ``.
        """
        loader = cls(env_prefix=env_prefix)
        for pattern in paths or ():
            for path in loader._expand(pattern):
                loader._merge_dict(loader.config_data, loader._read_file(path))
        if env_file and Path(env_file).is_file():
            from dotenv import dotenv_values

            loader._apply_variables(dotenv_values(env_file))
        loader._apply_variables(os.environ if environ is None else environ)
        if overrides:
            loader._merge_dict(loader.config_data, overrides)
        return loader

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    @staticmethod
    def _expand(pattern: str) -> List[Path]:
        found = [Path(p) for p in sorted(glob(pattern))]
        if not found and not set(pattern) & set("*?["):
            raise ConfigurationError(f"Config file not found: {pattern}", path=pattern)
        return found

    @staticmethod
    def _read_file(path: Path) -> Dict[str, Any]:
        if path.suffix in (".yaml", ".yml"):
            import yaml

            return yaml.safe_load(path.read_text()) or {}
        if path.suffix == ".json":
            return json.loads(path.read_text())
        logger.warning(f"Ignoring {path}: only .json, .yaml and .yml are read")
        return {}

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def _apply_variables(self, variables) -> None:
        for name, raw in variables.items():
            if raw is not None and name.startswith(self.env_prefix):
                self._set_nested(name, raw)

    def _set_nested(self, key: str, value: str) -> None:
        """``VX_GLOBAL_CACHE__REDIS_URL`` sets ``config_data["global_cache"]["redis_url"]``."""
        *sections, leaf = key[len(self.env_prefix):].lower().split("__")
        node = self.config_data
        for section in sections:
            child = node.get(section)
            if not isinstance(child, dict):
                child = node[section] = {}
            node = child
        node[leaf] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Booleans, numbers and JSON arrays/objects; anything else stays a string."""
        word = value.strip().lower()
        if word in self._TRUE:
            return True
        if word in self._FALSE:
            return False
        try:
            return float(value) if "." in value else int(value)
        except ValueError:
            pass
        if value[:1] in ("{", "["):
            try:
                return json.loads(value)
            except ValueError:
                return value
        return value

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def _merge_dict(self, target: dict, source: dict) -> None:
        """Recursively fold ``source`` into ``target``; nested dicts merge, other values replace."""
        for key, incoming in source.items():
            existing = target.get(key)
            if isinstance(existing, dict) and isinstance(incoming, dict):
                self._merge_dict(existing, incoming)
            else:
                target[key] = incoming

    def get(self, path: str, default: Any = None) -> Any:
        """Look up ``"a.b.c"`` in the merged data."""
        node: Any = self.config_data
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def to_config(self) -> VeloxConfig:
        return VeloxConfig.from_dict(self.config_data)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.config_data)
