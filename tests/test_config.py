"""
Config System (config.py)

Tests VeloxConfig and ConfigLoader.
"""

import json

import pytest

from velox.cache.core import CacheTierConfig
from velox.config import ConfigLoader, VeloxConfig
from velox.faults import ConfigurationError


# ============================================================================
# VeloxConfig
# ============================================================================

class TestVeloxConfig:

    def test_defaults(self):
        config = VeloxConfig()
        assert config.debug is False
        assert config.use_local_cache is True
        assert config.use_global_cache is True
        assert config.use_system_cache is True
        assert config.cache_dispatch_resolve is False
        assert config.error_controller == "error"
        assert config.layout == "default"

    def test_debug_disables_system_cache(self):
        assert VeloxConfig(debug=True).use_system_cache is False
        assert VeloxConfig(debug=True, use_system_cache=True).use_system_cache is True

    def test_use_cache_drives_tiers(self):
        config = VeloxConfig(use_cache=False)
        assert config.use_local_cache is False
        assert config.use_global_cache is False
        assert VeloxConfig(use_cache=False, use_global_cache=True).use_global_cache is True

    def test_tier_dict_is_coerced(self):
        config = VeloxConfig(global_cache={"backend": "null"})
        assert isinstance(config.global_cache, CacheTierConfig)
        assert config.global_cache.backend == "null"

    def test_unknown_tier_option(self):
        with pytest.raises(ConfigurationError):
            VeloxConfig(local_cache={"backnd": "memory"})

    def test_from_dict_ignores_unknown_keys(self, caplog):
        config = VeloxConfig.from_dict({"debug": True, "colour": "blue"})
        assert config.debug is True
        assert "colour" in caplog.text

    def test_to_dict(self):
        data = VeloxConfig(layout=None).to_dict()
        assert data["layout"] is None
        assert data["local_cache"]["backend"] == "memory"


# ============================================================================
# ConfigLoader
# ============================================================================

class TestConfigLoader:

    def test_init_defaults(self):
        loader = ConfigLoader()
        assert loader.env_prefix == "VX_"
        assert loader.config_data == {}

    def test_merge_dict(self):
        loader = ConfigLoader()
        target = {"a": 1, "b": {"c": 2}}
        loader._merge_dict(target, {"b": {"d": 3}, "e": 4})
        assert target == {"a": 1, "b": {"c": 2, "d": 3}, "e": 4}

    def test_get_dot_path(self):
        loader = ConfigLoader()
        loader.config_data = {"global_cache": {"backend": "redis"}}
        assert loader.get("global_cache.backend") == "redis"
        assert loader.get("global_cache.missing", "x") == "x"

    def test_parse_value(self):
        loader = ConfigLoader()
        assert loader._parse_value("on") is True
        assert loader._parse_value("off") is False
        assert loader._parse_value("42") == 42
        assert loader._parse_value("0.5") == 0.5
        assert loader._parse_value('["a", "b"]') == ["a", "b"]
        assert loader._parse_value("{broken") == "{broken"
        assert loader._parse_value("hello") == "hello"

    def test_set_nested(self):
        loader = ConfigLoader()
        loader._set_nested("VX_GLOBAL_CACHE__REDIS_URL", "redis://cache:6379/1")
        assert loader.config_data["global_cache"]["redis_url"] == "redis://cache:6379/1"

    def test_to_dict_is_a_copy(self):
        loader = ConfigLoader()
        loader.config_data = {"key": "value"}
        data = loader.to_dict()
        data["new"] = "val"
        assert "new" not in loader.config_data

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigLoader.load(paths=[str(tmp_path / "missing.yaml")], environ={})

    def test_unmatched_glob_is_ignored(self, tmp_path):
        loader = ConfigLoader.load(paths=[str(tmp_path / "*.yaml")], environ={})
        assert loader.config_data == {}

    def test_yaml_and_json_files(self, tmp_path):
        (tmp_path / "a.yaml").write_text("debug: true\nglobal_cache:\n  backend: redis\n")
        (tmp_path / "b.json").write_text(json.dumps({"global_cache": {"backend": "memory", "max_size": 5}}))

        loader = ConfigLoader.load(
            paths=[str(tmp_path / "a.yaml"), str(tmp_path / "b.json")],
            environ={},
        )
        config = loader.to_config()
        assert config.debug is True
        assert config.global_cache.backend == "memory"
        assert config.global_cache.max_size == 5

    def test_precedence(self, tmp_path):
        (tmp_path / "app.json").write_text(json.dumps({"layout": "file", "language": 1, "ttl_default": 10}))
        env_file = tmp_path / ".env"
        env_file.write_text("VX_LAYOUT=dotenv\nVX_LANGUAGE=2\nOTHER=ignored\n# comment\n")

        loader = ConfigLoader.load(
            paths=[str(tmp_path / "app.json")],
            env_file=str(env_file),
            overrides={"layout": "override"},
            environ={"VX_LANGUAGE": "3", "HOME": "/root"},
        )
        config = loader.to_config()
        assert config.layout == "override"
        assert config.language == 3
        assert config.ttl_default == 10
        assert "other" not in loader.config_data

    def test_env_nesting(self):
        loader = ConfigLoader.load(
            environ={"VX_GLOBAL_CACHE__BACKEND": "null", "VX_DEBUG": "yes"},
        )
        config = loader.to_config()
        assert config.debug is True
        assert config.global_cache.backend == "null"

    def test_custom_prefix(self):
        loader = ConfigLoader.load(env_prefix="APP_", environ={"APP_DEBUG": "true", "VX_DEBUG": "false"})
        assert loader.config_data == {"debug": True}

    def test_missing_env_file_is_ignored(self, tmp_path):
        loader = ConfigLoader.load(env_file=str(tmp_path / ".env"), environ={})
        assert loader.config_data == {}
