"""
Test suite for the velox command line.

Covers:
- routes / match / url against a route file
- request dispatch and exit statuses
- cache check without networked backends
- helper parsing
"""

from __future__ import annotations

import click
import pytest
import yaml
from click.testing import CliRunner

from velox.app import ExitStatus
from velox.cli.__main__ import cli
from velox.cli.commands import load_application, parse_pairs

from conftest import ROUTES


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def routes_file(tmp_path):
    path = tmp_path / "routes.yaml"
    path.write_text(yaml.safe_dump({"routes": ROUTES}))
    return str(path)


class TestHelpers:
    def test_parse_pairs(self):
        assert parse_pairs(["a=1", "b=x=y", "c="]) == {"a": "1", "b": "x=y", "c": ""}

    @pytest.mark.parametrize("pair", ["novalue", "=1"])
    def test_parse_pairs_rejects(self, pair):
        with pytest.raises(click.BadParameter):
            parse_pairs([pair])

    def test_load_application_instance_and_factory(self):
        import sample_app

        assert load_application("sample_app:app") is sample_app.app
        assert load_application("sample_app:create_app").router is not None

    def test_load_application_rejects(self):
        with pytest.raises(click.BadParameter):
            load_application("sample_app")
        with pytest.raises(click.BadParameter):
            load_application("sample_app:ROUTES")


class TestRoutingCommands:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "velox" in result.output

    def test_routes(self, runner, routes_file):
        result = runner.invoke(cli, ["routes", "--routes", routes_file])
        assert result.exit_code == 0
        assert "/@view-topic/:id[+int]" in result.output
        assert "sort=asc" in result.output

    def test_match(self, runner, routes_file):
        result = runner.invoke(cli, ["match", "/view-topic/12", "--routes", routes_file])
        assert result.exit_code == 0
        assert "topic" in result.output
        assert "12" in result.output

    def test_no_match(self, runner, routes_file):
        result = runner.invoke(cli, ["match", "/view-topic/abc", "--routes", routes_file])
        assert result.exit_code == 1

    def test_url(self, runner, routes_file):
        result = runner.invoke(cli, ["url", "topic", "-p", "id=12", "--routes", routes_file])
        assert result.exit_code == 0
        assert result.output.strip() == "/view-topic/12"

    def test_url_missing_parameter(self, runner, routes_file):
        result = runner.invoke(cli, ["url", "topic", "--routes", routes_file])
        assert result.exit_code == 1

    def test_url_undefined_route(self, runner, routes_file):
        result = runner.invoke(cli, ["url", "nope", "--routes", routes_file])
        assert result.exit_code == 1


class TestRequestCommand:
    def test_ok(self, runner):
        result = runner.invoke(cli, ["request", "/", "--app", "sample_app:create_app"])
        assert result.exit_code == int(ExitStatus.OK)
        assert "<layout><h1>Home</h1></layout>" in result.output

    def test_not_found_is_still_ok(self, runner):
        result = runner.invoke(cli, ["request", "/nothing-here", "--app", "sample_app:create_app", "--no-body"])
        assert result.exit_code == int(ExitStatus.OK)
        assert "404" in result.output
        assert "Page not found" not in result.output

    def test_dispatch_loop_exit_status(self, runner):
        result = runner.invoke(cli, ["request", "/explode", "--app", "sample_app:create_looping_app"])
        assert result.exit_code == int(ExitStatus.DISPATCH_LOOP)


class TestCacheCommand:
    def test_disabled_redis_tier_is_not_pinged(self, runner, tmp_path):
        config = tmp_path / "velox.yaml"
        config.write_text("global_cache:\n  backend: redis\n  enabled: false\n")

        result = runner.invoke(cli, ["cache", "check", "--config", str(config)])
        assert result.exit_code == 0
        assert "local cache" in result.output
        assert "global cache" in result.output

    def test_invalid_tier_option_fails(self, runner, tmp_path):
        config = tmp_path / "velox.yaml"
        config.write_text("local_cache:\n  colour: blue\n")

        result = runner.invoke(cli, ["cache", "check", "--config", str(config)])
        assert result.exit_code == 1
