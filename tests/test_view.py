"""
Test suite for views, the template engine and cache blocks.

Covers:
- View variables and MissingKeyError
- Template existence memoization, rendering, missing templates
- Escaped request parameters and translation helpers
- Cache block hits/misses, TTL, context registry, clearing
- Nesting and double-release protection
- Jinja ``{% call view.cached(...) %}`` integration
"""

from __future__ import annotations

import pytest

from velox.cache.service import Cache
from velox.cache.strategies.memory import MemoryStrategy
from velox.config import VeloxConfig
from velox.controller.base import Controller, normalize_block_context
from velox.faults import (
    CacheBlockError,
    MissingDependencyError,
    MissingKeyError,
    MissingTemplateError,
    NestedCacheBlockError,
)
from velox.http.request import HttpRequest
from velox.view.base import EXISTS_CACHE_PREFIX, View
from velox.view.engine import TemplateEngine

from conftest import make_context


@pytest.fixture
def controller(context):
    controller = Controller(context)
    controller.request = HttpRequest("/", params={"q": "<script>"})
    return controller


@pytest.fixture
def view(controller):
    return controller.create_view("index/index.html")


# ============================================================================
# Variables
# ============================================================================


class TestViewData:
    def test_set_get(self):
        view = View()
        view.set("a", 1)
        view["b"] = 2
        assert view.get("a") == 1
        assert view["b"] == 2
        assert list(view) == ["a", "b"]

    def test_missing_key(self):
        with pytest.raises(MissingKeyError):
            View().get("nope")

    def test_has_remove(self):
        view = View(data={"a": 1})
        assert view.has("a") and "a" in view
        view.remove("a")
        view.remove("a")
        assert not view.has("a")

    def test_data_is_a_copy(self):
        view = View(data={"a": 1})
        view.data["a"] = 2
        assert view.get("a") == 1


# ============================================================================
# Rendering
# ============================================================================


class TestRendering:
    def test_render(self, view):
        view.set("title", "Hi")
        assert view.render() == "<h1>Hi</h1>"

    def test_render_escapes(self, view):
        view.set("title", "<b>")
        assert view.render() == "<h1>&lt;b&gt;</h1>"

    def test_render_to_writer(self, view):
        import io

        view.set("title", "Hi")
        out = io.StringIO()
        view.render(out)
        assert out.getvalue() == "<h1>Hi</h1>"

    def test_missing_template(self, controller):
        with pytest.raises(MissingTemplateError):
            controller.create_view("nope/nope.html").render()
        with pytest.raises(MissingTemplateError):
            controller.create_view(None).render()

    def test_exists_is_memoized(self, view, context):
        assert view.exists()
        assert context.cache.fetch_local(f"{EXISTS_CACHE_PREFIX}index/index.html") is True
        assert not view.exists("nope.html")
        assert context.cache.fetch_local(f"{EXISTS_CACHE_PREFIX}nope.html") is False

    def test_exists_without_cache(self, view, context):
        assert view.exists(use_cache=False)
        assert context.cache.fetch_local(f"{EXISTS_CACHE_PREFIX}index/index.html") is None

    def test_package_templates_are_available(self):
        engine = TemplateEngine()
        assert engine.exists("error/page-not-found.html")
        assert not engine.exists("error/nothing.html")

    def test_render_string(self):
        assert TemplateEngine().render_string("{{ a }}", {"a": "<x>"}) == "&lt;x&gt;"

    def test_param_is_escaped(self, view):
        assert view.param("q") == "&lt;script&gt;"
        assert view.param("missing") == ""

    def test_translate(self, view):
        assert view.translate("greeting", "Ann") == "Hello Ann"

    def test_detached_view_has_no_block_cache(self):
        with pytest.raises(MissingDependencyError):
            View("x.html").block_cache


# ============================================================================
# Cache blocks
# ============================================================================


class TestCacheBlocks:
    def test_miss_then_hit(self, view, controller):
        with view.cache_block("side", context=3) as block:
            assert not block.hit
            block.write("fresh")
        assert block.output == "fresh"

        hit, contents = controller.is_block_cached("side", 3)
        assert hit and contents == "fresh"

        with view.cache_block("side", context=3) as block:
            assert block.hit
        assert block.output == "fresh"

    def test_contexts_are_separate(self, view, controller):
        with view.cache_block("side", context={"user": 1}) as block:
            block.write("one")
        assert controller.is_block_cached("side", {"user": 2}) == (False, None)
        assert controller.get_cached_block_contents("side", {"user": 1}) == "one"

    def test_context_normalization(self):
        assert normalize_block_context(None) == ""
        assert normalize_block_context(5) == "5"
        assert normalize_block_context({"b": 1, "a": 2}) == normalize_block_context({"a": 2, "b": 1})

    def test_ttl_is_extended_by_one_second(self):
        now = [100.0]
        context = make_context(VeloxConfig())
        context.cache = Cache(local=MemoryStrategy(clock=lambda: now[0]), global_=MemoryStrategy())
        controller = Controller(context)
        view = controller.create_view("x.html")

        with view.cache_block("b", ttl=10) as block:
            block.write("x")

        now[0] = 110.5
        assert controller.is_block_cached("b")[0]
        now[0] = 111.0
        assert not controller.is_block_cached("b")[0]

    def test_default_ttl_comes_from_config(self, controller, context):
        assert controller.get_cache_block_ttl("any") == context.config.ttl_default
        controller.is_block_cached("any", ttl=42)
        assert controller.get_cache_block_ttl("any") == 42

    def test_context_registry_and_clear(self, view, controller):
        for ctx in ("a", "b", "c"):
            with view.cache_block("list", context=ctx) as block:
                block.write(ctx)

        assert set(controller.get_cache_block_contexts("list")) == {"a", "b", "c"}
        assert controller.clear_block_cache("list") == 3
        assert controller.get_cache_block_contexts("list") == {}
        assert controller.get_cached_block_contents("list", "a") is None
        assert controller.clear_block_cache("list") == 0

    def test_clear_single_context(self, view, controller):
        for ctx in ("a", "b"):
            with view.cache_block("list", context=ctx) as block:
                block.write(ctx)

        assert controller.clear_block_cache_context("list", "a")
        assert not controller.clear_block_cache_context("list", "a")
        assert set(controller.get_cache_block_contexts("list")) == {"b"}
        assert controller.get_cached_block_contents("list", "b") == "b"

    def test_nested_block_is_rejected(self, view):
        outer = view.cache_block("outer")
        with pytest.raises(NestedCacheBlockError):
            view.cache_block("inner")
        outer.discard()
        view.cache_block("inner").discard()

    def test_double_release(self, view):
        block = view.cache_block("b")
        block.end()
        with pytest.raises(CacheBlockError):
            block.end()
        with pytest.raises(CacheBlockError):
            block.write("late")

    def test_failed_block_is_not_stored(self, view, controller):
        with pytest.raises(RuntimeError):
            with view.cache_block("b") as block:
                block.write("half")
                raise RuntimeError("x")
        assert block.released
        assert view.open_block is None
        assert controller.is_block_cached("b") == (False, None)

    def test_jinja_call_block(self, config):
        calls = []
        templates = {
            "t.html": '{% call view.cached("box", context=n) %}<i>{{ render() }}</i>{% endcall %}',
        }
        context = make_context(config, templates)
        controller = Controller(context)

        def render():
            calls.append(1)
            return "body"

        for _ in range(2):
            view = controller.create_view("t.html")
            view.set("n", 1)
            view.set("render", render)
            assert view.render() == "<i>body</i>"

        assert calls == [1]
