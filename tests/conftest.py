"""
Shared test fixtures and helpers for the Velox test suite.
"""

from typing import Any, Dict, Optional

import pytest

from velox.app import Application
from velox.cache.service import Cache
from velox.cache.strategies.memory import MemoryStrategy
from velox.config import VeloxConfig
from velox.context import AppContext
from velox.controller.base import Controller
from velox.i18n import TranslatorRegistry
from velox.view.engine import TemplateEngine


# ============================================================================
# Sample controllers
# ============================================================================


class IndexController(Controller):
    def indexAction(self, parameters):  # noqa: N802
        self.view.set("title", "Home")


class ForumController(Controller):
    def viewTopicAction(self, parameters):  # noqa: N802
        self.view.set("topic_id", parameters.get("id"))

    def forwardAction(self, parameters):  # noqa: N802
        self.echo("[forwarding]")
        self.forward("forum", "view-topic", {"id": "7"})

    def explodeAction(self, parameters):  # noqa: N802
        raise RuntimeError("boom")

    def redirectAction(self, parameters):  # noqa: N802
        self.redirect("topic", {"id": 3})

    def rawAction(self, parameters):  # noqa: N802
        self.disable_view()
        self.echo("raw:", parameters.get("id"))


TEMPLATES = {
    "layouts/default.html": "<layout>{{ content }}</layout>",
    "index/index.html": "<h1>{{ title }}</h1>",
    "forum/view-topic.html": "topic {{ topic_id }}",
    "forum/forward.html": "never rendered",
}

ROUTES = {
    "index": {"path": "/", "controller": "index", "action": "index"},
    "topic": {"path": "/@view-topic/:id[+int]", "controller": "forum", "action": "view-topic"},
    "forward": {"path": "/jump", "controller": "forum", "action": "forward"},
    "explode": {"path": "/explode", "controller": "forum", "action": "explode"},
    "redirect": {"path": "/go", "controller": "forum", "action": "redirect"},
    "raw": {"path": "/raw/:id", "controller": "forum", "action": "raw"},
    "missing-controller": {"path": "/ghost", "controller": "ghost", "action": "index"},
    "missing-action": {"path": "/nowhere", "controller": "forum", "action": "nowhere"},
    "page": {"path": "/page/:id/:sort", "controller": "index", "action": "index", "sort": "asc"},
}

CONTROLLERS = {
    "IndexController": IndexController,
    "ForumController": ForumController,
}

TRANSLATIONS = {
    "routes": {"view-topic": {1: "show", 2: "zeige"}},
    "main": {
        "pager.label.all": {1: "all", 2: "alle"},
        "greeting": {1: "Hello %s"},
        "markup": {1: "<b>bold</b>"},
    },
}


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def config() -> VeloxConfig:
    return VeloxConfig(
        routes=ROUTES,
        translations=TRANSLATIONS,
        controllers_package="app_controllers",
    )


@pytest.fixture
def debug_config() -> VeloxConfig:
    return VeloxConfig(
        debug=True,
        routes=ROUTES,
        translations=TRANSLATIONS,
        controllers_package="app_controllers",
    )


def make_context(config: VeloxConfig, templates: Optional[Dict[str, str]] = None) -> AppContext:
    return AppContext(
        config=config,
        cache=Cache(local=MemoryStrategy(), global_=MemoryStrategy()),
        translators=TranslatorRegistry(config.translations, config.language, config.debug),
        templates=TemplateEngine(templates=TEMPLATES if templates is None else templates),
    )


@pytest.fixture
def context(config) -> AppContext:
    return make_context(config)


@pytest.fixture
def debug_context(debug_config) -> AppContext:
    return make_context(debug_config)


def make_app(config: VeloxConfig, **kwargs: Any) -> Application:
    kwargs.setdefault("controllers", CONTROLLERS)
    kwargs.setdefault("templates", TEMPLATES)
    return Application(config, **kwargs)


@pytest.fixture
def app(config) -> Application:
    return make_app(config)


@pytest.fixture
def debug_app(debug_config) -> Application:
    return make_app(debug_config)
