"""
Controller Base Class

Provides the base ``Controller`` with the dispatch lifecycle used by the
front controller and the fragment (cache block) protocol used by views.

Lifecycle per dispatch:

    on_pre_dispatch(...)  -> bool   # binds request state, runs setup()
    <action>(parameters)            # skipped when on_pre_dispatch is False
    on_post_dispatch()    -> token  # renders view into layout, resets state

Actions are methods named ``<camelName>Action`` taking the parameter
mapping of the dispatch token. Output written with ``echo()`` is
appended to the response after the rendered view.
"""

from __future__ import annotations

import io
import json
import logging
import time
from typing import Any, Dict, Mapping, Optional, Tuple, TYPE_CHECKING

from markupsafe import Markup

from velox.faults import MissingDependencyError
from velox.view.base import View

if TYPE_CHECKING:
    from velox.bootstrap import Bootstrapper
    from velox.context import AppContext
    from velox.dispatch.dispatcher import Dispatcher
    from velox.dispatch.token import DispatchToken
    from velox.http.request import HttpRequest
    from velox.http.response import HttpResponse
    from velox.routing.route import Route
    from velox.routing.router import Router

    from .front import FrontController

logger = logging.getLogger("velox.controller")

BLOCK_CONTENT_PREFIX = "velox.cache-block-content|"
BLOCK_CONTEXT_PREFIX = "velox.cache-block-context|"


def normalize_block_context(context: Any) -> str:
    """Stable string form of a block context."""
    if context is None:
        return ""
    if isinstance(context, str):
        return context
    if isinstance(context, (int, float, bool)):
        return str(context)
    return json.dumps(context, sort_keys=True, default=str)


class Controller:
    """
    Base controller.

    Example:
        class IndexController(Controller):
            def indexAction(self, parameters):
                self.view.set("title", "Home")

            def saveUserAction(self, parameters):
                ...
                self.redirect("users")
    """

    def __init__(self, context: Optional["AppContext"] = None):
        self.context = context
        self._reset_dispatch_state()

    def _reset_dispatch_state(self) -> None:
        self.front_controller: Optional["FrontController"] = None
        self.request: Optional["HttpRequest"] = None
        self.response: Optional["HttpResponse"] = None
        self.bootstrapper: Optional["Bootstrapper"] = None
        self.router: Optional["Router"] = None
        self.dispatcher: Optional["Dispatcher"] = None
        self.route: Optional["Route"] = None
        self.dispatch_token: Optional["DispatchToken"] = None
        self.view: Optional[View] = None
        self.layout: Optional[View] = None

        self._forward_token: Optional["DispatchToken"] = None
        self._render_view = True
        self._render_layout = True
        self._output: Optional[io.StringIO] = None
        self._block_contexts: Dict[str, str] = {}
        self._block_ttls: Dict[str, int] = {}

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    def _require_context(self) -> "AppContext":
        if self.context is None:
            raise MissingDependencyError(f"{type(self).__name__} has no application context")
        return self.context

    @property
    def config(self):
        return self._require_context().config

    @property
    def cache(self):
        return self._require_context().cache

    @property
    def translator(self):
        return self._require_context().translators.main

    @property
    def session(self):
        return self._require_context().session

    @property
    def debug(self) -> bool:
        return self._require_context().config.debug

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def on_pre_dispatch(
        self,
        front_controller: "FrontController",
        request: "HttpRequest",
        bootstrapper: Optional["Bootstrapper"],
        router: "Router",
        dispatcher: "Dispatcher",
        route: "Route",
        dispatch_token: "DispatchToken",
        response: "HttpResponse",
    ) -> bool:
        """
        Bind request state and run ``setup()``.

        Returns False to skip the action; ``on_post_dispatch`` still runs.
        """
        self.front_controller = front_controller
        self.request = request
        self.bootstrapper = bootstrapper
        self.router = router
        self.dispatcher = dispatcher
        self.route = route
        self.dispatch_token = dispatch_token
        self.response = response

        self._forward_token = None
        self._render_view = True
        self._render_layout = True
        self._output = io.StringIO()

        self.view = self.create_view(
            f"{dispatch_token.controller_name}/{dispatch_token.action_name}.html"
        )
        layout = self._require_context().config.layout
        self.layout = self.create_view(f"layouts/{layout}.html" if layout else None)

        return self.setup() is not False

    def setup(self) -> Optional[bool]:
        """Per-dispatch initialisation hook; return False to skip the action."""
        return None

    def on_post_dispatch(self) -> Optional["DispatchToken"]:
        """
        Render and append output unless forwarding, then reset all state.

        Returns:
            The forward token, if the action requested one
        """
        forward_token = self._forward_token

        if forward_token is None:
            self.response.append(self.render())
        self.response.append(self._output.getvalue())

        self.reset()
        return forward_token

    def abort_dispatch(self) -> None:
        """Drop request state after a failed dispatch."""
        self.reset()

    def reset(self) -> None:
        for view in (self.view, self.layout):
            if view is not None:
                view.detach()
        self._reset_dispatch_state()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def create_view(self, template: Optional[str]) -> View:
        view = View(template, self.context)
        view.attach(self)
        return view

    def render(self) -> str:
        if not self._render_view:
            return ""

        content = self.view.render()
        if self._render_layout and self.layout is not None and self.layout.template:
            self.layout.set("content", Markup(content))
            return self.layout.render()
        return content

    def set_view(self, template: str) -> None:
        self.view.template = template

    def set_layout(self, name: Optional[str]) -> None:
        self.layout.template = f"layouts/{name}.html" if name else None

    def disable_view(self) -> None:
        self._render_view = False

    def disable_layout(self) -> None:
        self._render_layout = False

    def echo(self, *parts: Any) -> None:
        """Write directly to the response, after the rendered view."""
        for part in parts:
            self._output.write(str(part))

    # ------------------------------------------------------------------
    # Flow control
    # ------------------------------------------------------------------

    def get_param(self, name: str, default: Any = None) -> Any:
        return self.dispatch_token.get_param(name, default)

    @property
    def params(self) -> Mapping[str, Any]:
        return self.dispatch_token.parameters

    def forward(
        self,
        controller: str,
        action: str = "index",
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Redispatch to another action once this one returns."""
        self._forward_token = self.dispatcher.build(controller, action, parameters)

    def redirect(self, route_name: str, parameters: Optional[Dict[str, Any]] = None, code: int = 302) -> None:
        url = self.router.make_url(route_name, parameters)
        self.response.set_response_code(code)
        self.response.add_header("Location", url)
        self.disable_view()
        self.disable_layout()

    # ------------------------------------------------------------------
    # Cache blocks
    # ------------------------------------------------------------------

    @staticmethod
    def block_content_key(name: str, context: str) -> str:
        return f"{BLOCK_CONTENT_PREFIX}{name}.{context}"

    @staticmethod
    def block_context_key(name: str) -> str:
        return f"{BLOCK_CONTEXT_PREFIX}{name}"

    def is_block_cached(self, name: str, context: Any = None, ttl: Optional[int] = None) -> Tuple[bool, Optional[str]]:
        """
        Look up a block and remember its context (and TTL override).

        Returns:
            ``(hit, contents)``, contents being None on a miss
        """
        normalized = normalize_block_context(context)
        self._block_contexts[name] = normalized
        if ttl is not None:
            self._block_ttls[name] = ttl

        contents = self.cache.fetch_local(self.block_content_key(name, normalized))
        return contents is not None, contents

    def get_current_cache_block_context(self, name: str) -> str:
        return self._block_contexts.get(name, "")

    def get_cache_block_ttl(self, name: str) -> int:
        return self._block_ttls.get(name, self.config.ttl_default)

    def get_cached_block_contents(self, name: str, context: Any = None) -> Optional[str]:
        if context is None:
            normalized = self.get_current_cache_block_context(name)
        else:
            normalized = normalize_block_context(context)
        return self.cache.fetch_local(self.block_content_key(name, normalized))

    def get_cache_block_contexts(self, name: str) -> Dict[str, float]:
        """Registered contexts of a block, mapped to their last write time."""
        return dict(self.cache.fetch_local(self.block_context_key(name), None) or {})

    def store_cached_block(self, name: str, contents: str, context: Any = None) -> bool:
        """Store rendered block contents and register the context."""
        if context is None:
            normalized = self.get_current_cache_block_context(name)
        else:
            normalized = normalize_block_context(context)

        ttl = self.get_cache_block_ttl(name) + 1
        stored = self.cache.store_local(self.block_content_key(name, normalized), contents, ttl)

        contexts = self.get_cache_block_contexts(name)
        contexts[normalized] = time.time()
        self.cache.store_local(self.block_context_key(name), contexts, 0)
        return stored

    def clear_block_cache(self, name: str) -> int:
        """Remove every cached context of a block; returns how many were registered."""
        contexts = self.get_cache_block_contexts(name)
        if contexts:
            self.cache.remove_local([self.block_content_key(name, ctx) for ctx in contexts])
        self.cache.remove_local(self.block_context_key(name))
        logger.debug(f"Cleared {len(contexts)} context(s) of cache block '{name}'")
        return len(contexts)

    def clear_block_cache_context(self, name: str, context: Any = None) -> bool:
        normalized = normalize_block_context(context)
        self.cache.remove_local(self.block_content_key(name, normalized))

        contexts = self.get_cache_block_contexts(name)
        if normalized not in contexts:
            return False
        del contexts[normalized]
        self.cache.store_local(self.block_context_key(name), contexts, 0)
        return True

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"
