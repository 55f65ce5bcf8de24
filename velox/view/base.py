"""
View - Ordered template data and cached fragment blocks.

A ``View`` is a template name plus an ordered mapping of variables.
Reading a variable that was never set raises ``MissingKeyError``.

Fragment caching
----------------
Blocks are opened through a ``CacheBlock`` handle that either carries
the cached contents (hit) or collects freshly rendered output (miss)
and stores it when released. Only one handle may be open per view;
opening a second one raises ``NestedCacheBlockError``.

In templates::

    {% call view.cached("sidebar", context=user_id, ttl=600) %}
        ...expensive markup...
    {% endcall %}

In Python::

    with view.cache_block("sidebar", context=user_id) as block:
        if not block.hit:
            block.write(render_sidebar())
    html = block.output
"""

from __future__ import annotations

import html
import io
import logging
from typing import Any, Callable, Dict, Iterator, Optional, TYPE_CHECKING

from markupsafe import Markup

from velox.faults import (
    CacheBlockError,
    MissingDependencyError,
    MissingKeyError,
    MissingTemplateError,
    NestedCacheBlockError,
)

if TYPE_CHECKING:
    from velox.context import AppContext
    from velox.controller.base import Controller

logger = logging.getLogger("velox.view")

EXISTS_CACHE_PREFIX = "velox.view-exists|"


class CacheBlock:
    """Scoped handle on one cache block, released exactly once."""

    def __init__(self, view: "View", name: str, hit: bool, contents: Optional[str]):
        self.view = view
        self.name = name
        self.hit = hit
        self.contents = contents
        self.output: Optional[str] = None
        self._buffer = io.StringIO()
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def write(self, text: str) -> None:
        if self._released:
            raise CacheBlockError(f'Cache block "{self.name}" was already ended')
        self._buffer.write(text)

    def end(self) -> str:
        """Release the block; on a miss the captured output is stored."""
        self._release()
        if self.hit:
            self.output = self.contents
        else:
            self.output = self._buffer.getvalue()
            self.view.block_cache.store_cached_block(self.name, self.output)
        return self.output

    def discard(self) -> None:
        """Release the block without storing anything."""
        self._release()

    def _release(self) -> None:
        if self._released:
            raise CacheBlockError(f'Cache block "{self.name}" was already ended')
        self._released = True
        self.view._close_block(self)

    def __enter__(self) -> "CacheBlock":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if not self._released:
            if exc_type is None:
                self.end()
            else:
                self.discard()
        return False

    def __repr__(self) -> str:
        state = "hit" if self.hit else "miss"
        return f"<CacheBlock {self.name} {state}>"


class View:
    """
    Template plus ordered variables.

    Args:
        template: Template name, e.g. ``index/index.html``
        context: Application context (template engine, cache, translators)
        data: Initial variables
    """

    def __init__(
        self,
        template: Optional[str] = None,
        context: Optional["AppContext"] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        self.template = template
        self.context = context
        self._data: Dict[str, Any] = dict(data or {})
        self.controller: Optional["Controller"] = None
        self._open_block: Optional[CacheBlock] = None

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def set(self, name: str, value: Any) -> None:
        self._data[name] = value

    def get(self, name: str) -> Any:
        try:
            return self._data[name]
        except KeyError:
            raise MissingKeyError(name) from None

    def has(self, name: str) -> bool:
        return name in self._data

    def remove(self, name: str) -> None:
        self._data.pop(name, None)

    def update(self, values: Dict[str, Any]) -> None:
        self._data.update(values)

    @property
    def data(self) -> Dict[str, Any]:
        return dict(self._data)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __contains__(self, name: str) -> bool:
        return name in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    # ------------------------------------------------------------------
    # Controller binding
    # ------------------------------------------------------------------

    def attach(self, controller: "Controller") -> None:
        self.controller = controller
        if self.context is None:
            self.context = controller.context

    def detach(self) -> None:
        self.controller = None
        self._open_block = None

    def _require_controller(self) -> "Controller":
        if self.controller is None:
            raise MissingDependencyError("View is not attached to a controller")
        return self.controller

    def _require_context(self) -> "AppContext":
        if self.context is None:
            raise MissingDependencyError("View has no application context")
        return self.context

    @property
    def block_cache(self) -> "Controller":
        return self._require_controller()

    def make_url(self, route_name: str, parameters: Optional[Dict[str, Any]] = None) -> str:
        return self._require_controller().router.make_url(route_name, parameters)

    def param(self, name: str, default: Any = "") -> str:
        """HTML-escaped request parameter."""
        value = self._require_controller().request.get_param(name, default)
        return html.escape(str(value))

    def translate(self, key: str, *args: Any) -> str:
        return self._require_context().translators.main.translate(key, *args)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def exists(self, template: Optional[str] = None, use_cache: Optional[bool] = None) -> bool:
        """Whether the template exists, memoized in the local cache."""
        template = template or self.template
        if not template:
            return False

        context = self._require_context()
        if use_cache is None:
            use_cache = context.config.use_system_cache

        key = f"{EXISTS_CACHE_PREFIX}{template}"
        if use_cache:
            cached = context.cache.fetch_local(key)
            if cached is not None:
                return cached

        if context.templates is None:
            raise MissingDependencyError("No template engine configured")

        exists = context.templates.exists(template)
        if use_cache:
            context.cache.store_local(key, exists)
        return exists

    def render(self, writer: Optional[io.TextIOBase] = None) -> str:
        if not self.template:
            raise MissingTemplateError(None)

        context = self._require_context()
        if context.templates is None:
            raise MissingDependencyError("No template engine configured")

        variables = dict(self._data)
        variables["view"] = self
        output = context.templates.render(self.template, variables)

        if writer is not None:
            writer.write(output)
        return output

    # ------------------------------------------------------------------
    # Cache blocks
    # ------------------------------------------------------------------

    def cache_block(self, name: str, context: Any = None, ttl: Optional[int] = None) -> CacheBlock:
        """Open a cache block; the handle must be ended or discarded once."""
        if self._open_block is not None:
            raise NestedCacheBlockError(self._open_block.name, name)

        hit, contents = self.block_cache.is_block_cached(name, context, ttl)
        block = CacheBlock(self, name, hit, contents)
        self._open_block = block
        return block

    def _close_block(self, block: CacheBlock) -> None:
        if self._open_block is not block:
            raise CacheBlockError(f'Cache block "{block.name}" is not the open block')
        self._open_block = None

    @property
    def open_block(self) -> Optional[CacheBlock]:
        return self._open_block

    def cached(
        self,
        name: str,
        context: Any = None,
        ttl: Optional[int] = None,
        caller: Optional[Callable[[], str]] = None,
    ) -> Markup:
        """Jinja ``{% call %}`` entry point; the call body renders only on a miss."""
        block = self.cache_block(name, context, ttl)
        if block.hit:
            return Markup(block.end())

        try:
            block.write(str(caller()) if caller is not None else "")
        except BaseException:
            if not block.released:
                block.discard()
            raise
        return Markup(block.end())

    def __repr__(self) -> str:
        return f"<View {self.template}>"
