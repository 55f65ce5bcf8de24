"""
VeloxRouting — Router.

Holds the ordered, named route table of an application, matches request
paths against it, builds URLs from route names and synthesizes the error
routes the dispatch loop recovers through.

Cache keys (local tier, system cache only):

- ``velox.routes`` — the parsed route table
- ``velox.router-route|<path>`` — the route matched for a request path
- ``velox.route-url|<name>.<language>.<params>`` — built URLs
"""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union, TYPE_CHECKING

from velox.faults import InvalidRouteError, MissingParameterError, UndefinedRouteError

from .route import Route, TokenKind

if TYPE_CHECKING:
    from velox.context import AppContext
    from velox.dispatch.token import DispatchToken
    from velox.http.request import HttpRequest

logger = logging.getLogger("velox.routing")

ROUTES_CACHE_KEY = "velox.routes"
ROUTE_MATCH_CACHE_PREFIX = "velox.router-route|"
ROUTE_URL_CACHE_PREFIX = "velox.route-url|"

# Keys of a route definition that are not default parameters
DEFINITION_KEYS = ("path", "controller", "action")

RouteDefinitions = Union[Mapping[str, Mapping[str, Any]], Iterable[Mapping[str, Any]]]

# Error route actions handled by the error controller
PAGE_NOT_FOUND = "page-not-found"
INVALID_CONTROLLER = "invalid-controller"
INVALID_ACTION = "invalid-action"
APPLICATION_ERROR = "application-error"


def load_route_definitions(path: Union[str, Path]) -> "OrderedDict[str, Dict[str, Any]]":
    """
    Read route definitions from a YAML or JSON file.

    The file holds either the route mapping itself or a mapping with a
    top-level ``routes`` key. Definition order is preserved.
    """
    path = Path(path)
    if not path.exists():
        raise InvalidRouteError(f"Route file not found: {path}", file=str(path))

    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        import yaml

        data = yaml.safe_load(text) or {}
    elif path.suffix == ".json":
        data = json.loads(text, object_pairs_hook=OrderedDict)
    else:
        raise InvalidRouteError(f"Unsupported route file format: {path.suffix}", file=str(path))

    if isinstance(data, Mapping) and "routes" in data:
        data = data["routes"]

    return normalize_definitions(data)


def normalize_definitions(definitions: Optional[RouteDefinitions]) -> "OrderedDict[str, Dict[str, Any]]":
    """Ordered ``name -> definition`` mapping from a mapping or a list of named entries."""
    normalized: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
    if not definitions:
        return normalized

    if isinstance(definitions, Mapping):
        for name, definition in definitions.items():
            if not isinstance(definition, Mapping):
                raise InvalidRouteError(f'Route "{name}" definition must be a mapping', route=name)
            normalized[str(name)] = dict(definition)
        return normalized

    for definition in definitions:
        if not isinstance(definition, Mapping) or "name" not in definition:
            raise InvalidRouteError("Route list entries need a 'name' key", definition=definition)
        entry = dict(definition)
        normalized[str(entry.pop("name"))] = entry
    return normalized


class Router:
    """
    Named route table with matching and URL building.

    Routes come from ``definitions`` when given, else from the
    application config (``routes`` inline, then ``routes_file``).
    """

    def __init__(self, context: "AppContext", definitions: Optional[RouteDefinitions] = None):
        self.context = context
        self._definitions = definitions
        self._routes: Optional["OrderedDict[str, Route]"] = None

    @property
    def config(self):
        return self.context.config

    @property
    def cache(self):
        return self.context.cache

    def _use_cache(self, use_cache: Optional[bool]) -> bool:
        return self.config.use_system_cache if use_cache is None else use_cache

    # ------------------------------------------------------------------
    # Route table
    # ------------------------------------------------------------------

    def get_route_definitions(self) -> "OrderedDict[str, Dict[str, Any]]":
        if self._definitions is not None:
            return normalize_definitions(self._definitions)

        definitions = normalize_definitions(self.config.routes)
        if self.config.routes_file:
            for name, definition in load_route_definitions(self.config.routes_file).items():
                definitions.setdefault(name, definition)
        return definitions

    def get_routes(self, use_cache: Optional[bool] = None) -> "OrderedDict[str, Route]":
        """Lazily load the route table, once per router."""
        if self._routes is not None:
            return self._routes

        use_cache = self._use_cache(use_cache)
        routes = self.cache.fetch_local(ROUTES_CACHE_KEY) if use_cache else None

        if routes is None:
            routes = self.parse_routes(self.get_route_definitions())
            if use_cache:
                self.cache.store_local(ROUTES_CACHE_KEY, routes, self.config.ttl_routes)
            logger.debug(f"Loaded {len(routes)} route(s)")

        self._routes = routes
        return routes

    def parse_routes(self, definitions: RouteDefinitions) -> "OrderedDict[str, Route]":
        """Build routes; keys besides path/controller/action become defaults."""
        routes: "OrderedDict[str, Route]" = OrderedDict()

        for name, definition in normalize_definitions(definitions).items():
            missing = [key for key in DEFINITION_KEYS if key not in definition]
            if missing:
                raise InvalidRouteError(
                    f'Route "{name}" is missing {", ".join(missing)}',
                    route=name,
                    missing=missing,
                )

            defaults = {k: v for k, v in definition.items() if k not in DEFINITION_KEYS}
            routes[name] = self.create_route(
                name,
                str(definition["path"]),
                str(definition["controller"]),
                str(definition["action"]),
                defaults,
            )

        return routes

    def create_route(
        self,
        name: str,
        path: str,
        controller: str,
        action: str,
        defaults: Optional[Dict[str, Any]] = None,
    ) -> Route:
        """Route factory, override to use a Route subclass."""
        return Route(name, path, controller, action, defaults)

    def get_route(self, name: str) -> Optional[Route]:
        route = self.get_routes().get(name)
        return route.clone() if route is not None else None

    def set_route(self, name: str, route: Route) -> None:
        self.get_routes()[name] = route

    def add_route(
        self,
        name: str,
        path: str,
        controller: str,
        action: str,
        defaults: Optional[Dict[str, Any]] = None,
    ) -> Route:
        route = self.create_route(name, path, controller, action, defaults)
        self.set_route(name, route)
        return route

    def __len__(self) -> int:
        return len(self.get_routes())

    def __iter__(self):
        return iter(self.get_routes().values())

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def match_route(self, request: "HttpRequest", use_cache: Optional[bool] = None) -> Optional[Route]:
        """
        First route, in table order, matching the request path.

        The returned route is a private copy bound to this request; the
        table and cache only ever hold templates.
        """
        use_cache = self._use_cache(use_cache)
        route_path = request.route_path
        cache_key = f"{ROUTE_MATCH_CACHE_PREFIX}{route_path}"

        if use_cache:
            cached = self.cache.fetch_local(cache_key)
            if cached is not None:
                logger.debug(f"Route cache hit for '{route_path}': {cached.name}")
                return cached.clone()

        translators = self.context.translators

        for route in self.get_routes(use_cache).values():
            parameters = route.match(route_path, translators=translators)
            if parameters is None:
                continue

            matched = route.clone()
            matched.set_params(parameters)
            logger.debug(f"Matched '{route_path}' to route {matched.signature()}")

            if use_cache:
                self.cache.store_local(cache_key, matched, self.config.ttl_routes)
            return matched

        logger.debug(f"No route matches '{route_path}'")
        return None

    # ------------------------------------------------------------------
    # URL building
    # ------------------------------------------------------------------

    def make_url(
        self,
        route_name: str,
        parameters: Optional[Dict[str, Any]] = None,
        use_cache: Optional[bool] = None,
        use_translator: bool = True,
    ) -> str:
        """
        Build the URL of a named route.

        Supplied parameters fill variables; otherwise a variable falls
        back to its default unless it is the last token, which is then
        omitted.

        Raises:
            UndefinedRouteError: unknown route name
            MissingParameterError: a variable with neither value nor default
        """
        parameters = dict(parameters or {})
        use_cache = self._use_cache(use_cache)
        translator = self.context.translators.routes if use_translator else None

        cache_key = None
        if use_cache:
            language = translator.language if translator is not None else "-"
            signature = json.dumps(parameters, sort_keys=True, default=str)
            cache_key = f"{ROUTE_URL_CACHE_PREFIX}{route_name}.{language}.{signature}"
            url = self.cache.fetch_local(cache_key)
            if url is not None:
                return url

        route = self.get_routes(use_cache).get(route_name)
        if route is None:
            raise UndefinedRouteError(route_name)

        segments = route.segments
        defaults = route.defaults
        parts: List[str] = []

        for index, segment in enumerate(segments):
            if segment.kind is TokenKind.VARIABLE:
                value = parameters.get(segment.value)
                if value is None:
                    if segment.value in defaults and index < len(segments) - 1:
                        value = defaults[segment.value]
                    elif segment.value in defaults:
                        continue
                    else:
                        raise MissingParameterError(route_name, segment.value)
                parts.append(str(value))

            elif segment.kind is TokenKind.TRANSLATABLE:
                translated = translator.get_if_exists(segment.value) if translator is not None else None
                parts.append(translated or segment.value)

            else:
                parts.append(segment.value)

        url = "/" + "/".join(parts)

        if cache_key is not None:
            self.cache.store_local(cache_key, url, self.config.ttl_routes)
        return url

    # ------------------------------------------------------------------
    # Error routes
    # ------------------------------------------------------------------

    def _error_route(self, action: str, parameters: Dict[str, Any]) -> Route:
        route = self.create_route(action, "", self.config.error_controller, action)
        route.set_params(parameters)
        return route

    def get_page_not_found_route(self, request: "HttpRequest") -> Route:
        return self._error_route(PAGE_NOT_FOUND, {"request": request})

    def get_invalid_controller_route(
        self,
        request: "HttpRequest",
        dispatch_token: Optional["DispatchToken"] = None,
        exception: Optional[BaseException] = None,
    ) -> Route:
        return self._error_route(
            INVALID_CONTROLLER,
            {"request": request, "dispatch-token": dispatch_token, "exception": exception},
        )

    def get_invalid_action_route(
        self,
        request: "HttpRequest",
        dispatch_token: Optional["DispatchToken"] = None,
        exception: Optional[BaseException] = None,
    ) -> Route:
        return self._error_route(
            INVALID_ACTION,
            {"request": request, "dispatch-token": dispatch_token, "exception": exception},
        )

    def get_application_error_route(
        self,
        request: "HttpRequest",
        dispatch_token: Optional["DispatchToken"] = None,
        exception: Optional[BaseException] = None,
    ) -> Route:
        return self._error_route(
            APPLICATION_ERROR,
            {"request": request, "dispatch-token": dispatch_token, "exception": exception},
        )

    def get_special_route(self, request: "HttpRequest") -> Optional[Route]:
        """Hook for application-specific fallback routes, consulted before 404."""
        return None
