"""
Application - wiring and the process boundary.

``Application`` builds the context (config, cache, translators,
templates) and the router, dispatcher, bootstrapper and front
controller on top of it.

- ``handle(request)`` runs the dispatch loop and lets fatal faults out
- ``run(request)`` is the process boundary: it never raises, turns an
  escaped failure into a 500 page and reports a distinct exit status
  per failure class
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Mapping, Optional, TextIO, Type, TYPE_CHECKING

from velox.bootstrap import Bootstrapper
from velox.cache.providers import create_cache
from velox.config import ConfigLoader, VeloxConfig
from velox.context import AppContext
from velox.controller.front import FrontController
from velox.debug import dump, describe_exception, format_exception
from velox.dispatch.dispatcher import Dispatcher
from velox.faults import (
    ConfigurationError,
    DispatchLoopError,
    InvalidNameError,
    InvalidRouteError,
    UndefinedRouteError,
)
from velox.http.request import HttpRequest
from velox.http.response import HttpResponse
from velox.i18n import TranslatorRegistry
from velox.routing.router import RouteDefinitions, Router
from velox.view.engine import TemplateEngine

if TYPE_CHECKING:
    from velox.controller.base import Controller

logger = logging.getLogger("velox.app")


class ExitStatus(IntEnum):
    OK = 0
    ROUTING_SETUP = 1
    DISPATCH_LOOP = 2
    UNKNOWN = 3


# Faults caused by a malformed routing/dispatch setup
ROUTING_SETUP_FAULTS = (ConfigurationError, InvalidNameError, InvalidRouteError, UndefinedRouteError)


@dataclass
class RunResult:
    response: HttpResponse
    exit_status: ExitStatus = ExitStatus.OK
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.exit_status is ExitStatus.OK


def exit_status_for(exc: BaseException) -> ExitStatus:
    if isinstance(exc, DispatchLoopError):
        return ExitStatus.DISPATCH_LOOP
    if isinstance(exc, ROUTING_SETUP_FAULTS):
        return ExitStatus.ROUTING_SETUP
    return ExitStatus.UNKNOWN


class Application:
    """
    A wired Velox application.

    Example:
        app = Application(
            VeloxConfig(routes={"index": {"path": "/", "controller": "index", "action": "index"}}),
            controllers={"IndexController": IndexController},
        )
        result = app.run(HttpRequest.from_url("/"))
    """

    def __init__(
        self,
        config: Optional[VeloxConfig] = None,
        *,
        controllers: Optional[Mapping[str, Type["Controller"]]] = None,
        routes: Optional[RouteDefinitions] = None,
        templates: Optional[Dict[str, str]] = None,
        router_class: Type[Router] = Router,
        context: Optional[AppContext] = None,
    ):
        self.config = config or VeloxConfig()

        if context is None:
            context = AppContext(
                config=self.config,
                cache=create_cache(self.config),
                translators=TranslatorRegistry(
                    self.config.translations,
                    language=self.config.language,
                    debug=self.config.debug,
                ),
            )
        if context.templates is None:
            context.templates = TemplateEngine(self.config.template_dirs, templates)
        self.context = context

        self.router = router_class(context, routes)
        self.dispatcher = Dispatcher(context, controllers)
        self.bootstrapper = Bootstrapper(context)
        self.front_controller = FrontController(context, self.router, self.dispatcher, self.bootstrapper)

    @classmethod
    def from_config_files(
        cls,
        paths: Optional[List[str]] = None,
        env_file: Optional[str] = None,
        overrides: Optional[Dict] = None,
        **kwargs,
    ) -> "Application":
        loader = ConfigLoader.load(paths=paths, env_file=env_file, overrides=overrides)
        return cls(loader.to_config(), **kwargs)

    def handle(self, request: HttpRequest) -> HttpResponse:
        self.bootstrapper.bootstrap(request)
        return self.front_controller.handle(request)

    def run(self, request: HttpRequest, stream: Optional[TextIO] = None) -> RunResult:
        """Handle a request without raising; optionally send the response."""
        try:
            result = RunResult(self.handle(request))
        except Exception as exc:
            status = exit_status_for(exc)
            logger.critical(f"Request '/{request.route_path}' failed ({status.name}): {exc}", exc_info=exc)
            result = RunResult(self.error_response(exc), status, exc)

        if stream is not None:
            result.response.send(stream)
        return result

    def error_response(self, exc: BaseException) -> HttpResponse:
        """500 page; internals are only included in debug mode."""
        response = HttpResponse(status=500)
        if self.config.debug:
            response.set_content(
                "<h1>Fatal error</h1>\n"
                f"<pre>{html.escape(dump(describe_exception(exc)))}</pre>\n"
                f"<pre>{html.escape(format_exception(exc))}</pre>\n"
            )
        else:
            response.set_content("<h1>Internal Server Error</h1>\n")
        return response
