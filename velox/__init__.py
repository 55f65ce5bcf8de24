"""
Velox - MVC web application framework.

Request pipeline:

    HttpRequest -> Router.match_route -> Route
                -> Dispatcher.resolve -> DispatchToken
                -> FrontController dispatch loop -> Controller lifecycle
                -> HttpResponse

Caching, translators and sessions are explicit collaborators held by an
``AppContext``; there is no process-wide state.
"""

__version__ = "0.4.0"

from .app import Application, ExitStatus, RunResult
from .cache import Cache, CacheTier
from .config import ConfigLoader, VeloxConfig
from .context import AppContext
from .controller import Controller, ErrorController, FrontController
from .dispatch import DispatchToken, Dispatcher
from .http import HttpRequest, HttpResponse
from .i18n import Translator, TranslatorRegistry
from .routing import Route, Router
from .view import View, TemplateEngine

__all__ = [
    "__version__",
    "Application",
    "ExitStatus",
    "RunResult",
    "Cache",
    "CacheTier",
    "ConfigLoader",
    "VeloxConfig",
    "AppContext",
    "Controller",
    "ErrorController",
    "FrontController",
    "DispatchToken",
    "Dispatcher",
    "HttpRequest",
    "HttpResponse",
    "Translator",
    "TranslatorRegistry",
    "Route",
    "Router",
    "View",
    "TemplateEngine",
]
