"""
VeloxDispatch — Dispatcher.

Translates route-format names into controller classes and action
methods, producing ``DispatchToken`` objects, and locates controller
classes for the front controller:

    user-manager -> UserManagerController  (module ``<package>.user_manager``)
    save-user    -> saveUserAction
"""

from __future__ import annotations

import importlib
import logging
import re
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type, TYPE_CHECKING

from velox.faults import InvalidActionError, InvalidControllerError, InvalidNameError

from .token import ACTION_SUFFIX, CONTROLLER_SUFFIX, DispatchToken

if TYPE_CHECKING:
    from velox.context import AppContext
    from velox.controller.base import Controller
    from velox.routing.route import Route

logger = logging.getLogger("velox.dispatch")

RESOLVE_CACHE_PREFIX = "velox.dispatch-token|"

_DASH_CHAR = re.compile(r"-(.)")


def dashes_to_camel_case(name: str) -> str:
    """``save-user`` -> ``saveUser``."""
    return _DASH_CHAR.sub(lambda m: m.group(1).upper(), name)


class Dispatcher:
    """
    Route -> DispatchToken resolution and controller lookup.

    Controller classes are looked up in the explicit ``controllers``
    registry first, then imported from ``package``. The framework's
    ``ErrorController`` is registered unless the application provides
    its own.
    """

    def __init__(
        self,
        context: "AppContext",
        controllers: Optional[Mapping[str, Type["Controller"]]] = None,
        package: Optional[str] = None,
    ):
        from velox.controller.error import ErrorController

        self.context = context
        self.package = package if package is not None else context.config.controllers_package
        self._controllers: Dict[str, Type["Controller"]] = {"ErrorController": ErrorController}
        self._controllers.update(controllers or {})

    # ------------------------------------------------------------------
    # Name translation
    # ------------------------------------------------------------------

    @staticmethod
    def _check_name(kind: str, name: str) -> None:
        if not name or "." in name:
            raise InvalidNameError(kind, name)

    def translate_controller_class_name(self, name: str) -> str:
        """``user-manager`` -> ``UserManagerController``."""
        self._check_name("controller", name)
        camel = dashes_to_camel_case(name)
        return camel[0].upper() + camel[1:] + CONTROLLER_SUFFIX

    def translate_action_method_name(self, name: str) -> str:
        """``save-user`` -> ``saveUserAction``."""
        self._check_name("action", name)
        return dashes_to_camel_case(name) + ACTION_SUFFIX

    def get_controller_location(self, controller: str) -> str:
        """Import location of the controller for route-format name ``controller``."""
        class_name = self.translate_controller_class_name(controller)
        module = controller.replace("-", "_")
        if self.package:
            module = f"{self.package}.{module}"
        return f"{module}:{class_name}"

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _translate(self, controller: str, action: str, use_cache: bool) -> Tuple[str, str, str]:
        cache_key = f"{RESOLVE_CACHE_PREFIX}{controller}|{action}"
        if use_cache:
            cached = self.context.cache.fetch_local(cache_key)
            if cached is not None:
                return tuple(cached)

        names = (
            self.translate_controller_class_name(controller),
            self.translate_action_method_name(action),
            self.get_controller_location(controller),
        )

        if use_cache:
            self.context.cache.store_local(cache_key, list(names), self.context.config.ttl_dispatch_resolve)
        return names

    def resolve(self, route: "Route", use_cache: Optional[bool] = None) -> DispatchToken:
        """
        Dispatch token for a matched route.

        Only the name translation is ever cached, never the parameters.
        """
        if use_cache is None:
            config = self.context.config
            use_cache = config.use_system_cache and config.cache_dispatch_resolve

        class_name, method_name, location = self._translate(route.controller, route.action, use_cache)
        return DispatchToken(class_name, method_name, route.parameters, location)

    def build(
        self,
        controller: str,
        action: str = "index",
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> DispatchToken:
        """Dispatch token for an explicit controller/action, e.g. a forward."""
        return DispatchToken(
            self.translate_controller_class_name(controller),
            self.translate_action_method_name(action),
            parameters,
            self.get_controller_location(controller),
        )

    # ------------------------------------------------------------------
    # Controller lookup
    # ------------------------------------------------------------------

    def register(self, controller_class: Type["Controller"], name: Optional[str] = None) -> None:
        self._controllers[name or controller_class.__name__] = controller_class

    def load_controller_class(self, dispatch_token: DispatchToken) -> Type["Controller"]:
        """
        Controller class named by a token.

        Raises:
            InvalidControllerError: not registered and not importable
        """
        from velox.controller.base import Controller

        class_name = dispatch_token.controller_class_name
        controller_class = self._controllers.get(class_name)

        if controller_class is None:
            location = dispatch_token.controller_location or ""
            module_name, _, attr = location.partition(":")
            if not module_name:
                raise InvalidControllerError(dispatch_token, "no controller location")

            try:
                module = importlib.import_module(module_name)
            except ModuleNotFoundError as exc:
                # Only a missing controller module is an invalid controller;
                # broken imports inside it are application errors.
                if exc.name and (module_name == exc.name or module_name.startswith(exc.name + ".")):
                    raise InvalidControllerError(dispatch_token, f"module {module_name} not found") from exc
                raise

            controller_class = getattr(module, attr or class_name, None)
            if controller_class is None:
                raise InvalidControllerError(dispatch_token, f"{module_name} has no {attr or class_name}")

        if not (isinstance(controller_class, type) and issubclass(controller_class, Controller)):
            raise InvalidControllerError(dispatch_token, "not a Controller subclass")

        return controller_class

    def create_controller(self, dispatch_token: DispatchToken) -> "Controller":
        return self.load_controller_class(dispatch_token)(self.context)

    @staticmethod
    def get_action(controller: "Controller", dispatch_token: DispatchToken) -> Callable[..., Any]:
        """
        Bound action method named by a token.

        Raises:
            InvalidActionError: missing or not callable
        """
        action = getattr(controller, dispatch_token.action_method_name, None)
        if action is None or not callable(action):
            raise InvalidActionError(dispatch_token)
        return action

    def controller_exists(self, controller: str) -> bool:
        try:
            self.load_controller_class(self.build(controller))
        except (InvalidControllerError, InvalidNameError):
            return False
        return True

    def action_exists(self, controller: str, action: str) -> bool:
        try:
            dispatch_token = self.build(controller, action)
            controller_class = self.load_controller_class(dispatch_token)
        except (InvalidControllerError, InvalidNameError):
            return False
        return callable(getattr(controller_class, dispatch_token.action_method_name, None))
