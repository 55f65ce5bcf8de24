"""
Front Controller - the request dispatch loop.

    ROUTING -> RESOLVING -> DISPATCHING -> DONE
                    ^            |
                    +--RECOVERING+

Forward chains requested by controllers are followed until a controller
stops forwarding. Failures are re-dispatched to the router's error
routes; if the error route resolves to the very controller action that
just failed, the request fails with ``DispatchLoopError`` instead of
recursing again.
"""

from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from velox.dispatch.recovery import classify_failure, plan_recovery
from velox.faults import DispatchLoopError, InvalidNameError
from velox.http.response import HttpResponse
from velox.routing.route import Route

if TYPE_CHECKING:
    from velox.bootstrap import Bootstrapper
    from velox.context import AppContext
    from velox.dispatch.dispatcher import Dispatcher
    from velox.dispatch.token import DispatchToken
    from velox.http.request import HttpRequest
    from velox.routing.router import Router

logger = logging.getLogger("velox.front")


class FrontController:
    """
    Routes a request, dispatches it and recovers from dispatch failures.

    Args:
        context: Application context
        router: Route table
        dispatcher: Route to controller resolution
        bootstrapper: Notified when a request completes
    """

    def __init__(
        self,
        context: "AppContext",
        router: "Router",
        dispatcher: "Dispatcher",
        bootstrapper: Optional["Bootstrapper"] = None,
    ):
        self.context = context
        self.router = router
        self.dispatcher = dispatcher
        self.bootstrapper = bootstrapper
        self.current_token: Optional["DispatchToken"] = None

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def get_direct_route(self, request: "HttpRequest") -> Optional[Route]:
        """
        Implicit ``/<controller>/<action>/<name>/<value>...`` route.

        Only used when the controller exists and has the action. A
        controller module that fails to import is still routed to, so the
        import error surfaces inside the dispatch loop as an application
        error.
        """
        tokens = [t for t in request.route_path.split("/") if t]
        if not tokens:
            return None

        controller = tokens[0]
        action = tokens[1] if len(tokens) > 1 else "index"

        try:
            if not self.dispatcher.action_exists(controller, action):
                return None
        except InvalidNameError:
            return None
        except Exception as exc:
            logger.warning(f"Controller '{controller}' failed to import: {exc!r}")

        parameters = {}
        rest = tokens[2:]
        for index in range(0, len(rest), 2):
            parameters[rest[index]] = rest[index + 1] if index + 1 < len(rest) else True

        route = self.router.create_route(f"direct:{controller}/{action}", request.route_path, controller, action)
        route.set_params(parameters)
        return route

    def resolve_route(self, request: "HttpRequest") -> Route:
        """Matched route, else direct route, else special route, else not-found."""
        route = self.router.match_route(request)
        if route is None:
            route = self.get_direct_route(request)
        if route is None:
            route = self.router.get_special_route(request)
        if route is None:
            logger.debug(f"Page not found: '/{request.route_path}'")
            route = self.router.get_page_not_found_route(request)
        return route

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(
        self,
        request: "HttpRequest",
        response: "HttpResponse",
        route: Route,
        dispatch_token: "DispatchToken",
    ) -> HttpResponse:
        """
        Dispatch a token, following forwards until none is requested.

        Failures propagate; ``current_token`` names the token that failed.
        """
        token: Optional["DispatchToken"] = dispatch_token

        while token is not None:
            self.current_token = token
            controller = self.dispatcher.create_controller(token)
            action = self.dispatcher.get_action(controller, token)

            try:
                if controller.on_pre_dispatch(
                    self,
                    request,
                    self.bootstrapper,
                    self.router,
                    self.dispatcher,
                    route,
                    token,
                    response,
                ):
                    action(dict(token.parameters))
                next_token = controller.on_post_dispatch()
            except BaseException:
                controller.abort_dispatch()
                raise

            if next_token is not None:
                logger.debug(
                    f"Forward {token.controller_name}/{token.action_name} -> "
                    f"{next_token.controller_name}/{next_token.action_name}"
                )
            token = next_token

        return response

    def handle(self, request: "HttpRequest") -> HttpResponse:
        """
        Run the dispatch loop for a request.

        Raises:
            DispatchLoopError: error-route recovery would repeat the failed action
            Fault: any fatal fault, untouched
        """
        route = self.resolve_route(request)
        dispatch_token = self.dispatcher.resolve(route)
        response = HttpResponse()

        while True:
            self.current_token = None
            try:
                self.dispatch(request, response, route, dispatch_token)
                break
            except Exception as exc:
                kind = classify_failure(exc)
                if kind is None:
                    raise

                failed_token = getattr(exc, "dispatch_token", None) or self.current_token or dispatch_token
                plan = plan_recovery(kind, failed_token, exc, request, self.router, self.dispatcher)

                if plan.fatal:
                    logger.critical(
                        f"Dispatch loop detected on {kind.value}: "
                        f"{failed_token.controller_class_name}.{failed_token.action_method_name}"
                    )
                    raise DispatchLoopError(
                        f"Dispatch loop while handling {kind.value} for "
                        f"{failed_token.controller_class_name}.{failed_token.action_method_name}",
                        failure_kind=kind.value,
                        dispatch_token=failed_token,
                    ) from exc

                logger.warning(f"Recovering from {kind.value} via route '{plan.route.name}': {exc}")
                route, dispatch_token = plan.route, plan.dispatch_token
                response = HttpResponse()

        if self.bootstrapper is not None:
            self.bootstrapper.on_request_complete(response)
        return response
