"""
VeloxDispatch — Failure recovery planning.

Pure decision logic of the dispatch loop: which error route a failure
is re-dispatched to, and whether doing so would loop. The loop itself
lives in ``FrontController``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from velox.faults import FATAL_FAULTS, InvalidActionError, InvalidControllerError

from .token import DispatchToken

if TYPE_CHECKING:
    from velox.http.request import HttpRequest
    from velox.routing.route import Route
    from velox.routing.router import Router

    from .dispatcher import Dispatcher

logger = logging.getLogger("velox.dispatch.recovery")


class FailureKind(str, Enum):
    """Recoverable failure classes, named after their error routes."""
    INVALID_CONTROLLER = "invalid-controller"
    INVALID_ACTION = "invalid-action"
    APPLICATION_ERROR = "application-error"


@dataclass
class RecoveryPlan:
    """Where a failed dispatch goes next."""
    kind: FailureKind
    route: "Route"
    dispatch_token: DispatchToken
    fatal: bool


def classify_failure(exc: BaseException) -> Optional[FailureKind]:
    """Failure kind of ``exc``, ``None`` when it must not be recovered from."""
    if isinstance(exc, FATAL_FAULTS) or not isinstance(exc, Exception):
        return None
    if isinstance(exc, InvalidControllerError):
        return FailureKind.INVALID_CONTROLLER
    if isinstance(exc, InvalidActionError):
        return FailureKind.INVALID_ACTION
    return FailureKind.APPLICATION_ERROR


def is_dispatch_loop(next_token: DispatchToken, failed_token: Optional[DispatchToken]) -> bool:
    """Recovering would re-dispatch the very controller action that just failed."""
    return failed_token is not None and next_token.is_same_as(failed_token)


def error_route(
    router: "Router",
    kind: FailureKind,
    request: "HttpRequest",
    failed_token: Optional[DispatchToken],
    exc: BaseException,
) -> "Route":
    if kind is FailureKind.INVALID_CONTROLLER:
        return router.get_invalid_controller_route(request, failed_token, exc)
    if kind is FailureKind.INVALID_ACTION:
        return router.get_invalid_action_route(request, failed_token, exc)
    return router.get_application_error_route(request, failed_token, exc)


def plan_recovery(
    kind: FailureKind,
    failed_token: Optional[DispatchToken],
    exc: BaseException,
    request: "HttpRequest",
    router: "Router",
    dispatcher: "Dispatcher",
) -> RecoveryPlan:
    """Error route for a failure, its dispatch token and whether it loops."""
    route = error_route(router, kind, request, failed_token, exc)
    next_token = dispatcher.resolve(route, use_cache=False)
    return RecoveryPlan(
        kind=kind,
        route=route,
        dispatch_token=next_token,
        fatal=is_dispatch_loop(next_token, failed_token),
    )
