"""
VeloxFaults - Concrete fault classes.

Each class pins its stable ``code`` and ``domain``. The dispatch loop
recovers from ``InvalidControllerError``, ``InvalidActionError`` and
non-fatal application errors; everything marked FATAL propagates to the
process boundary untouched.
"""

from __future__ import annotations

from typing import Any, Optional, TYPE_CHECKING

from .core import Fault, FaultDomain, Severity

if TYPE_CHECKING:
    from velox.dispatch.token import DispatchToken


# ============================================================================
# Configuration & arguments
# ============================================================================

class ConfigurationError(Fault):
    """Unsupported cache tier, enabled-but-unconfigured strategy, bad config."""

    code = "CONFIGURATION_ERROR"
    domain = FaultDomain.CONFIG

    def __init__(self, message: str, **metadata: Any):
        super().__init__(message=message, severity=Severity.FATAL, metadata=metadata)


class InvalidArgumentError(Fault):
    """Caller bug, e.g. a default given when fetching several cache keys."""

    code = "INVALID_ARGUMENT"
    domain = FaultDomain.SYSTEM

    def __init__(self, message: str, **metadata: Any):
        super().__init__(message=message, severity=Severity.FATAL, metadata=metadata)


class MissingDependencyError(Fault):
    """A collaborator was used before it was wired in."""

    code = "MISSING_DEPENDENCY"
    domain = FaultDomain.CONFIG

    def __init__(self, message: str, **metadata: Any):
        super().__init__(message=message, severity=Severity.FATAL, metadata=metadata)


# ============================================================================
# Routing
# ============================================================================

class InvalidRouteError(Fault):
    """Malformed route definition (missing keys, unknown type constraint)."""

    code = "INVALID_ROUTE"
    domain = FaultDomain.ROUTING

    def __init__(self, message: str, **metadata: Any):
        super().__init__(message=message, severity=Severity.FATAL, metadata=metadata)


class UndefinedRouteError(Fault):
    """A URL was requested for a route name that is not in the table."""

    code = "UNDEFINED_ROUTE"
    domain = FaultDomain.ROUTING

    def __init__(self, route_name: str):
        super().__init__(
            message=f'Route called "{route_name}" is not defined',
            metadata={"route": route_name},
        )
        self.route_name = route_name


class MissingParameterError(Fault):
    """A route variable without a default was not supplied to make_url()."""

    code = "MISSING_PARAMETER"
    domain = FaultDomain.ROUTING

    def __init__(self, route_name: str, parameter: str):
        super().__init__(
            message=f'Missing route url parameter "{parameter}" for route "{route_name}"',
            metadata={"route": route_name, "parameter": parameter},
        )
        self.route_name = route_name
        self.parameter = parameter


# ============================================================================
# Dispatch
# ============================================================================

class InvalidNameError(Fault):
    """Route-format controller/action name that cannot be translated."""

    code = "INVALID_NAME"
    domain = FaultDomain.DISPATCH

    def __init__(self, kind: str, name: str):
        super().__init__(
            message=f'Invalid {kind} name "{name}"',
            severity=Severity.FATAL,
            metadata={"kind": kind, "name": name},
        )
        self.name = name


class InvalidControllerError(Fault):
    """The controller named by a dispatch token cannot be loaded or created."""

    code = "INVALID_CONTROLLER"
    domain = FaultDomain.DISPATCH

    def __init__(self, dispatch_token: "DispatchToken", reason: str = ""):
        message = f'Controller "{dispatch_token.controller_class_name}" is not available'
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message=message, metadata={"dispatch_token": dispatch_token})
        self.dispatch_token = dispatch_token


class InvalidActionError(Fault):
    """The action method named by a dispatch token is missing or not callable."""

    code = "INVALID_ACTION"
    domain = FaultDomain.DISPATCH

    def __init__(self, dispatch_token: "DispatchToken", reason: str = ""):
        message = (
            f'Action "{dispatch_token.controller_class_name}.'
            f'{dispatch_token.action_method_name}" is not callable'
        )
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message=message, metadata={"dispatch_token": dispatch_token})
        self.dispatch_token = dispatch_token


class DispatchLoopError(Fault):
    """Error-route resolution produced the very token that just failed."""

    code = "DISPATCH_LOOP"
    domain = FaultDomain.DISPATCH

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str,
        dispatch_token: Optional["DispatchToken"] = None,
    ):
        super().__init__(
            message=message,
            severity=Severity.FATAL,
            metadata={"failure_kind": failure_kind, "dispatch_token": dispatch_token},
        )
        self.failure_kind = failure_kind
        self.dispatch_token = dispatch_token


# ============================================================================
# Views
# ============================================================================

class MissingKeyError(Fault):
    """Lookup of a view variable that was never set."""

    code = "MISSING_VIEW_KEY"
    domain = FaultDomain.VIEW

    def __init__(self, name: str):
        super().__init__(message=f'View variable "{name}" is not set', metadata={"name": name})
        self.name = name


class MissingTemplateError(Fault):
    """A view or layout template could not be found."""

    code = "MISSING_TEMPLATE"
    domain = FaultDomain.VIEW

    def __init__(self, template: Optional[str]):
        if template is None:
            message = "View template has not been set"
        else:
            message = f'View template "{template}" does not exist'
        super().__init__(message=message, metadata={"template": template})
        self.template = template


class NestedCacheBlockError(Fault):
    """A cache block was opened while another one is still open."""

    code = "NESTED_CACHE_BLOCK"
    domain = FaultDomain.VIEW

    def __init__(self, open_block: str, new_block: str):
        super().__init__(
            message=f'Cache blocks can not be nested: "{new_block}" opened inside "{open_block}"',
            severity=Severity.FATAL,
            metadata={"open_block": open_block, "new_block": new_block},
        )


class CacheBlockError(Fault):
    """A cache block handle was released twice or without being opened."""

    code = "CACHE_BLOCK_STATE"
    domain = FaultDomain.VIEW

    def __init__(self, message: str):
        super().__init__(message=message, severity=Severity.FATAL)


# ============================================================================
# Translations
# ============================================================================

class MissingTranslationError(Fault):
    """Translation key lookup failed while running in debug mode."""

    code = "MISSING_TRANSLATION"
    domain = FaultDomain.I18N

    def __init__(self, namespace: str, key: str):
        super().__init__(
            message=f'Translation for key "{key}" does not exist in "{namespace}"',
            metadata={"namespace": namespace, "key": key},
        )
        self.key = key


# Faults the dispatch loop must never turn into an error page
FATAL_FAULTS = (
    ConfigurationError,
    InvalidArgumentError,
    MissingDependencyError,
    InvalidNameError,
    InvalidRouteError,
    NestedCacheBlockError,
    CacheBlockError,
    DispatchLoopError,
)
