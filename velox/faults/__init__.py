"""
VeloxFaults - Structured error handling.

Every framework error is a typed ``Fault`` with a stable code, a domain
and a severity. See ``domains`` for the concrete taxonomy.
"""

from .core import (
    DOMAIN_DEFAULTS,
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    FATAL_FAULTS,
    CacheBlockError,
    ConfigurationError,
    DispatchLoopError,
    InvalidActionError,
    InvalidArgumentError,
    InvalidControllerError,
    InvalidNameError,
    InvalidRouteError,
    MissingDependencyError,
    MissingKeyError,
    MissingParameterError,
    MissingTemplateError,
    MissingTranslationError,
    NestedCacheBlockError,
    UndefinedRouteError,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",
    "DOMAIN_DEFAULTS",

    # Concrete faults
    "ConfigurationError",
    "InvalidArgumentError",
    "MissingDependencyError",
    "InvalidRouteError",
    "UndefinedRouteError",
    "MissingParameterError",
    "InvalidNameError",
    "InvalidControllerError",
    "InvalidActionError",
    "DispatchLoopError",
    "MissingKeyError",
    "MissingTemplateError",
    "NestedCacheBlockError",
    "CacheBlockError",
    "MissingTranslationError",
    "FATAL_FAULTS",
]
