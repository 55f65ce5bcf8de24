"""
VeloxFaults — Fault taxonomy shared by every subsystem.

A fault is an exception that also carries a stable code, the functional
area it came from and a severity. The front controller reads the
severity to decide between re-routing to the error controller and
aborting the request outright.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """How bad a fault is; FATAL faults are never recovered from."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class FaultDomain:
    """
    Named functional area a fault belongs to.

    Domains compare equal to other domains of the same name and to the
    plain name string, so ``fault.domain == "routing"`` works.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description

    @property
    def value(self) -> str:
        return self.name

    def __eq__(self, other: Any) -> bool:
        other_name = other.name if isinstance(other, FaultDomain) else other
        return self.name == other_name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<FaultDomain {self.name}>"


FaultDomain.CONFIG = FaultDomain("config", "Settings and wiring problems")
FaultDomain.CACHE = FaultDomain("cache", "Cache tiers and cache blocks")
FaultDomain.ROUTING = FaultDomain("routing", "Route table lookups and URL generation")
FaultDomain.DISPATCH = FaultDomain("dispatch", "Controller and action resolution")
FaultDomain.VIEW = FaultDomain("view", "View data and template rendering")
FaultDomain.I18N = FaultDomain("i18n", "Translation tables")
FaultDomain.SYSTEM = FaultDomain("system", "Anything else")


# (severity, retryable) applied when a fault does not say otherwise
DOMAIN_DEFAULTS = {
    domain: {"severity": severity, "retryable": retryable}
    for domain, severity, retryable in (
        (FaultDomain.CONFIG, Severity.FATAL, False),
        (FaultDomain.CACHE, Severity.WARN, True),
        (FaultDomain.ROUTING, Severity.ERROR, False),
        (FaultDomain.DISPATCH, Severity.ERROR, False),
        (FaultDomain.VIEW, Severity.ERROR, False),
        (FaultDomain.I18N, Severity.ERROR, False),
        (FaultDomain.SYSTEM, Severity.FATAL, False),
    )
}

_FALLBACK = {"severity": Severity.ERROR, "retryable": False}


# ============================================================================
# Fault
# ============================================================================

class Fault(Exception):
    """
    Root of every framework exception.

    ``code`` and ``domain`` may be given per instance or pinned on a
    subclass; both plus a message are required. ``metadata`` holds the
    values that identify the failing thing (a route name, a cache key)
    and ends up in debug pages and log records.

    Example::

        class UnknownWidgetError(Fault):
            code = "UNKNOWN_WIDGET"
            domain = FaultDomain.VIEW

        raise UnknownWidgetError(message="no widget 'menu'", metadata={"widget": "menu"})
    """

    code: Optional[str] = None
    domain: Optional[FaultDomain] = None

    def __init__(
        self,
        code: Optional[str] = None,
        message: Optional[str] = None,
        *,
        domain: Optional[FaultDomain] = None,
        severity: Optional[Severity] = None,
        retryable: Optional[bool] = None,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        code = code or type(self).code
        domain = domain or type(self).domain
        missing = [
            label for label, value in (("code", code), ("message", message), ("domain", domain))
            if value is None
        ]
        if missing:
            raise TypeError(f"{type(self).__name__}() needs {', '.join(missing)}")

        super().__init__(message)
        self.code = code
        self.message = message
        self.domain = domain

        fallback = DOMAIN_DEFAULTS.get(domain, _FALLBACK)
        self.severity = severity if severity is not None else fallback["severity"]
        self.retryable = fallback["retryable"] if retryable is None else retryable
        self.public = public
        self.metadata = dict(metadata) if metadata else {}

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.FATAL

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.code} {self.domain}/{self.severity.value}>"

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view of the fault; metadata values are repr()'d."""
        data: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "public": self.public,
        }
        data["metadata"] = {key: repr(value) for key, value in self.metadata.items()}
        return data
