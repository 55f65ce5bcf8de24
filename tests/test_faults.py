"""
Test suite for the fault taxonomy.

Covers:
- Fault construction, class-level code/domain, domain defaults
- Serialization for diagnostic dumps
- Which faults the dispatch loop treats as fatal
"""

from __future__ import annotations

import pytest

from velox.dispatch.token import DispatchToken
from velox.faults import (
    FATAL_FAULTS,
    CacheBlockError,
    ConfigurationError,
    DispatchLoopError,
    Fault,
    FaultDomain,
    InvalidActionError,
    InvalidControllerError,
    InvalidNameError,
    MissingKeyError,
    MissingParameterError,
    MissingTranslationError,
    NestedCacheBlockError,
    Severity,
    UndefinedRouteError,
)


class TestFault:
    def test_explicit_fields(self):
        fault = Fault("X_CODE", "something broke", domain=FaultDomain.CACHE)
        assert fault.code == "X_CODE"
        assert str(fault) == "[X_CODE] something broke"
        assert fault.severity is Severity.WARN
        assert fault.retryable

    def test_missing_fields(self):
        with pytest.raises(TypeError):
            Fault(message="no code or domain")

    def test_domain_equality(self):
        assert FaultDomain.ROUTING == FaultDomain("routing")
        assert FaultDomain.ROUTING == "routing"
        assert len({FaultDomain.ROUTING, FaultDomain("routing")}) == 1

    def test_to_dict(self):
        data = MissingParameterError("topic", "id").to_dict()
        assert data["code"] == "MISSING_PARAMETER"
        assert data["domain"] == "routing"
        assert data["severity"] == "error"
        assert data["metadata"] == {"route": "'topic'", "parameter": "'id'"}


class TestDomainFaults:
    def test_configuration_is_fatal(self):
        fault = ConfigurationError("bad", key="x")
        assert fault.is_fatal
        assert fault.metadata == {"key": "x"}

    def test_route_faults(self):
        assert UndefinedRouteError("nope").route_name == "nope"
        fault = MissingParameterError("topic", "id")
        assert (fault.route_name, fault.parameter) == ("topic", "id")

    def test_dispatch_faults_carry_token(self):
        token = DispatchToken("GhostController", "indexAction")
        assert InvalidControllerError(token).dispatch_token is token
        assert InvalidActionError(token, "missing").dispatch_token is token
        assert "GhostController" in str(InvalidControllerError(token))

    def test_dispatch_loop(self):
        fault = DispatchLoopError("loop", failure_kind="application-error")
        assert fault.is_fatal
        assert fault.failure_kind == "application-error"
        assert fault.dispatch_token is None

    def test_view_faults(self):
        assert MissingKeyError("title").name == "title"
        assert "inner" in str(NestedCacheBlockError("outer", "inner"))
        assert CacheBlockError("twice").is_fatal

    def test_missing_translation(self):
        fault = MissingTranslationError("main", "greeting")
        assert fault.key == "greeting"
        assert fault.domain == FaultDomain.I18N


class TestFatalFaults:
    @pytest.mark.parametrize(
        "fault",
        [
            ConfigurationError("x"),
            InvalidNameError("controller", "a.b"),
            NestedCacheBlockError("a", "b"),
            CacheBlockError("x"),
            DispatchLoopError("x", failure_kind="invalid-action"),
        ],
    )
    def test_fatal(self, fault):
        assert isinstance(fault, FATAL_FAULTS)

    @pytest.mark.parametrize(
        "fault",
        [
            InvalidControllerError(DispatchToken("AController", "bAction")),
            MissingKeyError("x"),
            MissingTranslationError("main", "x"),
            UndefinedRouteError("x"),
        ],
    )
    def test_recoverable(self, fault):
        assert not isinstance(fault, FATAL_FAULTS)
