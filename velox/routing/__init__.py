"""
VeloxRouting — Route patterns, matching and URL building.
"""

from .constraints import TypeConstraint, parse_constraint, validate_constraint
from .route import Route, RouteToken, TokenKind, parse_token
from .router import (
    APPLICATION_ERROR,
    INVALID_ACTION,
    INVALID_CONTROLLER,
    PAGE_NOT_FOUND,
    Router,
    load_route_definitions,
    normalize_definitions,
)

__all__ = [
    "TypeConstraint",
    "parse_constraint",
    "validate_constraint",
    "Route",
    "RouteToken",
    "TokenKind",
    "parse_token",
    "Router",
    "load_route_definitions",
    "normalize_definitions",
    "PAGE_NOT_FOUND",
    "INVALID_CONTROLLER",
    "INVALID_ACTION",
    "APPLICATION_ERROR",
]
