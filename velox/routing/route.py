"""
VeloxRouting — Route patterns and matching.

A route path is a ``/``-delimited list of tokens:

- ``:name`` / ``:name[int|+int|page]`` — variable, bound into parameters
- ``@word`` — translatable literal (``routes`` translation namespace);
  both the translated and the raw word are accepted
- anything else — literal, matched exactly

``Route.match()`` is pure and returns the bound parameters (or ``None``);
``Route.matches()`` additionally stores them on the route. Routes held in
a route table or cache are templates: the router always hands out a
clone bound to the request.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from velox.faults import InvalidRouteError

from .constraints import TypeConstraint, parse_constraint, validate_constraint

if TYPE_CHECKING:
    from velox.i18n import TranslatorRegistry

logger = logging.getLogger("velox.routing.route")


class TokenKind(str, Enum):
    LITERAL = "literal"
    VARIABLE = "variable"
    TRANSLATABLE = "translatable"


@dataclass(frozen=True)
class RouteToken:
    """One parsed segment of a route path."""
    kind: TokenKind
    value: str                                    # variable name, word or literal text
    constraint: TypeConstraint = TypeConstraint.NONE
    raw: str = ""


def parse_token(raw: str) -> RouteToken:
    """
    Parse one route path segment.

    Raises:
        InvalidRouteError: empty variable name, unterminated or unknown constraint
    """
    if raw.startswith(":"):
        body = raw[1:]
        constraint = TypeConstraint.NONE
        if "[" in body:
            if not body.endswith("]"):
                raise InvalidRouteError(f'Unterminated type constraint in token "{raw}"', token=raw)
            body, _, spec = body[:-1].partition("[")
            constraint = parse_constraint(spec)
        if not body:
            raise InvalidRouteError(f'Variable token "{raw}" has no name', token=raw)
        return RouteToken(TokenKind.VARIABLE, body, constraint, raw)

    if raw.startswith("@") and len(raw) > 1:
        return RouteToken(TokenKind.TRANSLATABLE, raw[1:], raw=raw)

    return RouteToken(TokenKind.LITERAL, raw, raw=raw)


class Route:
    """
    Named route: path pattern -> controller/action with default parameters.

    Example:
        ```python
        route = Route("topic", "/@view-topic/:id[+int]", "forum", "view-topic")
        route.match("/show/12", translators=registry)   # {"id": "12"}
        ```
    """

    def __init__(
        self,
        name: str,
        path: str,
        controller: str,
        action: str,
        defaults: Optional[Dict[str, Any]] = None,
    ):
        self._name = name
        self._path = path
        self._controller = controller
        self._action = action
        self._defaults: Dict[str, Any] = dict(defaults or {})
        self._parameters: Dict[str, Any] = dict(self._defaults)
        self._tokens: List[str] = self.parse_tokens(path)
        # Parsed eagerly so a bad constraint fails when the route table loads
        self._segments: List[RouteToken] = [parse_token(t) for t in self._tokens]

    # ------------------------------------------------------------------
    # Definition
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> str:
        return self._path

    @property
    def controller(self) -> str:
        return self._controller

    @property
    def action(self) -> str:
        return self._action

    @property
    def defaults(self) -> Dict[str, Any]:
        return dict(self._defaults)

    @property
    def tokens(self) -> List[str]:
        return list(self._tokens)

    @property
    def segments(self) -> List[RouteToken]:
        return list(self._segments)

    @staticmethod
    def parse_tokens(path: str) -> List[str]:
        """Split a path into tokens; the root path has none."""
        path = path.strip("/")
        return path.split("/") if path else []

    def get_tokens(self, use_cache: bool = True) -> List[str]:
        """Path tokens; re-parsed from ``path`` when ``use_cache`` is off."""
        if not use_cache:
            self._tokens = self.parse_tokens(self._path)
            self._segments = [parse_token(t) for t in self._tokens]
        return list(self._tokens)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    @property
    def parameters(self) -> Dict[str, Any]:
        return self._parameters

    def get_param(self, name: str, default: Any = None) -> Any:
        return self._parameters.get(name, default)

    def set_param(self, name: str, value: Any) -> None:
        self._parameters[name] = value

    def set_params(self, parameters: Dict[str, Any]) -> None:
        """Replace all parameters."""
        self._parameters = dict(parameters)

    def reset_params(self) -> None:
        self._parameters = dict(self._defaults)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def match(
        self,
        route_path: str,
        use_translator: bool = True,
        translators: Optional["TranslatorRegistry"] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Match a request path against this route.

        Returns:
            Defaults updated with the bound variables, or ``None`` on mismatch.
        """
        parameters = dict(self._defaults)

        if route_path.strip("/") == self._path.strip("/") and not self._has_variables():
            return parameters

        return self._match_tokens(route_path, parameters, use_translator, translators)

    def _has_variables(self) -> bool:
        return any(segment.kind is TokenKind.VARIABLE for segment in self._segments)

    def _match_tokens(
        self,
        route_path: str,
        parameters: Dict[str, Any],
        use_translator: bool,
        translators: Optional["TranslatorRegistry"],
    ) -> Optional[Dict[str, Any]]:
        request_tokens = self.parse_tokens(route_path)

        if len(request_tokens) > len(self._segments):
            return None

        routes_translator = None
        if use_translator and translators is not None:
            routes_translator = translators.routes

        for index, segment in enumerate(self._segments):
            if index >= len(request_tokens):
                # Missing trailing tokens must all be defaulted variables
                if segment.kind is TokenKind.VARIABLE and segment.value in self._defaults:
                    continue
                return None

            token = request_tokens[index]

            if segment.kind is TokenKind.VARIABLE:
                if not validate_constraint(segment.constraint, token, translators):
                    return None
                parameters[segment.value] = token

            elif segment.kind is TokenKind.TRANSLATABLE:
                if token == segment.value:
                    continue
                if routes_translator is None:
                    return None
                if token != routes_translator.get_if_exists(segment.value):
                    return None

            elif token != segment.value:
                return None

        return parameters

    def matches(
        self,
        route_path: str,
        use_translator: bool = True,
        translators: Optional["TranslatorRegistry"] = None,
    ) -> bool:
        """Match ``route_path``; on success the bound values become ``parameters``."""
        parameters = self.match(route_path, use_translator, translators)
        if parameters is None:
            return False
        self._parameters = parameters
        return True

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def clone(self) -> "Route":
        """Copy with its own parameter and default mappings."""
        route = copy.copy(self)
        route._defaults = dict(self._defaults)
        route._parameters = dict(self._parameters)
        route._tokens = list(self._tokens)
        route._segments = list(self._segments)
        return route

    def signature(self) -> str:
        params = ", ".join(f"{key}={value!r}" for key, value in self._parameters.items())
        return f"{self._name}({params})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self._name,
            "path": self._path,
            "controller": self._controller,
            "action": self._action,
            "defaults": dict(self._defaults),
        }

    def __str__(self) -> str:
        return self.signature()

    def __repr__(self) -> str:
        return (
            f"<Route {self._name} '{self._path}' -> "
            f"{self._controller}/{self._action}>"
        )
