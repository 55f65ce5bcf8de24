"""
VeloxDispatch — Dispatch tokens.

A ``DispatchToken`` names a concrete controller class, action method and
the parameters to dispatch with. Tokens are immutable; two tokens are
"the same" when they target the same class and method, whatever their
parameters. That identity is what the dispatch loop uses to detect a
recovery cycle.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Any, Mapping, Optional

CONTROLLER_SUFFIX = "Controller"
ACTION_SUFFIX = "Action"

_CAMEL_BOUNDARY = re.compile(r"(?<!^)([A-Z])")


def camel_case_to_dashes(name: str) -> str:
    """``saveUser`` -> ``save-user``, ``UserManager`` -> ``user-manager``."""
    if not name:
        return name
    name = name[0].lower() + name[1:]
    return _CAMEL_BOUNDARY.sub(r"-\1", name).lower()


def _strip_suffix(name: str, suffix: str) -> str:
    if name.endswith(suffix) and len(name) > len(suffix):
        return name[: -len(suffix)]
    return name


class DispatchToken:
    """
    Resolved controller/action/parameters triple.

    Args:
        controller_class_name: e.g. ``UserManagerController``
        action_method_name: e.g. ``saveUserAction``
        parameters: Parameters copied from the route
        controller_location: Import location, ``package.module:ClassName``
    """

    def __init__(
        self,
        controller_class_name: str,
        action_method_name: str,
        parameters: Optional[Mapping[str, Any]] = None,
        controller_location: Optional[str] = None,
    ):
        self._controller_class_name = controller_class_name
        self._action_method_name = action_method_name
        self._parameters = dict(parameters or {})
        self._controller_location = controller_location

    @property
    def controller_class_name(self) -> str:
        return self._controller_class_name

    @property
    def action_method_name(self) -> str:
        return self._action_method_name

    @property
    def controller_location(self) -> Optional[str]:
        return self._controller_location

    @property
    def parameters(self) -> Mapping[str, Any]:
        return MappingProxyType(self._parameters)

    @property
    def controller_name(self) -> str:
        """Route-format controller name, ``UserManagerController`` -> ``user-manager``."""
        return camel_case_to_dashes(_strip_suffix(self._controller_class_name, CONTROLLER_SUFFIX))

    @property
    def action_name(self) -> str:
        """Route-format action name, ``saveUserAction`` -> ``save-user``."""
        return camel_case_to_dashes(_strip_suffix(self._action_method_name, ACTION_SUFFIX))

    def get_controller_name(self) -> str:
        return self.controller_name

    def get_action_name(self) -> str:
        return self.action_name

    def get_param(self, name: str, default: Any = None) -> Any:
        return self._parameters.get(name, default)

    def with_parameters(self, parameters: Mapping[str, Any]) -> "DispatchToken":
        return DispatchToken(
            self._controller_class_name,
            self._action_method_name,
            parameters,
            self._controller_location,
        )

    def is_same_as(self, other: Optional["DispatchToken"]) -> bool:
        """Same controller class and action method; parameters are ignored."""
        if other is None:
            return False
        return (
            self._controller_class_name == other._controller_class_name
            and self._action_method_name == other._action_method_name
        )

    def __repr__(self) -> str:
        return f"<DispatchToken {self._controller_class_name}.{self._action_method_name}>"
