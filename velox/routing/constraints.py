"""
VeloxRouting — Type constraints for route variables.

A variable token may carry a bracketed constraint: ``:id[int]``,
``:id[+int]`` or ``:page[page]``. Validation is a pure function of the
constraint kind, the request token and (for ``page`` only) the main
translator's "show all" label.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, TYPE_CHECKING

from velox.faults import InvalidRouteError

if TYPE_CHECKING:
    from velox.i18n import TranslatorRegistry

# Translation key of the pager's "show all" label, accepted by [page]
PAGER_ALL_LABEL_KEY = "pager.label.all"


class TypeConstraint(str, Enum):
    """Closed set of route variable constraints."""
    NONE = ""
    INT = "int"
    POSITIVE_INT = "+int"
    PAGE = "page"


def parse_constraint(spec: Optional[str]) -> TypeConstraint:
    """
    Parse the text between the brackets of a variable token.

    Raises:
        InvalidRouteError: for an unknown constraint name
    """
    if not spec:
        return TypeConstraint.NONE
    try:
        return TypeConstraint(spec)
    except ValueError:
        raise InvalidRouteError(f'Unknown route type constraint "[{spec}]"', constraint=spec) from None


def _as_int(token: str) -> Optional[int]:
    """Integer value of ``token`` if it is exactly its own base-10 rendering."""
    try:
        value = int(token)
    except ValueError:
        return None
    # "05", "+5", " 5", "1_0" all parse but are not canonical integers
    if str(value) != token:
        return None
    return value


def is_int(token: str) -> bool:
    return _as_int(token) is not None


def is_positive_int(token: str) -> bool:
    value = _as_int(token)
    return value is not None and value >= 1


def validate_constraint(
    constraint: TypeConstraint,
    token: str,
    translators: Optional["TranslatorRegistry"] = None,
) -> bool:
    """Whether ``token`` satisfies ``constraint``."""
    if constraint is TypeConstraint.NONE:
        return True
    if constraint is TypeConstraint.INT:
        return is_int(token)
    if constraint is TypeConstraint.POSITIVE_INT:
        return is_positive_int(token)
    if constraint is TypeConstraint.PAGE:
        if is_positive_int(token):
            return True
        if translators is None:
            return False
        return token == translators.main.get_if_exists(PAGER_ALL_LABEL_KEY)
    return False
