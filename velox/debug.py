"""
Debug helpers - structured dumps for debug-mode error pages.

Never used in production output; production pages carry no internals.
"""

from __future__ import annotations

import pprint
import traceback
from typing import Any, Dict, Optional

from velox.faults import Fault


def dump(value: Any, width: int = 100) -> str:
    """Readable multi-line representation of ``value``."""
    return pprint.pformat(value, width=width, sort_dicts=False)


def format_exception(exc: BaseException) -> str:
    """Traceback of ``exc`` including chained causes."""
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def describe_exception(exc: Optional[BaseException]) -> Dict[str, Any]:
    """Diagnostic mapping for an exception, structured for faults."""
    if exc is None:
        return {}
    if isinstance(exc, Fault):
        info = exc.to_dict()
    else:
        info = {"type": type(exc).__name__, "message": str(exc)}
    if exc.__cause__ is not None:
        info["cause"] = describe_exception(exc.__cause__)
    return info


def debug_context(
    exc: Optional[BaseException] = None,
    request: Any = None,
    dispatch_token: Any = None,
) -> Dict[str, str]:
    """Pre-formatted dumps for an error template."""
    context = {
        "exception": dump(describe_exception(exc)) if exc is not None else "",
        "traceback": format_exception(exc) if exc is not None else "",
        "request": "",
        "dispatch_token": dump(dispatch_token) if dispatch_token is not None else "",
    }
    if request is not None:
        context["request"] = dump({
            "route_path": request.route_path,
            "params": request.params,
            "query": request.query,
            "post": request.post,
        })
    return context
