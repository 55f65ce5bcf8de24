"""
VeloxDispatch — Route to controller/action resolution.
"""

from .token import DispatchToken, camel_case_to_dashes
from .dispatcher import Dispatcher, dashes_to_camel_case
from .recovery import (
    FailureKind,
    RecoveryPlan,
    classify_failure,
    is_dispatch_loop,
    plan_recovery,
)

__all__ = [
    "DispatchToken",
    "Dispatcher",
    "camel_case_to_dashes",
    "dashes_to_camel_case",
    "FailureKind",
    "RecoveryPlan",
    "classify_failure",
    "is_dispatch_loop",
    "plan_recovery",
]
