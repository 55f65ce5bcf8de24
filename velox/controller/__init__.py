"""
VeloxController — Controllers, the front controller loop and error pages.
"""

from .base import Controller, normalize_block_context
from .error import ErrorController
from .front import FrontController

__all__ = ["Controller", "ErrorController", "FrontController", "normalize_block_context"]
