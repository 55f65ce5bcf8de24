"""
VeloxHttp — Minimal request/response models for the dispatch pipeline.
"""

from .request import HttpRequest
from .response import STATUS_CODES, HttpResponse

__all__ = ["HttpRequest", "HttpResponse", "STATUS_CODES"]
