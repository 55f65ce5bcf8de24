"""
VeloxView — Views, layouts and fragment caching on Jinja2.
"""

from .base import CacheBlock, View
from .engine import TemplateEngine

__all__ = ["CacheBlock", "View", "TemplateEngine"]
