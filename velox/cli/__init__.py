"""
Velox CLI - route table inspection, URL building and request dispatch.

Usage:
    velox routes
    velox match /forum/topic/12
    velox url topic -p id=12
    velox request /forum --app myapp.wsgi:app
    velox cache check
"""

from velox import __version__

__cli_name__ = "velox"

__all__ = ["__version__", "__cli_name__"]
