"""
VeloxHttp — Request model.

The dispatch pipeline only needs the route path (the URL path, trimmed
of ``/`` and percent-decoded) and the combined parameter mapping. Query,
post and file maps are carried through to controllers untouched.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl, unquote, urlsplit


class HttpRequest:
    """
    Incoming request reduced to route path and parameter maps.

    Example:
        ```python
        request = HttpRequest.from_url("/forum/topic/12?sort=desc")
        request.route_path          # "forum/topic/12"
        request.get_param("sort")   # "desc"
        ```
    """

    def __init__(
        self,
        route_path: str = "",
        query: Optional[Mapping[str, Any]] = None,
        post: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ):
        self._route_path = self.normalize_route_path(route_path)
        self._query: Dict[str, Any] = dict(query or {})
        self._post: Dict[str, Any] = dict(post or {})
        self._files: Dict[str, Any] = dict(files or {})

        if params is None:
            params = {**self._query, **self._post}
        self._params: Dict[str, Any] = dict(params)
        self._route_params: Optional[Dict[str, Any]] = None

    @classmethod
    def from_url(
        cls,
        url: str,
        post: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, Any]] = None,
    ) -> "HttpRequest":
        """Build a request from a URL; the query string fills ``query``."""
        parts = urlsplit(url)
        query = dict(parse_qsl(parts.query, keep_blank_values=True))
        return cls(parts.path, query=query, post=post, files=files)

    @staticmethod
    def normalize_route_path(path: str) -> str:
        return unquote(path.strip("/"))

    # ------------------------------------------------------------------
    # Route path
    # ------------------------------------------------------------------

    @property
    def route_path(self) -> str:
        return self._route_path

    def set_route_path(self, path: str) -> None:
        self._route_path = self.normalize_route_path(path)
        self._route_params = None

    @property
    def route_params(self) -> Dict[str, Any]:
        """
        Path read as ``name/value`` pairs, parsed on first access.

        A trailing name without a value maps to ``True``.
        """
        if self._route_params is None:
            tokens = [t for t in self._route_path.split("/") if t]
            params: Dict[str, Any] = {}
            for index in range(0, len(tokens), 2):
                name = tokens[index]
                params[name] = tokens[index + 1] if index + 1 < len(tokens) else True
            self._route_params = params
        return self._route_params

    def get_route_param(self, name: str, default: Any = None) -> Any:
        return self.route_params.get(name, default)

    # ------------------------------------------------------------------
    # Parameter maps
    # ------------------------------------------------------------------

    @property
    def params(self) -> Dict[str, Any]:
        return self._params

    @property
    def query(self) -> Dict[str, Any]:
        return self._query

    @property
    def post(self) -> Dict[str, Any]:
        return self._post

    @property
    def files(self) -> Dict[str, Any]:
        return self._files

    def get_param(self, name: str, default: Any = None) -> Any:
        return self._params.get(name, default)

    def set_param(self, name: str, value: Any) -> None:
        self._params[name] = value

    def has_param(self, name: str) -> bool:
        return name in self._params

    def get_query_param(self, name: str, default: Any = None) -> Any:
        return self._query.get(name, default)

    def set_query_param(self, name: str, value: Any) -> None:
        self._query[name] = value

    def get_post_param(self, name: str, default: Any = None) -> Any:
        return self._post.get(name, default)

    def set_post_param(self, name: str, value: Any) -> None:
        self._post[name] = value

    def get_file(self, name: str, default: Any = None) -> Any:
        return self._files.get(name, default)

    def is_get(self) -> bool:
        return bool(self._query)

    def is_post(self) -> bool:
        return bool(self._post)

    def __repr__(self) -> str:
        return f"<HttpRequest /{self._route_path}>"
