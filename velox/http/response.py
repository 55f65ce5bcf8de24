"""
VeloxHttp — Response model.

A string buffer plus an optional status code and headers. The status
line is only emitted when a code was set explicitly.
"""

from __future__ import annotations

import sys
from typing import List, Optional, TextIO, Tuple

from velox.faults import InvalidArgumentError

STATUS_CODES = {
    100: "Continue",
    101: "Switching Protocols",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Request Entity Too Large",
    414: "Request-URI Too Long",
    415: "Unsupported Media Type",
    416: "Requested Range Not Satisfiable",
    417: "Expectation Failed",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
}


class HttpResponse:
    """Buffered response content with an optional status code."""

    def __init__(self, content: str = "", status: Optional[int] = None, protocol: str = "HTTP/1.1"):
        self._content = content
        self._status: Optional[int] = None
        self.protocol = protocol
        self.headers: List[Tuple[str, str]] = []
        if status is not None:
            self.set_response_code(status)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    @property
    def content(self) -> str:
        return self._content

    def set_content(self, content: str) -> None:
        self._content = content

    def append(self, content: str) -> None:
        self._content += content

    def prepend(self, content: str) -> None:
        self._content = content + self._content

    def clear(self) -> None:
        self._content = ""

    # ------------------------------------------------------------------
    # Status & headers
    # ------------------------------------------------------------------

    @property
    def status(self) -> Optional[int]:
        return self._status

    def set_response_code(self, code: int) -> None:
        if code not in STATUS_CODES:
            raise InvalidArgumentError(f"Unsupported HTTP response code {code}", code=code)
        self._status = code

    @property
    def status_line(self) -> Optional[str]:
        if self._status is None:
            return None
        return f"{self.protocol} {self._status} {STATUS_CODES[self._status]}"

    def add_header(self, name: str, value: str) -> None:
        self.headers.append((name, value))

    def get_header(self, name: str) -> Optional[str]:
        for header, value in self.headers:
            if header.lower() == name.lower():
                return value
        return None

    def send(self, stream: Optional[TextIO] = None) -> None:
        """Write status line (if set), headers and content to ``stream``."""
        stream = stream or sys.stdout
        status_line = self.status_line
        if status_line is not None:
            stream.write(status_line + "\r\n")
        for name, value in self.headers:
            stream.write(f"{name}: {value}\r\n")
        if status_line is not None or self.headers:
            stream.write("\r\n")
        stream.write(self._content)
        stream.flush()

    def __repr__(self) -> str:
        return f"<HttpResponse {self._status or '-'} {len(self._content)} chars>"
