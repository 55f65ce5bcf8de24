"""
Error Controller - default pages for the dispatch loop's error routes.

    page-not-found      404
    invalid-controller  404 in debug, forwards to application-error otherwise
    invalid-action      404 in debug, forwards to application-error otherwise
    application-error   500

In debug mode the pages carry structured dumps of the exception, the
request and the failed dispatch token, and the layout is disabled.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from velox.debug import debug_context

from .base import Controller

logger = logging.getLogger("velox.controller.error")


class ErrorController(Controller):
    """Framework error pages; applications may register their own."""

    def setup(self):
        self.cache.clear_local()
        if self.debug:
            self.disable_layout()

    def _expose(self, parameters: Mapping[str, Any]) -> None:
        request = parameters.get("request")
        self.view.set("request_path", request.route_path if request is not None else "")
        self.view.set("debug", self.debug)
        if self.debug:
            self.view.update(debug_context(
                parameters.get("exception"),
                request,
                parameters.get("dispatch-token"),
            ))

    def pageNotFoundAction(self, parameters):  # noqa: N802
        self.response.set_response_code(404)
        self._expose(parameters)

    def invalidControllerAction(self, parameters):  # noqa: N802
        if not self.debug:
            self.forward(self.config.error_controller, "application-error", parameters)
            return
        self.response.set_response_code(404)
        self._expose(parameters)

    def invalidActionAction(self, parameters):  # noqa: N802
        if not self.debug:
            self.forward(self.config.error_controller, "application-error", parameters)
            return
        self.response.set_response_code(404)
        self._expose(parameters)

    def applicationErrorAction(self, parameters):  # noqa: N802
        exception = parameters.get("exception")
        if exception is not None:
            logger.error(f"Application error: {exception!r}", exc_info=exception)
        self.response.set_response_code(500)
        self._expose(parameters)
