"""
=============================================================================
REQUEST DISPATCHER
=============================================================================

Picks the handler for a request, purely from its method.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       DISPATCH TABLE                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET      ──►  StaticFileHandler.handle   (200 + file or 404 page) │
    │   POST     ──►  StaticFileHandler.handle   (same as GET)            │
    │   anything ──►  default_handler            (bare 404, no body)      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no URL routing: the path only matters to the file handler. The
handler table is built once and handed to the server, so nothing here
depends on module-level state.

=============================================================================
"""

from typing import Callable, Dict, Optional
import logging

from .request import HTTPRequest
from .response import HTTPResponse, empty_response


logger = logging.getLogger(__name__)


Handler = Callable[[HTTPRequest], HTTPResponse]


def default_handler(request: HTTPRequest) -> HTTPResponse:
    """Handler for unsupported methods. Never touches the filesystem."""
    return empty_response()


class Dispatcher:
    """
    Method → handler lookup.

    Usage:
        dispatcher = Dispatcher({"GET": static.handle, "POST": static.handle})
        response = dispatcher.dispatch(request)
    """

    def __init__(
        self,
        handlers: Optional[Dict[str, Handler]] = None,
        default: Handler = default_handler,
    ):
        """
        Args:
            handlers: Method name → handler. Method names match exactly.
            default: Handler for methods not in the table.
        """
        self._handlers: Dict[str, Handler] = dict(handlers or {})
        self._default = default

    @property
    def methods(self) -> list[str]:
        """Methods with a registered handler."""
        return list(self._handlers)

    def register(self, method: str, handler: Handler) -> "Dispatcher":
        """Add or replace the handler for a method. Returns self."""
        self._handlers[method] = handler
        return self

    def find_handler(self, request: HTTPRequest) -> Handler:
        """Get the handler for the request's method, or the default."""
        return self._handlers.get(request.method, self._default)

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """Run the matching handler and return its response."""
        handler = self.find_handler(request)
        if handler is self._default:
            logger.debug(f"No handler for method {request.method!r}, using default")
        return handler(request)


def create_dispatcher(file_handler: Handler) -> Dispatcher:
    """Dispatcher that sends GET and POST to the file handler."""
    return Dispatcher({
        "GET": file_handler,
        "POST": file_handler,
    })
