"""
HTTP protocol components: request parsing, response building, dispatch.
"""

from .request import HTTPRequest, RequestParser, parse_request
from .response import HTTPResponse, Header, empty_response, server_error
from .dispatcher import Dispatcher, Handler, default_handler, create_dispatcher
from .mime_types import CONTENT_TYPES, get_content_type

__all__ = [
    "HTTPRequest",
    "RequestParser",
    "parse_request",
    "HTTPResponse",
    "Header",
    "empty_response",
    "server_error",
    "Dispatcher",
    "Handler",
    "default_handler",
    "create_dispatcher",
    "CONTENT_TYPES",
    "get_content_type",
]
