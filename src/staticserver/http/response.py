"""
=============================================================================
HTTP RESPONSE MODEL
=============================================================================

Accumulates a status code, an ordered list of headers and an optional body,
then serializes them onto the wire.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTP/1.1 200\r\n                   ◄── status line (no phrase)    │
    │   Content-Length: 15\r\n             ◄── headers, insertion order   │
    │   Content-Type: text/css             ◄── NO CRLF after the last one │
    │   \r\n\r\n                           ◄── separator                  │
    │   body{color:red}                    ◄── body bytes, if any         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The header block is the header lines joined by CRLF. The separator that
follows is always a full CRLF CRLF, so the wire text ends up with exactly
one blank line between headers and body.

=============================================================================
WHY A LIST OF HEADERS INSTEAD OF A DICT?
=============================================================================

Every response starts with two default headers in a fixed order:

    [Content-Length: 0, Content-Type: text/html]

Handlers overwrite these in place with set_header(), so the wire order stays
stable no matter what order the handler sets them in. Lookups are a linear
scan, which is fine for the handful of headers a static response carries.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union


HTTP_VERSION = "HTTP/1.1"
CRLF = "\r\n"

DEFAULT_STATUS_CODE = 404


@dataclass
class Header:
    """A single response header."""

    key: str
    value: Any

    def to_line(self) -> str:
        return f"{self.key}: {self.value}"


def default_headers() -> List[Header]:
    """Headers every new response starts with."""
    return [
        Header("Content-Length", 0),
        Header("Content-Type", "text/html"),
    ]


@dataclass
class HTTPResponse:
    """
    An HTTP response to be written back to the client.

    =========================================================================
    DEFAULTS
    =========================================================================

        HTTPResponse()
            status_code = 404
            headers     = [Content-Length: 0, Content-Type: text/html]
            body        = None

    A bare HTTPResponse() is therefore a complete, valid "404 with no body"
    response. Handlers that serve content overwrite the status, the two
    default headers and the body.

    =========================================================================
    USAGE
    =========================================================================

        response = HTTPResponse()
        response.set_header("Content-Type", "text/css")
        response.set_header("Content-Length", 15)
        response.status_code = 200
        response.body = b"body{color:red}"

        response.write_to(conn)

    =========================================================================
    """

    status_code: int = DEFAULT_STATUS_CODE
    headers: List[Header] = field(default_factory=default_headers)
    body: Optional[Union[bytes, str]] = None

    @property
    def status_line(self) -> str:
        """
        Get the status line, e.g. "HTTP/1.1 200".

        No reason phrase is sent.
        """
        return f"{HTTP_VERSION} {self.status_code}"

    def find_header(self, key: str) -> Optional[Header]:
        """Return the first header whose key matches exactly, or None."""
        for header in self.headers:
            if header.key == key:
                return header
        return None

    def get_header(self, key: str, default: Any = None) -> Any:
        """Get the value of the first header named `key`."""
        header = self.find_header(key)
        if header is None:
            return default
        return header.value

    def set_header(self, key: str, value: Any) -> "HTTPResponse":
        """
        Set a header, updating the first existing entry in place.

        Keys are matched case-sensitively. A new key is appended at the end,
        an existing key keeps its position.

        Returns:
            Self for method chaining.
        """
        header = self.find_header(key)
        if header is not None:
            header.value = value
        else:
            self.headers.append(Header(key, value))
        return self

    def body_bytes(self) -> bytes:
        """Get the body as bytes (str bodies are UTF-8 encoded)."""
        if self.body is None:
            return b""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    def generate_headers_text(self) -> str:
        """
        Render the header block.

        Lines are joined by CRLF with nothing before the first or after the
        last. Headers whose value is None are left out entirely; this is how
        an unknown content type reaches the wire (as no header at all).
        """
        lines = [header.to_line() for header in self.headers if header.value is not None]
        return CRLF.join(lines)

    def to_bytes(self) -> bytes:
        """
        Serialize the response as one byte string.

        Format:
            status line CRLF, header block, CRLF CRLF, body
        """
        head = self.status_line + CRLF + self.generate_headers_text() + CRLF + CRLF
        return head.encode("utf-8") + self.body_bytes()

    def write_to(self, writable) -> None:
        """
        Write the response piece by piece to anything with a write() method.

        The pieces are the status line, the header block, the separator and
        the body (only if there is one). Each piece is written as bytes.
        """
        writable.write(f"{self.status_line}{CRLF}".encode("utf-8"))
        writable.write(self.generate_headers_text().encode("utf-8"))
        writable.write(f"{CRLF}{CRLF}".encode("utf-8"))
        if self.body:
            writable.write(self.body_bytes())


def empty_response() -> HTTPResponse:
    """A bare response: 404, default headers, no body."""
    return HTTPResponse()


def server_error() -> HTTPResponse:
    """A bare 500 response with the default headers and no body."""
    return HTTPResponse(status_code=500)
