"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw text of one HTTP request into a structured HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /style.css HTTP/1.1\r\n        ◄── request line               │
    │   ─┬─ ─────┬──── ───┬────                                            │
    │  Method   URL    Version                                             │
    │                                                                      │
    │   Host: localhost:4000\r\n           ◄── header lines               │
    │   Accept: text/css\r\n                   "<key>: <value>"           │
    │   \r\n                               ◄── blank line                 │
    │   name=value                         ◄── body (everything after)    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING STRATEGY
=============================================================================

The parser is a single left-to-right fold over the lines:

    lines[0]        → request line, split on " "
    lines[1:]       → folded into (headers, body)

        ┌──────────────┐   blank line    ┌──────────────┐
        │ HEADER MODE  │ ──────────────► │  BODY MODE   │
        │ key: value   │                 │ body += line │
        └──────────────┘                 └──────────────┘

Parsing is deliberately lenient. It never raises: a malformed request still
produces an HTTPRequest, possibly with None fields, and the dispatcher
decides what to do with it.

A few consequences worth knowing:

- Header names keep their original case. "Host" and "host" are different
  keys, and a repeated header keeps its last value.
- A header line without ": " is stored with a value of None.
- Body lines are concatenated WITHOUT their CRLF separators.
- `body is None` means no blank line was seen at all, which is different
  from `body == ""` (blank line seen, nothing after it).

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union
import logging


logger = logging.getLogger(__name__)


CRLF = "\r\n"
HEADER_SEPARATOR = ": "


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Created once per data event and discarded after the response is sent.

    Attributes:
        method:  Request method token (GET, POST, ...), None if missing.
        url:     Request target, used verbatim for file lookup.
        version: Protocol token (HTTP/1.1). Parsed but not used.
        headers: Header name → value, names exactly as received.
        body:    Body text, or None when no blank line was present.
        raw:     The original request text, for logging.
    """

    method: Optional[str]
    url: Optional[str]
    version: Optional[str] = None
    headers: Dict[str, Optional[str]] = field(default_factory=dict)
    body: Optional[str] = None
    raw: str = field(default="", repr=False)

    @property
    def has_body(self) -> bool:
        """True if the request contained a blank header/body separator."""
        return self.body is not None

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a header value by exact (case-sensitive) name.

        Example:
            request.get_header("Host")  # "localhost:4000"
            request.get_header("host")  # None unless sent lowercase
        """
        return self.headers.get(name, default)


class RequestParser:
    """
    Parser for raw HTTP request text.

    Usage:
        parser = RequestParser()
        request = parser.parse("GET / HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n")
        request.method   # "GET"
        request.url      # "/"
        request.headers  # {"Host": "x"}
        request.body     # ""
    """

    def __init__(self, encoding: str = "utf-8"):
        """
        Args:
            encoding: Used to decode bytes input. Undecodable bytes are
                      replaced rather than rejected.
        """
        self.encoding = encoding

    def parse(self, data: Union[str, bytes]) -> HTTPRequest:
        """
        Parse one complete request.

        The caller is responsible for handing over the whole request in one
        piece; nothing is buffered between calls.

        Args:
            data: Request text (or bytes, decoded with self.encoding).

        Returns:
            The parsed HTTPRequest. Never raises on malformed input.
        """
        if isinstance(data, bytes):
            data = data.decode(self.encoding, errors="replace")

        # ─────────────────────────────────────────────────────────────────
        # STEP 1: Request line vs. everything else
        # ─────────────────────────────────────────────────────────────────
        request_line, *lines = data.split(CRLF)

        # ─────────────────────────────────────────────────────────────────
        # STEP 2: "METHOD URL VERSION", missing tokens become None
        # ─────────────────────────────────────────────────────────────────
        method, url, version = self._parse_request_line(request_line)

        # ─────────────────────────────────────────────────────────────────
        # STEP 3: Fold the remaining lines into headers and body
        # ─────────────────────────────────────────────────────────────────
        headers, body = self._collect_headers_and_body(lines)

        request = HTTPRequest(
            method=method,
            url=url,
            version=version,
            headers=headers,
            body=body,
            raw=data,
        )
        logger.debug(f"Parsed request: {request}")
        return request

    def _parse_request_line(
        self,
        line: str
    ) -> tuple[Optional[str], Optional[str], Optional[str]]:
        """Split the request line on single spaces into three tokens."""
        tokens = line.split(" ")
        tokens += [None] * (3 - len(tokens))
        method, url, version = tokens[:3]
        return method, url, version

    def _collect_headers_and_body(
        self,
        lines: list[str]
    ) -> tuple[Dict[str, Optional[str]], Optional[str]]:
        """
        Fold header/body lines.

        The first blank line switches to body mode; every line after it,
        blank or not, is appended to the body.
        """
        headers: Dict[str, Optional[str]] = {}
        body: Optional[str] = None

        for line in lines:
            if body is not None:
                body += line
                continue

            if line == "":
                body = ""
                continue

            # Only the first two pieces count: "a: b: c" → ("a", "b")
            pieces = line.split(HEADER_SEPARATOR)
            key = pieces[0]
            value = pieces[1] if len(pieces) > 1 else None
            headers[key] = value

        return headers, body


def parse_request(data: Union[str, bytes]) -> HTTPRequest:
    """
    Convenience function to parse one request with default settings.

    Args:
        data: Raw request text or bytes.

    Returns:
        Parsed HTTPRequest.
    """
    return RequestParser().parse(data)
