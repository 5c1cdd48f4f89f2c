"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Serves files from a local directory, or a fixed "404 FILE NOT FOUND" page
when there is nothing to serve.

=============================================================================
FLOW
=============================================================================

    Request: GET /css/site.css
        │
        ├──► resolve_path("/css/site.css")   →  "./css/site.css"
        │       "/" is special-cased         →  "./index.html"
        │
        ├──► get_content_and_type(path)
        │       │
        │       ├── not a regular file?  →  ("text/html", NOT_FOUND_PAGE)
        │       │
        │       └── regular file         →  (CONTENT_TYPES[ext], file bytes)
        │
        └──► HTTPResponse
                status_code    = 200    (ALWAYS, even for the 404 page)
                Content-Type   = content type (omitted if unknown)
                Content-Length = len(content)
                body           = content

=============================================================================
SECURITY NOTE: PATH TRAVERSAL
=============================================================================

The request target is appended to the root directory as-is:

    root_dir = "."      url = "/../secret.txt"   →   "./../secret.txt"

so ".." segments can reach files outside the served directory. This is the
default to keep behavior identical to the plain "prepend the root" mapping.
Pass confine_to_root=True (or --confine on the command line) to treat any
path that resolves outside root_dir as not found.

=============================================================================
"""

import logging
import os
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..http.mime_types import get_content_type


logger = logging.getLogger(__name__)


NOT_FOUND_PAGE = """<html>
  <head><title>Not Found</title></head>
  <body>
    <h1>404 FILE NOT FOUND</h1>
  </body>
</html>"""

NOT_FOUND_CONTENT_TYPE = "text/html"


class StaticFileHandler:
    """
    Handler for serving static files.

    Usage:
        static = StaticFileHandler(root_dir="./public")
        dispatcher = Dispatcher({"GET": static.handle, "POST": static.handle})
    """

    def __init__(
        self,
        root_dir: str = ".",
        index_file: str = "index.html",
        confine_to_root: bool = False,
    ):
        """
        Initialize static file handler.

        Args:
            root_dir: Directory the request target is appended to.
                      Relative roots are relative to the process's cwd.

            index_file: File served for the "/" target.

            confine_to_root: Reject paths that resolve outside root_dir.
                             Off by default, see module docstring.
        """
        self.root_dir = root_dir.rstrip("/") or "/"
        self.index_file = index_file
        self.confine_to_root = confine_to_root

    def resolve_path(self, url: Optional[str]) -> str:
        """
        Map a request target to a filesystem path.

        "/" maps to the index file; any other target is appended verbatim
        to the root directory.

        Example (root_dir="."):
            resolve_path("/")            # "./index.html"
            resolve_path("/a/b.css")     # "./a/b.css"
        """
        if url == "/":
            return f"{self.root_dir}/{self.index_file}"
        return f"{self.root_dir}{url or ''}"

    def is_within_root(self, path: str) -> bool:
        """
        Check whether path resolves (symlinks included) inside root_dir.

        A path that cannot be resolved at all (an embedded NUL byte, for
        instance) counts as outside.
        """
        try:
            root = os.path.realpath(self.root_dir)
            target = os.path.realpath(path)
        except (ValueError, OSError):
            return False
        return os.path.commonpath([root, target]) == root

    def get_content_and_type(self, path: str) -> tuple[Optional[str], bytes]:
        """
        Load a file and work out its content type.

        Args:
            path: Filesystem path from resolve_path().

        Returns:
            (content_type, content). content_type is None for extensions
            not in the content type table. Missing paths and anything that
            isn't a regular file give the 404 page as text/html.

        Raises:
            OSError: For read failures other than "not found" (for example
                     PermissionError). These are not part of the normal
                     404 flow and are left to the caller.
        """
        if self.confine_to_root and not self.is_within_root(path):
            logger.warning(f"Path outside root rejected: {path}")
            return NOT_FOUND_CONTENT_TYPE, NOT_FOUND_PAGE.encode("utf-8")

        if not os.path.isfile(path):
            logger.debug(f"Not found: {path}")
            return NOT_FOUND_CONTENT_TYPE, NOT_FOUND_PAGE.encode("utf-8")

        content_type = get_content_type(path)

        # Whole file in memory; no streaming
        with open(path, "rb") as f:
            content = f.read()

        return content_type, content

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Serve the file named by the request target.

        The status is 200 whether or not the file was found; a missing file
        is reported only through the 404 page in the body.
        """
        path = self.resolve_path(request.url)
        content_type, content = self.get_content_and_type(path)

        response = HTTPResponse()
        response.set_header("Content-Type", content_type)
        response.set_header("Content-Length", len(content))
        response.status_code = 200
        response.body = content
        return response


def serve_static(root_dir: str = ".", **kwargs) -> StaticFileHandler:
    """
    Factory for a static file handler.

    Example:
        dispatcher = create_dispatcher(serve_static("./public").handle)
    """
    return StaticFileHandler(root_dir, **kwargs)
