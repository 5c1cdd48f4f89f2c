"""
=============================================================================
CONTENT TYPE TABLE
=============================================================================

Maps file extensions to MIME types for static file responses.

=============================================================================
WHY A FIXED TABLE?
=============================================================================

Browsers decide how to treat a response from its Content-Type header:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                   EXTENSION → CONTENT TYPE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   index.html   ──►  text/html                (render as a page)     │
    │   style.css    ──►  text/css                 (apply as styles)      │
    │   app.js       ──►  application/javascript   (execute)              │
    │   data.json    ──►  application/json         (parse)                │
    │   logo.gif     ──►  image/gif                (decode as image)      │
    │                                                                      │
    │   anything else ──► None (no Content-Type header is sent)           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The server only knows the five types above. There is no sniffing of file
contents and no guessed default: an unknown extension yields None so the
caller can tell "unknown" apart from "text/html".

=============================================================================
"""

from typing import Optional


CONTENT_TYPES = {
    "html": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "gif": "image/gif",
}


def get_extension(path: str) -> Optional[str]:
    """
    Get the substring after the last "." in a path.

    The whole path is searched, not just the final component, so
    "./notes" yields "/notes" (the "." of the "./" prefix).

    Returns:
        The extension, or None if the path contains no ".".
    """
    head, dot, extension = path.rpartition(".")
    if not dot:
        return None
    return extension


def get_content_type(path: str) -> Optional[str]:
    """
    Look up the content type for a file path.

    Args:
        path: Filesystem path (only the extension matters).

    Returns:
        MIME type from CONTENT_TYPES, or None for unknown/missing extensions.

    Example:
        get_content_type("./style.css")   # "text/css"
        get_content_type("./archive.zip") # None
    """
    extension = get_extension(path)
    if extension is None:
        return None
    return CONTENT_TYPES.get(extension)
