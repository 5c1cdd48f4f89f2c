"""
=============================================================================
STATICSERVER - Minimal HTTP/1.1 Static File Server on Raw Sockets
=============================================================================

A single-process, single-threaded TCP server that parses raw HTTP request
text and serves files from a local directory.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    staticserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m staticserver)
    ├── server.py            # HTTPServer: parse → dispatch → respond
    ├── config.py            # ServerConfig dataclass
    ├── core/                # Low-level components
    │   ├── socket_server.py # Listening socket + event loop
    │   └── connection.py    # Client connection wrapper
    ├── http/                # HTTP protocol components
    │   ├── request.py       # Request text parsing
    │   ├── response.py      # Response model + serialization
    │   ├── dispatcher.py    # Method → handler table
    │   └── mime_types.py    # Extension → content type table
    └── handlers/
        └── static.py        # Static file resolver

=============================================================================
QUICK START
=============================================================================

    from staticserver import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=4000, root_dir="./public"))
    server.run()

or from a shell:

    python -m staticserver --root ./public

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
