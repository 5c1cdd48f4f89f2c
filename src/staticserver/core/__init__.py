"""
Low-level networking components.

    core/
    ├── socket_server.py   # Listening socket + single-threaded event loop
    └── connection.py      # One accepted client socket
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
]
