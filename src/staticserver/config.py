"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the static file server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m staticserver --port 8000                         │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── STATIC_PORT=8000 python -m staticserver                    │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │      └── 0.0.0.0:4000, serving the current directory                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

With no arguments and no environment, the server listens on port 4000 and
serves files relative to the current working directory.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

TRUTHY = ("1", "true", "yes", "on")


@dataclass
class ServerConfig:
    """
    Configuration for the static file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, poll_interval

    STATIC FILES
    - root_dir, index_file, confine_to_root

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Address to bind. "0.0.0.0" listens on every interface."""

    port: int = 4000
    """Port to listen on. 0 lets the OS pick a free port (handy in tests)."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 65536
    """
    Bytes read per data event.
    Each read is treated as one whole request, so this is also the
    largest request the server can see in one piece.
    """

    poll_interval: float = 1.0
    """Seconds the event loop waits before re-checking for shutdown."""

    # ─────────────────────────────────────────────────────────────────────
    # STATIC FILES
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """Directory request targets are resolved against."""

    index_file: str = "index.html"
    """File served for the "/" target."""

    confine_to_root: bool = False
    """Reject targets that resolve outside root_dir (e.g. "/../x")."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @property
    def log_level_number(self) -> int:
        """The log level as a `logging` module constant."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        STATIC_HOST         Bind address        (default: 0.0.0.0)
        STATIC_PORT         Port                (default: 4000)
        STATIC_ROOT         Served directory    (default: .)
        STATIC_INDEX        Index file for "/"  (default: index.html)
        STATIC_BUFFER_SIZE  Bytes per read      (default: 65536)
        STATIC_CONFINE      1/true/yes enables the root confinement check
        STATIC_LOG_LEVEL    Logging level       (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("STATIC_HOST", "0.0.0.0"),
            port=int(os.getenv("STATIC_PORT", "4000")),
            root_dir=os.getenv("STATIC_ROOT", "."),
            index_file=os.getenv("STATIC_INDEX", "index.html"),
            buffer_size=int(os.getenv("STATIC_BUFFER_SIZE", "65536")),
            confine_to_root=os.getenv("STATIC_CONFINE", "").lower() in TRUTHY,
            log_level=os.getenv("STATIC_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at startup so a bad value fails before the socket is bound.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if not os.path.isdir(self.root_dir):
            raise ValueError(f"Root directory does not exist: {self.root_dir}")
