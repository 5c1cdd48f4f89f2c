"""
=============================================================================
STATIC FILE SERVER
=============================================================================

Ties the socket loop, the request parser and the dispatcher together.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ONE DATA EVENT, END TO END                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer                                                       │
    │       │  on_data(conn, chunk)                                        │
    │       ▼                                                              │
    │   HTTPServer.handle_data                                             │
    │       │                                                              │
    │       ├──► RequestParser.parse(chunk)       → HTTPRequest            │
    │       ├──► Dispatcher.dispatch(request)     → HTTPResponse           │
    │       │        GET/POST → StaticFileHandler.handle                   │
    │       │        other    → default_handler (bare 404)                 │
    │       └──► response.write_to(conn)                                   │
    │                sent now, or queued until the socket is writable      │
    │                                                                      │
    │   The connection stays open afterwards.                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ERROR HANDLING
=============================================================================

    malformed request     → parsed best-effort, never an error
    missing file          → 200 with the 404 page (normal flow)
    unsupported method    → bare 404 (normal flow)
    handler exception     → logged with traceback, bare 500 sent,
    (e.g. PermissionError)  connection kept open
    send failure          → logged, connection closed (here or when
                            the loop flushes queued output)

=============================================================================
"""

import logging
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, Connection
from .handlers import StaticFileHandler
from .http import (
    HTTPRequest, HTTPResponse, RequestParser,
    Dispatcher, create_dispatcher, server_error,
)


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Static file HTTP server.

    =========================================================================
    USAGE
    =========================================================================

        # Serve the current directory on port 4000
        HTTPServer().run()

        # Serve ./public on port 8000
        HTTPServer(ServerConfig(port=8000, root_dir="./public")).run()

        # Custom handler table
        static = StaticFileHandler("./public")
        dispatcher = Dispatcher({"GET": static.handle})
        HTTPServer(config, dispatcher=dispatcher).run()

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        dispatcher: Optional[Dispatcher] = None,
    ):
        """
        Initialize the server.

        Args:
            config: Server configuration. Defaults to ServerConfig().
            dispatcher: Handler table. Defaults to GET and POST served by
                        a StaticFileHandler built from the config.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()

        if dispatcher is None:
            static = StaticFileHandler(
                root_dir=self.config.root_dir,
                index_file=self.config.index_file,
                confine_to_root=self.config.confine_to_root,
            )
            dispatcher = create_dispatcher(static.handle)
        self._dispatcher = dispatcher

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def address(self) -> tuple:
        """Bound (host, port); the real port once listening on port 0."""
        return self._socket_server.address

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()

        logger.info(f"Serving {self.config.root_dir!r} on {self.config.host}:{self.config.port}")

        try:
            self._socket_server.start(self._handle_connect, self.handle_data)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Ask the event loop to stop. Returns immediately."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = self.config.log_level_number

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("staticserver").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connect(self, conn: Connection):
        logger.info(f"[{conn.id}] Connected with {conn.client_ip}:{conn.client_port}")

    def handle_request(self, request: HTTPRequest) -> HTTPResponse:
        """
        Produce the response for one parsed request.

        Any exception from the handler (for example a PermissionError while
        reading a file) becomes a bare 500 response.
        """
        try:
            return self._dispatcher.dispatch(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.url}: {e}")
            return server_error()

    def handle_data(self, conn: Connection, data: bytes) -> bool:
        """
        Handle one data event: parse, dispatch, respond.

        The whole chunk is taken to be one complete request.

        Returns:
            True to keep the connection open, False if the response could
            not be sent.
        """
        text = data.decode("utf-8", errors="replace")
        logger.info(f"[{conn.id}] Received:\n{text}")

        request = self._parser.parse(text)
        response = self.handle_request(request)

        try:
            response.write_to(conn)
        except OSError as e:
            logger.warning(f"[{conn.id}] Send failed: {e}")
            return False

        conn.requests_handled += 1
        logger.info(
            f"[{conn.id}] {request.method} {request.url} -> "
            f"{response.status_code} ({len(response.body_bytes())} bytes)"
        )
        return True


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Factory for a server instance.

    Example:
        app = create_app(ServerConfig(root_dir="./public"))
        app.run()
    """
    return HTTPServer(config)
