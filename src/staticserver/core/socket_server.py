"""
=============================================================================
TCP SOCKET SERVER (SINGLE-THREADED EVENT LOOP)
=============================================================================

Listens for connections and turns socket readiness into two callbacks:

    on_connect(conn)          a client was accepted
    on_data(conn, data)       a client sent a chunk of bytes

=============================================================================
WHY A SELECTOR INSTEAD OF THREADS?
=============================================================================

Every connection is handled on ONE thread. A selector (epoll/kqueue/select
under the hood) tells us which sockets are ready, and we service them one
at a time in the order the OS reports them:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          EVENT LOOP                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   while running:                                                     │
    │       for key in selector.select(poll_interval):                     │
    │           │                                                          │
    │           ├── listening socket ready?                                │
    │           │       accept() ──► Connection ──► on_connect(conn)       │
    │           │                    register(conn, EVENT_READ)            │
    │           │                                                          │
    │           └── client socket ready?                                   │
    │                   writable? ──► flush queued output                  │
    │                   readable? ──► recv()                               │
    │                       b""  ──► unregister + close                    │
    │                       data ──► on_data(conn, data)                   │
    │                                watch EVENT_WRITE while output queued │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no shared state between connections, so no locks are needed.
Sockets never block: a client that stops reading only grows its own
output queue. File reads inside handlers are still synchronous, so a big
file read holds up every other client for its duration.

=============================================================================
SIGNAL HANDLING
=============================================================================

SIGINT (Ctrl+C) and SIGTERM flip the running flag; the loop notices within
poll_interval seconds and cleans up. Python only allows installing signal
handlers from the main thread, so when the server runs in a background
thread (as in the test suite) the handlers are skipped and shutdown() must
be called explicitly.

=============================================================================
"""

import selectors
import signal
import socket
import logging
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


ConnectHandler = Callable[[Connection], None]
DataHandler = Callable[[Connection, bytes], bool]


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def on_connect(conn: Connection):
            print("hello", conn.address)

        def on_data(conn: Connection, data: bytes) -> bool:
            conn.write(data)
            return True            # keep the connection open

        server = SocketServer(config)
        server.start(on_connect, on_data)   # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, buffer size,
                    poll interval).

        The socket is created lazily in start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._selector: Optional[selectors.BaseSelector] = None
        self._running = False

        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address actually bound.

        Differs from the configured one when port 0 was requested.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create the listening socket with SO_REUSEADDR set."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Allow an immediate restart while old sockets sit in TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # accept() is only called after the selector says it's ready, but a
        # client may vanish in between; never block the loop on it
        sock.setblocking(False)

        return sock

    def _setup_signals(self):
        """Install SIGTERM/SIGINT handlers that trigger a graceful shutdown."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, skipping signal handlers")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, on_connect: ConnectHandler, on_data: DataHandler):
        """
        Bind, listen and run the event loop.

        This method BLOCKS until shutdown() is called.

        Args:
            on_connect: Called once for every accepted connection.
            on_data: Called for every chunk received. Returns False to have
                     the connection closed.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)

        self._selector = selectors.DefaultSelector()
        self._selector.register(self._socket, selectors.EVENT_READ, data=None)

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._event_loop(on_connect, on_data)
        finally:
            self._cleanup()

    def _event_loop(self, on_connect: ConnectHandler, on_data: DataHandler):
        """Dispatch readiness events until the running flag is cleared."""
        while self._running:
            try:
                events = self._selector.select(timeout=self.config.poll_interval)
            except InterruptedError:
                continue

            for key, mask in events:
                if key.data is None:
                    self._accept(on_connect)
                    continue

                conn: Connection = key.data
                if mask & selectors.EVENT_WRITE:
                    self._drain(conn)
                if mask & selectors.EVENT_READ and not conn.is_closed:
                    self._service(conn, on_data)

    def _accept(self, on_connect: ConnectHandler):
        """Accept one pending connection and start watching it."""
        try:
            client_socket, client_address = self._socket.accept()
        except (BlockingIOError, InterruptedError):
            return
        except OSError as e:
            if self._running:
                logger.error(f"Accept error: {e}")
            return

        conn = Connection(
            socket=client_socket,
            address=client_address,
            buffer_size=self.config.buffer_size,
        )
        self._selector.register(client_socket, selectors.EVENT_READ, data=conn)
        on_connect(conn)

    def _service(self, conn: Connection, on_data: DataHandler):
        """Read one chunk from a ready connection and hand it over."""
        data = conn.read_chunk()
        if data is None:
            logger.debug(f"[{conn.id}] Client closed connection")
            self._close_connection(conn)
            return
        if not data:
            return

        keep_open = on_data(conn, data)
        if not keep_open:
            self._close_connection(conn)
            return

        self._watch(conn)

    def _drain(self, conn: Connection):
        """Send queued output now that the socket is writable."""
        try:
            conn.flush()
        except OSError as e:
            logger.warning(f"[{conn.id}] Send failed: {e}")
            self._close_connection(conn)
            return

        self._watch(conn)

    def _watch(self, conn: Connection):
        """Watch for writability only while the connection has output queued."""
        events = selectors.EVENT_READ
        if conn.has_pending_output:
            events |= selectors.EVENT_WRITE
        self._selector.modify(conn.socket, events, data=conn)

    def _close_connection(self, conn: Connection):
        try:
            self._selector.unregister(conn.socket)
        except (KeyError, ValueError):
            pass  # never registered, or fd already invalid
        conn.close()

    def shutdown(self):
        """
        Stop the event loop.

        Safe to call from a signal handler or another thread, and more than
        once. The loop exits within poll_interval seconds.
        """
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Close every connection, the listening socket and the selector."""
        self._restore_signals()

        if self._selector is not None:
            for key in list(self._selector.get_map().values()):
                if key.data is not None:
                    self._close_connection(key.data)
            self._selector.close()
            self._selector = None

        if self._socket is not None:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._ready_event.wait(timeout)
