"""
=============================================================================
CONNECTION
=============================================================================

Wraps one accepted client socket.

=============================================================================
ONE READ = ONE REQUEST
=============================================================================

TCP is a byte stream and does not preserve message boundaries, so a real
HTTP server buffers until it sees "\\r\\n\\r\\n" and then reads exactly
Content-Length more bytes. This server does NOT do that:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      DATA EVENT HANDLING                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   socket readable ──► recv(buffer_size) ──► whole chunk = request   │
    │                                                                      │
    │   - no accumulation across reads                                     │
    │   - no framing by Content-Length                                     │
    │   - two pipelined requests in one chunk are parsed as one            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

That is fine for a browser or curl sending a small GET, which almost always
arrives in a single segment.

=============================================================================
NON-BLOCKING WRITES
=============================================================================

Every connection shares the one loop thread, so nothing may wait on a
client. write() queues the bytes and sends whatever the kernel accepts
right away; the rest stays queued until the selector reports the socket
writable again:

    write(data) ──► outgoing.append(data) ──► flush()
                                                │
                        socket full? ◄──────────┤
                        keep the rest,          └── all sent: queue empty
                        watch EVENT_WRITE

A client that stops reading only stalls its own queue.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    OPEN ──► (read ► respond)* ──► CLOSED
                                     ▲
              client closes ─────────┘
              read/send fails ───────┘
              server stops  ─────────┘

The server never closes a connection just because it has answered it.

=============================================================================
"""

import socket
import logging
import uuid
from collections import deque
from enum import Enum
from dataclasses import dataclass, field
from typing import Deque, Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""

    OPEN = "open"          # Accepted, waiting for or handling data
    CLOSED = "closed"      # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket (non-blocking).
        address: Client's (ip, port) tuple.
        id: Short unique identifier used in log lines.
        state: Current connection state.
        requests_handled: Number of data events answered.
        buffer_size: Maximum bytes read per data event.
        outgoing: Queued bytes not yet accepted by the kernel.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: ConnectionState = ConnectionState.OPEN
    requests_handled: int = 0

    buffer_size: int = 65536

    outgoing: Deque[memoryview] = field(default_factory=deque, init=False, repr=False)

    def __post_init__(self):
        self.socket.setblocking(False)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    @property
    def has_pending_output(self) -> bool:
        return bool(self.outgoing)

    def fileno(self) -> int:
        """File descriptor, so the connection can be registered with a selector."""
        return self.socket.fileno()

    def read_chunk(self) -> Optional[bytes]:
        """
        Read one data event.

        Returns:
            The received bytes, b"" if nothing was ready after all, or None
            if the connection is gone (closed by the client, reset, or any
            other socket error).
        """
        try:
            data = self.socket.recv(self.buffer_size)
        except (BlockingIOError, InterruptedError):
            return b""
        except OSError as e:
            logger.warning(f"[{self.id}] Read failed: {e}")
            return None

        if not data:
            return None
        return data

    def write(self, data: bytes) -> None:
        """
        Queue bytes for the client and send as much as possible now.

        Raises:
            OSError: If the client went away.
        """
        if data:
            self.outgoing.append(memoryview(data))
        self.flush()

    def flush(self) -> bool:
        """
        Send queued bytes until the queue is empty or the socket is full.

        Returns:
            True if everything queued has been sent.

        Raises:
            OSError: If the client went away.
        """
        while self.outgoing:
            view = self.outgoing[0]
            try:
                sent = self.socket.send(view)
            except (BlockingIOError, InterruptedError):
                return False

            if sent < len(view):
                self.outgoing[0] = view[sent:]
            else:
                self.outgoing.popleft()
        return True

    def close(self):
        """Close the socket. Safe to call more than once."""
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.close()
        except OSError:
            pass  # already gone

        self.outgoing.clear()
        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.requests_handled} requests")
