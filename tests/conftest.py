"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from staticserver import HTTPServer, ServerConfig
from staticserver.handlers import StaticFileHandler


GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x80\x00\x00\xff\xff\xff\x00\x00\x00!\xf9\x04\x01\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """A small website to serve."""
    site = tmp_path / "site"
    site.mkdir()
    (site / "index.html").write_text("<html><body>Home</body></html>")
    (site / "style.css").write_bytes(b"body{color:red}")
    (site / "app.js").write_text("console.log('hi');")
    (site / "data.json").write_text('{"ok": true}')
    (site / "logo.gif").write_bytes(GIF_BYTES)
    (site / "notes.txt").write_text("plain notes")
    (site / "README").write_text("no extension")
    (site / "assets").mkdir()
    (site / "assets" / "extra.css").write_text("p{margin:0}")

    # Lives next to the site, reachable only through ".."
    (tmp_path / "secret.html").write_text("<p>secret</p>")
    return site


@pytest.fixture
def static_handler(site_dir: Path) -> StaticFileHandler:
    return StaticFileHandler(root_dir=str(site_dir))


@pytest.fixture
def sample_get_request() -> str:
    """Sample HTTP GET request text."""
    return (
        "GET /style.css HTTP/1.1\r\n"
        "Host: localhost:4000\r\n"
        "User-Agent: pytest\r\n"
        "Accept: text/css\r\n"
        "\r\n"
    )


@pytest.fixture
def sample_post_request() -> str:
    """Sample HTTP POST request text with a form body."""
    return (
        "POST /index.html HTTP/1.1\r\n"
        "Host: localhost:4000\r\n"
        "Content-Type: application/x-www-form-urlencoded\r\n"
        "Content-Length: 13\r\n"
        "\r\n"
        "name=John&x=1"
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def read_response(sock: socket.socket) -> bytes:
    """
    Read one full response from a socket.

    The server doesn't close the connection, so we frame the response
    ourselves with Content-Length.
    """
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = sock.recv(4096)
        if not chunk:
            return data
        data += chunk

    head, _, body = data.partition(b"\r\n\r\n")
    length = 0
    for line in head.split(b"\r\n")[1:]:
        key, _, value = line.partition(b": ")
        if key == b"Content-Length":
            length = int(value)

    while len(body) < length:
        chunk = sock.recv(4096)
        if not chunk:
            break
        body += chunk

    return head + b"\r\n\r\n" + body


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: HTTPServer, port: int):
        self.server = server
        self.port = port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def connect(self) -> socket.socket:
        sock = socket.create_connection(("127.0.0.1", self.port), timeout=5.0)
        return sock

    def request(self, text: str) -> bytes:
        """Send one request on a fresh connection and return the response."""
        with self.connect() as sock:
            sock.sendall(text.encode("utf-8"))
            return read_response(sock)


@pytest.fixture
def test_server(site_dir: Path, free_port: int) -> Generator[TestServer, None, None]:
    """A running server serving site_dir."""
    server = HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=free_port,
        root_dir=str(site_dir),
        poll_interval=0.05,
        log_level="WARNING",
    ))

    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()
