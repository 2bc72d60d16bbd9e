"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httpclient import ClientConfig, Request, RequestMethod


@pytest.fixture
def sample_response() -> bytes:
    """Simple response framed by Content-Length."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Type: text/plain; charset=utf-8\r\n"
        b"Content-Length: 5\r\n"
        b"\r\n"
        b"hello"
    )


@pytest.fixture
def chunked_response() -> bytes:
    """Response using chunked transfer encoding."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"Transfer-Encoding: chunked\r\n"
        b"\r\n"
        b"4\r\nWiki\r\n"
        b"5\r\npedia\r\n"
        b"0\r\n"
        b"\r\n"
    )


@pytest.fixture
def get_request() -> Request:
    """GET / for example.com with no extra headers."""
    return (Request.builder()
        .with_method(RequestMethod.GET)
        .with_host("example.com")
        .with_path("/")
        .with_headers({})
        .build())


@pytest.fixture
def socket_pair() -> Generator[tuple[socket.socket, socket.socket], None, None]:
    """A connected (client, peer) socket pair with a short timeout."""
    client, peer = socket.socketpair()
    client.settimeout(5.0)
    peer.settimeout(5.0)
    yield client, peer
    for s in (client, peer):
        try:
            s.close()
        except OSError:
            pass


@pytest.fixture
def config() -> ClientConfig:
    """Default test client configuration."""
    return ClientConfig(timeout=5.0, log_level="WARNING")


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class OneShotServer:
    """
    Accepts a single connection in a background thread, records the
    request bytes up to ``terminator``, replies with ``response`` and
    closes the connection.
    """

    def __init__(self, response: bytes, terminator: bytes = b"\r\n\n"):
        self.response = response
        self.terminator = terminator
        self.received = b""
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(1)
        self._listener.settimeout(5.0)
        self.port = self._listener.getsockname()[1]
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "OneShotServer":
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()
        return self

    def _serve(self):
        try:
            conn, _ = self._listener.accept()
        except OSError:
            return
        with conn:
            conn.settimeout(5.0)
            while not self.received.endswith(self.terminator):
                chunk = conn.recv(4096)
                if not chunk:
                    break
                self.received += chunk
            conn.sendall(self.response)

    def stop(self):
        self._listener.close()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def one_shot_server() -> Generator:
    """Factory fixture: call with the canned response to start a server."""
    servers = []

    def start(response: bytes, terminator: bytes = b"\r\n\n") -> OneShotServer:
        server = OneShotServer(response, terminator).start()
        servers.append(server)
        return server

    yield start

    for server in servers:
        server.stop()
