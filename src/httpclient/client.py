"""
=============================================================================
HTTP CLIENT
=============================================================================

One-shot HTTP/1.1 client: open a connection, send one request, read
one response, close.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌──────────────┐   build()   ┌─────────┐
    │RequestBuilder│────────────►│ Request │
    └──────────────┘             └────┬────┘
                                      │ HTTPClient.send()
                                      ▼
              socket.create_connection((host, port), timeout)
                                      │
                                      ▼
                              ┌──────────────┐  send_request()
                              │   Streamer   │──────────────────► server
                              │              │◄────────────────── server
                              └──────┬───────┘  read_response()
                                     ▼
                               HTTPResponse

There is no pooling and no retry: every call gets a fresh
connection, and any failure is raised to the caller, who decides
whether to try again.

=============================================================================
"""

import logging
import socket
import time
from typing import Dict, Optional

from .config import ClientConfig
from .core.streamer import Streamer, TransportError
from .http.request import Request, RequestMethod
from .http.response import HTTPResponse


logger = logging.getLogger(__name__)


def split_host_port(host: str, default_port: int) -> tuple[str, int]:
    """
    Split a Host header value into (hostname, port).

        "example.com"       → ("example.com", default_port)
        "example.com:8080"  → ("example.com", 8080)
        "[::1]:8080"        → ("::1", 8080)
    """
    if host.startswith("["):
        address, _, rest = host[1:].partition("]")
        port = rest[1:] if rest.startswith(":") else ""
        return address, int(port) if port.isdigit() else default_port

    name, sep, port = host.rpartition(":")
    if sep and port.isdigit() and ":" not in name:
        return name, int(port)
    return host, default_port


class HTTPClient:
    """
    Sends Requests over fresh TCP connections.

        client = HTTPClient(ClientConfig(timeout=5.0))
        response = client.get("example.com", "/")
        print(response.status, response.text)
    """

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()
        self.config.validate()

    def connect(self, host: str, port: Optional[int] = None) -> Streamer:
        """
        Open a connection and wrap it in a Streamer.

        Raises:
            TransportError: If the host cannot be resolved or reached.
        """
        port = port or self.config.port
        logger.debug(f"Connecting to {host}:{port}")
        try:
            sock = socket.create_connection((host, port), timeout=self.config.timeout)
        except OSError as e:
            raise TransportError(f"Could not connect to {host}:{port}: {e}") from e

        try:
            return Streamer(sock, buffer_size=self.config.buffer_size)
        except TransportError:
            sock.close()
            raise

    def send(self, request: Request, port: Optional[int] = None) -> HTTPResponse:
        """
        Send ``request`` to its host and return the response.

        The target comes from request.host (which may carry a ":port");
        an explicit ``port`` argument wins over both.

        Raises:
            TransportError: On connection or I/O failure.
            ProtocolError: If the server's response is malformed.
        """
        host, host_port = split_host_port(request.host, self.config.port)
        start = time.perf_counter()

        logger.info(f"{request.request_line} (host {host}:{port or host_port})")
        with self.connect(host, port or host_port) as streamer:
            streamer.send_request(request)
            response = streamer.read_response(max_size=self.config.max_response_size)

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{response.status_line} in {duration_ms:.1f}ms ({len(response.body)} bytes)")
        return response

    def get(
        self,
        host: str,
        path: str = "/",
        headers: Optional[Dict[str, str]] = None,
        port: Optional[int] = None,
    ) -> HTTPResponse:
        """
        Convenience GET with User-Agent and Connection: close set.

        Entries in ``headers`` override the defaults.
        """
        request = (Request.builder()
            .with_method(RequestMethod.GET)
            .with_host(host)
            .with_path(path)
            .with_headers({
                "User-Agent": self.config.user_agent,
                "Connection": "close",
            })
            .append_headers(headers or {})
            .build())
        return self.send(request, port=port)
