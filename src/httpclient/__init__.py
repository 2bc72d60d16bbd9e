"""
=============================================================================
HTTPCLIENT - Minimal HTTP/1.1 Client Over Raw Sockets
=============================================================================

Builds HTTP/1.1 requests, writes them to a TCP connection and parses
the responses, using nothing but the standard library.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      HTTPCLIENT ARCHITECTURE                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   http/request.py    RequestBuilder ──build()──► Request ──bytes()  │
    │                                                                      │
    │   core/streamer.py   Streamer: LineWriter + BufferedReader over     │
    │                      two handles of one socket                      │
    │                                                                      │
    │   http/response.py   ResponseParser: status line, headers,          │
    │                      Content-Length / chunked / until-close body    │
    │                                                                      │
    │   client.py          HTTPClient: connect, send, read, close         │
    │                                                                      │
    │   config.py          ClientConfig: timeouts, limits, logging        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    from httpclient import HTTPClient, Request, RequestMethod

    request = (Request.builder()
        .with_method(RequestMethod.GET)
        .with_host("example.com")
        .with_path("/")
        .with_headers({"Connection": "close"})
        .build())

    response = HTTPClient().send(request)
    print(response.status_line)
    print(response.text)

=============================================================================
"""

from .client import HTTPClient
from .config import ClientConfig
from .core import Streamer, TransportError
from .http import (
    Request,
    RequestBuilder,
    RequestMethod,
    ValidationError,
    HTTPResponse,
    ResponseParser,
    ProtocolError,
)

__version__ = "1.0.0"

__all__ = [
    "HTTPClient",
    "ClientConfig",
    "Streamer",
    "TransportError",
    "Request",
    "RequestBuilder",
    "RequestMethod",
    "ValidationError",
    "HTTPResponse",
    "ResponseParser",
    "ProtocolError",
]
