"""
HTTP message layer: building requests and parsing responses.

    REQUEST (what we send):           RESPONSE (what we read):
    ───────────────────────           ────────────────────────
    GET /path HTTP/1.1\\r\\n           HTTP/1.1 200 OK\\r\\n
    Host: example.com\\r\\n            Content-Length: 5\\r\\n
    Header: Value\\r\\n                \\r\\n
    [body]                            hello
"""

from .request import Request, RequestBuilder, RequestMethod, ValidationError
from .response import HTTPResponse, ResponseParser, ProtocolError, parse_response

__all__ = [
    # Request building
    "Request",
    "RequestBuilder",
    "RequestMethod",
    "ValidationError",

    # Response parsing
    "HTTPResponse",
    "ResponseParser",
    "ProtocolError",
    "parse_response",
]
