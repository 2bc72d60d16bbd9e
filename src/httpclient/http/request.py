"""
=============================================================================
HTTP REQUEST MODEL
=============================================================================

Builds outgoing HTTP/1.1 requests and renders them to wire bytes.

=============================================================================
TWO-PHASE CONSTRUCTION
=============================================================================

A request is assembled in two distinct phases:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     REQUEST CONSTRUCTION                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   RequestBuilder (mutable, every field optional)                    │
    │       .with_method(RequestMethod.GET)                               │
    │       .with_host("example.com")                                     │
    │       .with_path("/")                                               │
    │       .with_headers({"Accept": "*/*"})                              │
    │       .with_body("...")          ← the only optional field          │
    │              │                                                       │
    │              ▼  build()  (validates exactly once)                    │
    │                                                                      │
    │   Request (frozen, every mandatory field present)                   │
    │              │                                                       │
    │              ▼  bytes()                                              │
    │                                                                      │
    │   b"GET / HTTP/1.1\\r\\nHost: example.com\\r\\nAccept: */*\\r\\n"   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Missing fields are caught at a single point (build) instead of
scattering None-checks through the serializer.

=============================================================================
WIRE FORMAT
=============================================================================

    <METHOD> <path> HTTP/1.1\\r\\n
    Host: <host>\\r\\n
    <key>: <value>\\r\\n         (one per header, order unspecified)
    <body>                      (verbatim, no terminator)

No Content-Length is computed here. Callers that send a body add the
header themselves.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional


class ValidationError(ValueError):
    """
    Raised when a RequestBuilder cannot produce a Request.

    Carries the name of the offending field so callers can tell
    "no host" apart from "no headers" without parsing messages.
    """

    def __init__(self, field_name: str, message: str):
        super().__init__(message)
        self.field = field_name


class RequestMethod(Enum):
    """
    Supported request methods.

    The value of each member is its literal wire token, so adding a
    method is a one-line change here.
    """
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def default(cls) -> "RequestMethod":
        return cls.GET

    @classmethod
    def parse(cls, token: str) -> "RequestMethod":
        """
        Look up a method by name, ignoring case.

        Raises:
            ValidationError: If the token is not a supported method.
        """
        try:
            return cls(token.strip().upper())
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise ValidationError("method", f"Unsupported method {token!r}; expected one of {allowed}")


# Messages for each mandatory field, checked in this order by build()
_MISSING_FIELD_MESSAGES = (
    ("method", "Request types are mandatory: GET, PUT, POST, DELETE"),
    ("path", "Each request needs a path."),
    ("host", "Each request needs a host."),
    ("headers", "Make sure you input your headers."),
)


@dataclass(frozen=True)
class Request:
    """
    A fully specified HTTP request, ready to serialize.

    Instances are immutable: to change anything, build a new one.
    The headers mapping is copied on construction and exposed read-only,
    so neither the caller's dict nor request.headers can change it.

    Attributes:
        method:  Request method (RequestMethod).
        host:    Value for the Host header. Not validated.
        path:    Request target. Not validated.
        headers: Extra header name → value (may be empty).
        body:    Optional body text, appended verbatim.
    """

    method: RequestMethod
    host: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[str] = None

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @staticmethod
    def builder() -> "RequestBuilder":
        """Start a new, empty RequestBuilder."""
        return RequestBuilder()

    @property
    def request_line(self) -> str:
        """The first line of the request, e.g. "GET / HTTP/1.1"."""
        return f"{self.method} {self.path} HTTP/1.1"

    def _headers_as_string(self) -> str:
        return "".join(f"{name}: {value}\r\n" for name, value in self.headers.items())

    def bytes(self) -> bytes:
        """
        Render the request in wire form.

        The Host line always follows the request line. The body, if any,
        follows the last header line directly; an absent body adds
        nothing.

        Returns:
            The encoded request (UTF-8).
        """
        text = (
            f"{self.request_line}\r\n"
            f"Host: {self.host}\r\n"
            f"{self._headers_as_string()}"
            f"{self.body or ''}"
        )
        return text.encode("utf-8")


class RequestBuilder:
    """
    Mutable staging area for a Request.

    Every field starts unset. The with_* methods overwrite the staged
    value and return the builder so calls can be chained:

        request = (Request.builder()
            .with_method(RequestMethod.GET)
            .with_host("example.com")
            .with_path("/")
            .with_headers({})
            .build())

    A builder is single use. Once build() has succeeded the staged
    values belong to the Request and any further call raises
    ValidationError.
    """

    def __init__(self):
        self._method: Optional[RequestMethod] = None
        self._host: Optional[str] = None
        self._path: Optional[str] = None
        self._headers: Optional[Dict[str, str]] = None
        self._body: Optional[str] = None
        self._consumed = False

    def _check_open(self) -> None:
        if self._consumed:
            raise ValidationError("builder", "This builder has already been built")

    # =========================================================================
    # FIELD SETTERS
    # =========================================================================

    def with_method(self, method: RequestMethod) -> "RequestBuilder":
        self._check_open()
        self._method = method
        return self

    # Older name for with_method
    with_request_type = with_method

    def with_host(self, host: str) -> "RequestBuilder":
        self._check_open()
        self._host = host
        return self

    def with_path(self, path: str) -> "RequestBuilder":
        self._check_open()
        self._path = path
        return self

    def with_headers(self, headers: Dict[str, str]) -> "RequestBuilder":
        """Replace the staged headers with a copy of ``headers``."""
        self._check_open()
        self._headers = dict(headers)
        return self

    def append_headers(self, headers: Dict[str, str]) -> "RequestBuilder":
        """
        Merge ``headers`` into the staged headers.

        Staged keys that are not in ``headers`` are kept; keys present in
        both take the new value. If no headers were staged yet, an empty
        mapping is created first, so this also counts as setting them.
        """
        self._check_open()
        if self._headers is None:
            self._headers = {}
        self._headers.update(headers)
        return self

    def with_body(self, body: str) -> "RequestBuilder":
        self._check_open()
        self._body = body
        return self

    # =========================================================================
    # BUILD
    # =========================================================================

    def build(self) -> Request:
        """
        Validate the staged fields and produce a Request.

        Method, path, host and headers must all have been set. An empty
        headers mapping counts as set; only a never-set field fails.

        Returns:
            The assembled, immutable Request.

        Raises:
            ValidationError: Naming the first missing field.
        """
        self._check_open()

        staged = {
            "method": self._method,
            "path": self._path,
            "host": self._host,
            "headers": self._headers,
        }
        for name, message in _MISSING_FIELD_MESSAGES:
            if staged[name] is None:
                raise ValidationError(name, message)

        request = Request(
            method=self._method,
            host=self._host,
            path=self._path,
            headers=self._headers,
            body=self._body,
        )

        # Staged values now belong to the request
        self._consumed = True
        self._headers = None
        return request
