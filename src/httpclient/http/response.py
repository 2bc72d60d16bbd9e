"""
=============================================================================
HTTP RESPONSE PARSER
=============================================================================

Parses HTTP/1.1 responses read from a byte stream into HTTPResponse
objects. Implements the message framing rules of RFC 7230 section 3.3.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTP/1.1 200 OK\\r\\n                 ← status line               │
    │   Content-Type: text/html\\r\\n         ← headers                   │
    │   Content-Length: 12\\r\\n                                          │
    │   \\r\\n                                ← empty line                │
    │   Hello World!                          ← body                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHERE DOES THE BODY END?
=============================================================================

TCP is a byte stream, so the client has to work out the body length
from the headers. In order of precedence:

    1. Status 1xx, 204, 304   → there is no body at all
    2. Transfer-Encoding: chunked
                              → sequence of <hex size>\\r\\n<data>\\r\\n,
                                terminated by a zero-size chunk
    3. Content-Length: N      → exactly N bytes
    4. Neither                → everything until the server closes

    Chunked example:

        4\\r\\n
        Wiki\\r\\n
        5\\r\\n
        pedia\\r\\n
        0\\r\\n
        \\r\\n                  → body = b"Wikipedia"

Anything that does not fit these rules raises ProtocolError instead of
returning a half-parsed response.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Optional
import io
import re


class ProtocolError(Exception):
    """
    Raised when a response violates HTTP/1.1 framing.

    Examples: garbage instead of a status line, a header without a
    colon, a bad chunk size, or a body shorter than Content-Length.
    """


@dataclass
class HTTPResponse:
    """
    A response received from a server.

    Header names are stored lower-case, since header names are
    case-insensitive. Repeated headers are joined with ", ".
    """

    status: int
    reason: str = ""
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def status_line(self) -> str:
        """Status line as it would appear on the wire, e.g. "HTTP/1.1 200 OK"."""
        line = f"{self.version} {self.status}"
        return f"{line} {self.reason}" if self.reason else line

    @property
    def content_type(self) -> Optional[str]:
        """Media type without parameters, e.g. "text/html"."""
        ct = self.headers.get("content-type", "")
        return ct.split(";")[0].strip().lower() or None

    @property
    def charset(self) -> str:
        """Charset parameter from Content-Type, defaulting to utf-8."""
        for param in self.headers.get("content-type", "").split(";")[1:]:
            name, _, value = param.partition("=")
            if name.strip().lower() == "charset" and value.strip():
                return value.strip().strip('"')
        return "utf-8"

    @property
    def content_length(self) -> Optional[int]:
        try:
            return int(self.headers["content-length"])
        except (KeyError, ValueError):
            return None

    @property
    def is_chunked(self) -> bool:
        return _is_chunked(self.headers)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status < 400

    @property
    def is_error(self) -> bool:
        return self.status >= 400

    @property
    def text(self) -> str:
        """
        The body decoded as text.

        Uses the charset from Content-Type. Undecodable bytes are
        replaced rather than raising, since this is a convenience view.
        """
        try:
            return self.body.decode(self.charset, errors="replace")
        except LookupError:
            # Unknown charset name
            return self.body.decode("utf-8", errors="replace")

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)


def _is_chunked(headers: Dict[str, str]) -> bool:
    # Only the final transfer coding decides the framing
    codings = headers.get("transfer-encoding", "")
    return codings.split(",")[-1].strip().lower() == "chunked"


class ResponseParser:
    """
    Reads one HTTP response from a buffered binary stream.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        reader.readline()  → status line  → (version, status, reason)
              │
              ▼   1xx? discard headers and start again
        reader.readline()* → header lines until an empty line
              │
              ▼
        body framing: none / chunked / Content-Length / until EOF
              │
              ▼
        HTTPResponse

    The stream only needs readline(limit) and read(n), so a socket's
    makefile("rb") and io.BytesIO both work.

    ==========================================================================
    """

    STATUS_LINE_PATTERN = re.compile(r"^(HTTP/\d\.\d) (\d{3})(?: (.*))?$")
    CHUNK_SIZE_PATTERN = re.compile(r"^([0-9A-Fa-f]+)[ \t]*(?:;.*)?$")

    # Longest single line (status, header or chunk size) we accept
    MAX_LINE_LENGTH = 65536

    def __init__(self, max_response_size: int = 10 * 1024 * 1024):
        """
        Args:
            max_response_size: Upper bound on header plus body bytes.
                               Larger responses raise ProtocolError.
        """
        self.max_response_size = max_response_size
        self._consumed = 0

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def parse(self, data: bytes) -> HTTPResponse:
        """Parse a complete response held in memory."""
        return self.read_from(io.BytesIO(data))

    def read_from(self, reader: BinaryIO) -> HTTPResponse:
        """
        Read exactly one response from ``reader``.

        Interim 1xx responses (e.g. 100 Continue) are skipped. Bytes
        after the final response's body stay unread in the stream.

        Raises:
            ProtocolError: If the response is malformed, truncated or
                           larger than max_response_size.
        """
        self._consumed = 0

        while True:
            first = self._readline(reader)
            if not first:
                raise ProtocolError("Connection closed before response")

            version, status, reason = self.parse_status_line(self._decode_line(first))
            headers = self.parse_headers(self._read_header_lines(reader))

            if 100 <= status < 200:
                continue
            break

        body = self._read_body(reader, status, headers)

        return HTTPResponse(
            status=status,
            reason=reason,
            version=version,
            headers=headers,
            body=body,
        )

    def parse_status_line(self, line: str) -> tuple[str, int, str]:
        """
        Split a status line into (version, status, reason).

        Format: HTTP-VERSION SP STATUS-CODE SP [REASON-PHRASE]

        Raises:
            ProtocolError: If the line does not match.
        """
        match = self.STATUS_LINE_PATTERN.match(line)
        if not match:
            raise ProtocolError(f"Malformed status line: {line!r}")

        version, status, reason = match.groups()
        return version, int(status), (reason or "").strip()

    def parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse "Name: Value" lines into a dict with lower-case names.

        Lines starting with whitespace continue the previous header
        (obsolete folding). Repeated names are joined with ", ".

        Raises:
            ProtocolError: On a line without a colon or with an empty name.
        """
        headers: Dict[str, str] = {}
        current_name = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is None:
                    raise ProtocolError(f"Continuation line before any header: {line!r}")
                headers[current_name] += " " + line.strip()
                continue

            name, sep, value = line.partition(":")
            name = name.strip().lower()
            if not sep or not name:
                raise ProtocolError(f"Malformed header line: {line!r}")

            value = value.strip()
            current_name = name
            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers

    # =========================================================================
    # LINE READING
    # =========================================================================

    def _account(self, size: int) -> None:
        self._consumed += size
        if self._consumed > self.max_response_size:
            raise ProtocolError(f"Response too large: more than {self.max_response_size} bytes")

    def _readline(self, reader: BinaryIO) -> bytes:
        line = reader.readline(self.MAX_LINE_LENGTH + 1)
        if len(line) > self.MAX_LINE_LENGTH:
            raise ProtocolError("Line too long")
        self._account(len(line))
        return line

    @staticmethod
    def _decode_line(raw: bytes) -> str:
        # Header bytes outside ASCII are legal but opaque; latin-1 keeps them 1:1
        return raw.rstrip(b"\r\n").decode("latin-1")

    def _read_header_lines(self, reader: BinaryIO) -> list[str]:
        lines = []
        while True:
            raw = self._readline(reader)
            if not raw:
                raise ProtocolError("Connection closed inside header block")
            if raw in (b"\r\n", b"\n"):
                return lines
            lines.append(self._decode_line(raw))

    # =========================================================================
    # BODY FRAMING
    # =========================================================================

    def _read_body(self, reader: BinaryIO, status: int, headers: Dict[str, str]) -> bytes:
        if status in (204, 304) or 100 <= status < 200:
            return b""

        if _is_chunked(headers):
            return self._read_chunked(reader, headers)

        if "content-length" in headers:
            return self._read_exact(reader, self._content_length(headers["content-length"]))

        return self._read_until_close(reader)

    @staticmethod
    def _content_length(raw: str) -> int:
        # Repeated headers were joined with ", "; all copies must agree
        values = {v.strip() for v in raw.split(",")}
        if len(values) != 1:
            raise ProtocolError(f"Conflicting Content-Length values: {raw!r}")

        value = values.pop()
        if not (value.isascii() and value.isdigit()):
            raise ProtocolError(f"Invalid Content-Length: {raw!r}")
        return int(value)

    def _read_exact(self, reader: BinaryIO, length: int) -> bytes:
        self._account(length)
        chunks = []
        remaining = length
        while remaining > 0:
            data = reader.read(remaining)
            if not data:
                raise ProtocolError(
                    f"Incomplete body: expected {length} bytes, got {length - remaining}"
                )
            chunks.append(data)
            remaining -= len(data)
        return b"".join(chunks)

    def _read_until_close(self, reader: BinaryIO) -> bytes:
        chunks = []
        while True:
            data = reader.read(8192)
            if not data:
                return b"".join(chunks)
            self._account(len(data))
            chunks.append(data)

    def _read_chunked(self, reader: BinaryIO, headers: Dict[str, str]) -> bytes:
        chunks = []
        while True:
            raw = self._readline(reader)
            if not raw:
                raise ProtocolError("Connection closed inside chunked body")

            match = self.CHUNK_SIZE_PATTERN.match(self._decode_line(raw).strip())
            if not match:
                raise ProtocolError(f"Invalid chunk size line: {raw!r}")

            size = int(match.group(1), 16)
            if size == 0:
                break

            chunks.append(self._read_exact(reader, size))
            if self._readline(reader) not in (b"\r\n", b"\n"):
                raise ProtocolError("Missing CRLF after chunk data")

        # Optional trailer fields, then the final empty line
        trailers = self.parse_headers(self._read_header_lines(reader))
        for name, value in trailers.items():
            headers[name] = f"{headers[name]}, {value}" if name in headers else value

        return b"".join(chunks)


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_response(data: bytes, max_size: int = 10 * 1024 * 1024) -> HTTPResponse:
    """
    Parse a complete response from bytes in one call.

    Use ResponseParser directly when reading from a stream.
    """
    return ResponseParser(max_response_size=max_size).parse(data)
