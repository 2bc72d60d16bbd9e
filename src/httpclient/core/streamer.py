"""
=============================================================================
STREAMER - BUFFERED TRANSPORT OVER ONE CONNECTION
=============================================================================

Wraps an already-connected socket with a buffered writer for sending
requests and a buffered reader for receiving responses.

=============================================================================
TWO HANDLES, ONE CONNECTION
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    sock.dup() ──► SocketIO("wb") ──► LineWriter     send_request()  │
    │        │                                                             │
    │        │   (same TCP connection, two file descriptors)               │
    │        │                                                             │
    │    sock ───────► makefile("rb")  ──► BufferedReader read_response() │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The writer and the reader each own their own descriptor, so closing
or flushing one never disturbs the other. The kernel keeps the
connection open until the last descriptor is closed, and close() on
the Streamer releases both exactly once.

=============================================================================
LINE BUFFERING
=============================================================================

LineWriter batches small writes but flushes as soon as the data it is
given contains a newline. send_request() ends every request with
b"\\n", so the bytes reach the socket without an explicit flush.

Note that this trailing b"\\n" follows the request's own CRLF-terminated
header lines, so a body-less request ends in "\\r\\n\\n". Servers that
accept a bare LF as a line terminator treat that as the end of the
header block; strict servers will keep waiting.

=============================================================================
"""

import io
import logging
import socket
import uuid
from typing import Iterator, Optional

from ..http.request import Request
from ..http.response import HTTPResponse, ResponseParser


logger = logging.getLogger(__name__)


class TransportError(OSError):
    """
    Raised when the underlying connection fails.

    Always chained to the original OSError (``raise ... from e``), so
    ``__cause__`` carries the errno and the socket-level detail.
    """


class LineWriter(io.BufferedWriter):
    """Buffered writer that flushes whenever written data contains a newline."""

    def write(self, data) -> int:
        written = super().write(data)
        if b"\n" in bytes(data):
            self.flush()
        return written


class Streamer:
    """
    Sends requests and reads responses over a single connection.

    The Streamer is the sole owner of the socket for its lifetime:
    nothing else should read from or write to it.

        with Streamer(sock) as streamer:
            streamer.send_request(request)
            response = streamer.read_response()

    Attributes:
        id: Short identifier used in log messages.
    """

    def __init__(self, sock: socket.socket, buffer_size: int = 8192):
        """
        Args:
            sock: A connected stream socket. The Streamer takes ownership.
            buffer_size: Size of the read and write buffers in bytes.

        Raises:
            TransportError: If the socket cannot be duplicated.
        """
        self.id = str(uuid.uuid4())[:8]
        self._socket = sock
        self._closed = False

        try:
            self._write_socket = sock.dup()
        except OSError as e:
            raise TransportError(f"Could not duplicate connection handle: {e}") from e

        self._writer = LineWriter(socket.SocketIO(self._write_socket, "wb"), buffer_size)
        self._reader = sock.makefile("rb", buffering=buffer_size)

        logger.debug(f"[{self.id}] Streamer opened on fd {sock.fileno()}")

    @property
    def closed(self) -> bool:
        return self._closed

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_request(self, request: Request) -> None:
        """
        Write a request followed by a single b"\\n".

        The newline makes the LineWriter flush, so there is no explicit
        flush here.

        Raises:
            TransportError: On any write failure (broken pipe, reset...).
        """
        logger.debug(f"[{self.id}] -> {request.request_line}")
        try:
            self._writer.write(request.bytes())
            self._writer.write(b"\n")
        except OSError as e:
            raise TransportError(f"Failed to send request: {e}") from e

    def send_raw(self, data: bytes) -> None:
        """Write arbitrary bytes and flush them."""
        try:
            self._writer.write(data)
            self._writer.flush()
        except OSError as e:
            raise TransportError(f"Failed to send data: {e}") from e

    # =========================================================================
    # READING
    # =========================================================================

    def read_response(self, max_size: int = 10 * 1024 * 1024) -> HTTPResponse:
        """
        Read one complete response from the connection.

        Blocks until the status line, headers and body have arrived (or
        the socket's timeout expires).

        Args:
            max_size: Largest response accepted, headers included.

        Raises:
            TransportError: If reading from the socket fails or times out.
            ProtocolError: If the response is malformed.
        """
        parser = ResponseParser(max_response_size=max_size)
        try:
            response = parser.read_from(self._reader)
        except OSError as e:
            raise TransportError(f"Failed to read response: {e}") from e

        logger.debug(f"[{self.id}] <- {response.status_line} ({len(response.body)} bytes)")
        return response

    def lines(self) -> Iterator[str]:
        """
        Yield each received line, without its line terminator, until EOF.

        Raises:
            TransportError: If reading from the socket fails.
        """
        try:
            for raw in self._reader:
                yield raw.rstrip(b"\r\n").decode("utf-8", errors="replace")
        except OSError as e:
            raise TransportError(f"Failed to read from connection: {e}") from e

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self) -> None:
        """
        Flush pending output and release both descriptors.

        Safe to call more than once; only the first call does anything.
        """
        if self._closed:
            return
        self._closed = True

        try:
            self._writer.close()
        except OSError as e:
            # Peer already gone, nothing left to deliver
            logger.debug(f"[{self.id}] Flush on close failed: {e}")

        self._reader.close()
        self._write_socket.close()
        self._socket.close()
        logger.debug(f"[{self.id}] Streamer closed")

    def __enter__(self) -> "Streamer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> Optional[bool]:
        self.close()
        return False
