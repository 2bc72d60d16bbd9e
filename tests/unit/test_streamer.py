"""
Unit tests for the Streamer transport adapter.
"""

import io
import socket

import pytest

from httpclient.core.streamer import LineWriter, Streamer, TransportError
from httpclient.http.request import Request, RequestMethod
from httpclient.http.response import ProtocolError


def recv_exactly(sock: socket.socket, size: int) -> bytes:
    """Read ``size`` bytes from ``sock`` (fewer only on EOF)."""
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def recv_all(sock: socket.socket) -> bytes:
    """Read until the other side closes."""
    data = b""
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return data
        data += chunk


class FakeSocket:
    """Stand-in whose handle cannot be duplicated."""

    def dup(self):
        raise OSError(24, "Too many open files")


class TestLineWriter:
    """Tests for newline-triggered flushing."""

    def test_holds_data_without_newline(self):
        raw = io.BytesIO()
        writer = LineWriter(raw, 1024)

        writer.write(b"partial")
        assert raw.getvalue() == b""

        writer.write(b" line\n")
        assert raw.getvalue() == b"partial line\n"


class TestStreamerSend:
    """Tests for writing requests."""

    def test_peer_receives_request_plus_newline(self, socket_pair, get_request):
        client, peer = socket_pair
        expected = b"GET / HTTP/1.1\r\nHost: example.com\r\n\n"

        streamer = Streamer(client)
        streamer.send_request(get_request)

        # No explicit flush: the trailing newline pushes the bytes out
        assert recv_exactly(peer, len(expected)) == expected

        streamer.close()
        assert recv_all(peer) == b""

    def test_body_is_sent_verbatim(self, socket_pair):
        client, peer = socket_pair
        request = (Request.builder()
            .with_method(RequestMethod.POST)
            .with_host("example.com")
            .with_path("/submit")
            .with_headers({"Content-Length": "5"})
            .with_body("hello")
            .build())
        expected = b"POST /submit HTTP/1.1\r\nHost: example.com\r\nContent-Length: 5\r\nhello\n"

        with Streamer(client) as streamer:
            streamer.send_request(request)
            assert recv_exactly(peer, len(expected)) == expected

    def test_send_raw(self, socket_pair):
        client, peer = socket_pair
        with Streamer(client) as streamer:
            streamer.send_raw(b"PING")
            assert recv_exactly(peer, 4) == b"PING"

    def test_write_failure_raises_transport_error(self, socket_pair, get_request):
        client, _ = socket_pair
        streamer = Streamer(client)
        streamer._write_socket.shutdown(socket.SHUT_WR)

        with pytest.raises(TransportError) as exc_info:
            streamer.send_request(get_request)

        assert isinstance(exc_info.value, OSError)
        assert isinstance(exc_info.value.__cause__, OSError)
        streamer.close()

    def test_dup_failure_raises_transport_error(self):
        with pytest.raises(TransportError, match="duplicate"):
            Streamer(FakeSocket())


class TestStreamerRead:
    """Tests for reading responses."""

    def test_read_response(self, socket_pair, sample_response):
        client, peer = socket_pair
        peer.sendall(sample_response)

        with Streamer(client) as streamer:
            response = streamer.read_response()

        assert response.status == 200
        assert response.body == b"hello"

    def test_read_chunked_response(self, socket_pair, chunked_response):
        client, peer = socket_pair
        peer.sendall(chunked_response)

        with Streamer(client) as streamer:
            assert streamer.read_response().body == b"Wikipedia"

    def test_two_responses_on_one_connection(self, socket_pair, sample_response):
        client, peer = socket_pair
        peer.sendall(sample_response + sample_response)

        with Streamer(client) as streamer:
            assert streamer.read_response().body == b"hello"
            assert streamer.read_response().body == b"hello"

    def test_request_then_response(self, socket_pair, get_request, sample_response):
        client, peer = socket_pair

        with Streamer(client) as streamer:
            streamer.send_request(get_request)
            recv_exactly(peer, len(get_request.bytes()) + 1)
            peer.sendall(sample_response)
            assert streamer.read_response().text == "hello"

    def test_peer_closes_early(self, socket_pair):
        client, peer = socket_pair
        peer.sendall(b"HTTP/1.1 200 OK\r\nContent-Length: 10\r\n\r\nabc")
        peer.close()

        with Streamer(client) as streamer:
            with pytest.raises(ProtocolError, match="Incomplete body"):
                streamer.read_response()

    def test_timeout_raises_transport_error(self, socket_pair):
        client, _ = socket_pair
        client.settimeout(0.2)

        with Streamer(client) as streamer:
            with pytest.raises(TransportError):
                streamer.read_response()

    def test_response_size_limit(self, socket_pair):
        client, peer = socket_pair
        peer.sendall(b"HTTP/1.1 200 OK\r\nContent-Length: 4096\r\n\r\n")

        with Streamer(client) as streamer:
            with pytest.raises(ProtocolError):
                streamer.read_response(max_size=1024)

    def test_lines(self, socket_pair):
        client, peer = socket_pair
        peer.sendall(b"HTTP/1.0 200 OK\r\nServer: test\r\n\r\nbody line\n")
        peer.close()

        with Streamer(client) as streamer:
            assert list(streamer.lines()) == [
                "HTTP/1.0 200 OK",
                "Server: test",
                "",
                "body line",
            ]


class TestStreamerClose:
    """Tests for connection lifetime."""

    def test_close_is_idempotent(self, socket_pair):
        client, peer = socket_pair
        streamer = Streamer(client)

        streamer.close()
        streamer.close()

        assert streamer.closed
        assert client.fileno() == -1
        assert recv_all(peer) == b""

    def test_context_manager_closes(self, socket_pair):
        client, _ = socket_pair
        with Streamer(client) as streamer:
            assert not streamer.closed
        assert streamer.closed

    def test_context_manager_does_not_swallow(self, socket_pair):
        client, _ = socket_pair
        with pytest.raises(RuntimeError):
            with Streamer(client):
                raise RuntimeError("boom")
