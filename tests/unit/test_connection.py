"""
Unit tests for Connection and the per-connection request cycle.

These drive HTTPServer._process_connection() directly over a socketpair,
so no listening socket or worker threads are involved.
"""

import socket
import time

import pytest

from minihttp import HTTPServer, ServerConfig
from minihttp.core.connection import DRAIN_TIMEOUT, Connection, ConnectionState
from minihttp.http.response import ok


@pytest.fixture
def app(files_dir) -> HTTPServer:
    return HTTPServer(ServerConfig(port=0, directory=str(files_dir)))


@pytest.fixture
def pair():
    server_sock, client_sock = socket.socketpair()
    client_sock.settimeout(5.0)
    yield server_sock, client_sock
    client_sock.close()
    server_sock.close()


def exchange(app: HTTPServer, pair, data: bytes):
    """Feed ``data`` to one connection and return (connection, reply bytes)."""
    server_sock, client_sock = pair
    client_sock.sendall(data)
    client_sock.shutdown(socket.SHUT_WR)

    conn = Connection(socket=server_sock, address=("local", 0))
    app._process_connection(conn)

    chunks = []
    while True:
        chunk = client_sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return conn, b"".join(chunks)


class TestProcessConnection:

    def test_nothing_sent_gets_no_response(self, app, pair):
        conn, reply = exchange(app, pair, b"")

        assert reply == b""
        assert conn.state == ConnectionState.CLOSED

    def test_one_request_one_response(self, app, pair):
        conn, reply = exchange(app, pair, b"GET /echo/abc HTTP/1.1\r\nHost: x\r\n\r\n")

        assert reply == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )
        assert conn.state == ConnectionState.CLOSED

    def test_post_body_is_read(self, app, pair, files_dir, sample_post_request):
        _, reply = exchange(app, pair, sample_post_request)

        assert reply == b"HTTP/1.1 201 Created\r\n\r\n"
        assert (files_dir / "a.txt").read_bytes() == b"hello"

    def test_huge_content_length_keeps_what_arrived(self, app, pair, files_dir):
        _, reply = exchange(
            app, pair,
            b"POST /files/a.txt HTTP/1.1\r\nContent-Length: 100000000000\r\n\r\nhello",
        )

        assert reply == b"HTTP/1.1 201 Created\r\n\r\n"
        assert (files_dir / "a.txt").read_bytes() == b"hello"

    def test_bad_file_names_are_404(self, app, pair):
        _, reply = exchange(app, pair, b"GET /files/a\x00b HTTP/1.1\r\n\r\n")

        assert reply == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_body_ignored_outside_uploads(self, app, pair):
        _, reply = exchange(
            app, pair,
            b"POST /echo/x HTTP/1.1\r\nContent-Length: 3\r\n\r\nabc",
        )

        assert reply.startswith(b"HTTP/1.1 200 OK\r\n")
        assert reply.endswith(b"\r\n\r\nx")

    def test_handler_exception_is_500(self, app, pair, monkeypatch):
        def boom(request):
            raise RuntimeError("handler failed")

        monkeypatch.setattr(app, "handle_request", boom)

        conn, reply = exchange(app, pair, b"GET / HTTP/1.1\r\n\r\n")

        assert reply == b"HTTP/1.1 500 Internal Server Error\r\n\r\n"
        assert conn.state == ConnectionState.CLOSED

    def test_malformed_request_line_is_404(self, app, pair):
        _, reply = exchange(app, pair, b"GARBAGE\r\n\r\n")

        assert reply == b"HTTP/1.1 404 Not Found\r\n\r\n"


class TestRejection:

    def test_rejected_connection_gets_503_without_waiting(self, app, pair, monkeypatch):
        server_sock, client_sock = pair
        monkeypatch.setattr(app._thread_pool, "submit", lambda *args, **kwargs: False)

        # Client keeps its sending side open, so a draining close would wait
        conn = Connection(socket=server_sock, address=("local", 0))
        started = time.monotonic()
        app._handle_connection(conn)
        elapsed = time.monotonic() - started

        assert elapsed < DRAIN_TIMEOUT
        assert conn.state == ConnectionState.CLOSED
        with client_sock.makefile("rb") as reply:
            assert reply.read() == b"HTTP/1.1 503 Service Unavailable\r\n\r\n"

    def test_stopped_pool_rejects_with_503(self, app, pair):
        server_sock, client_sock = pair
        conn = Connection(socket=server_sock, address=("local", 0))

        app._handle_connection(conn)       # Pool never started

        with client_sock.makefile("rb") as reply:
            assert reply.read() == b"HTTP/1.1 503 Service Unavailable\r\n\r\n"


class TestConnection:

    def test_close_without_drain_returns_immediately(self, pair):
        server_sock, _ = pair
        conn = Connection(socket=server_sock, address=("local", 0))

        started = time.monotonic()
        conn.close(drain=False)

        assert time.monotonic() - started < DRAIN_TIMEOUT
        assert conn.state == ConnectionState.CLOSED

    def test_close_is_idempotent(self, pair):
        server_sock, _ = pair
        conn = Connection(socket=server_sock, address=("local", 0))

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_send_after_peer_gone(self, pair):
        server_sock, client_sock = pair
        client_sock.close()
        conn = Connection(socket=server_sock, address=("local", 0))

        with conn:
            # The first send can succeed into the buffer; a later one can't
            sent = conn.send_response(ok().to_bytes()) and conn.send_response(b"x" * 1_000_000)

        assert sent is False
        assert conn.state == ConnectionState.CLOSED
