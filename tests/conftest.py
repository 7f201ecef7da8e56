"""
pytest configuration and fixtures.
"""

import socket
from typing import Generator

import pytest

from minihttp import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /user-agent HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: test-client/1.0\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample file upload."""
    return (
        b"POST /files/a.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        b"Content-Length: 5\r\n"
        b"\r\n"
        b"hello"
    )


@pytest.fixture
def files_dir(tmp_path):
    """Empty directory to serve files from."""
    directory = tmp_path / "files"
    directory.mkdir()
    return directory


def make_server(directory=None) -> HTTPServer:
    return HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        min_workers=2,
        max_workers=8,
        directory=str(directory) if directory is not None else None,
        log_level="WARNING",
    ))


@pytest.fixture
def server(files_dir) -> Generator[HTTPServer, None, None]:
    """Running server with a files directory."""
    srv = make_server(files_dir)
    srv.start()
    yield srv
    srv.stop()


@pytest.fixture
def server_without_directory() -> Generator[HTTPServer, None, None]:
    """Running server with file endpoints disabled."""
    srv = make_server()
    srv.start()
    yield srv
    srv.stop()


def send_raw(address, data: bytes, timeout: float = 5.0) -> bytes:
    """Send raw bytes, half-close, and read until the server closes."""
    with socket.create_connection(address, timeout=timeout) as sock:
        sock.sendall(data)
        sock.shutdown(socket.SHUT_WR)

        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)

    return b"".join(chunks)


def split_response(raw: bytes):
    """
    Split a raw response into (status_line, header_lines, body).
    """
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    return lines[0], lines[1:], body


def header_value(header_lines, name: str):
    for line in header_lines:
        key, _, value = line.partition(":")
        if key.strip().lower() == name.lower():
            return value.strip()
    return None


class RawClient:
    """Speaks raw bytes to a running server."""

    def __init__(self, server: HTTPServer):
        self.address = server.address

    def send(self, data: bytes) -> bytes:
        return send_raw(self.address, data)

    def request(self, data: bytes):
        """Send ``data`` and return (status_line, header_lines, body)."""
        return split_response(self.send(data))


@pytest.fixture
def client(server) -> RawClient:
    return RawClient(server)


@pytest.fixture
def client_without_directory(server_without_directory) -> RawClient:
    return RawClient(server_without_directory)


@pytest.fixture
def find_header():
    return header_value
