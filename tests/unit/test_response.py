"""
Unit tests for HTTP response building.
"""

from minihttp.http.response import (
    HTTPResponse,
    serialize,
    ok,
    created,
    not_found,
    method_not_allowed,
    internal_error,
)
from minihttp.http.status_codes import HTTPStatus


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        assert HTTPResponse(HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"

    def test_bare_response_bytes(self):
        """No headers are added behind the handler's back."""
        assert ok().to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"
        assert not_found().to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_serialize_order(self):
        response = (ok()
            .add_header("Content-Type", "text/plain")
            .add_header("Content-Length", "3")
            .write(b"abc"))

        assert serialize(response) == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_write_accumulates(self):
        response = ok().write("ab").write(b"cd")

        assert response.body == b"abcd"

    def test_duplicate_headers_kept(self):
        response = ok().add_header("X-A", "1").add_header("X-A", "2")

        assert response.header_lines == ["X-A: 1", "X-A: 2"]
        assert response.get_header("x-a") == "1"
        assert response.get_header("X-Missing") is None

    def test_set_status(self):
        response = HTTPResponse().set_status(HTTPStatus.CREATED)

        assert response.status == 201


class TestStatusHelpers:

    def test_helpers(self):
        assert created().to_bytes() == b"HTTP/1.1 201 Created\r\n\r\n"
        assert method_not_allowed().to_bytes() == b"HTTP/1.1 405 Method Not Allowed\r\n\r\n"
        assert internal_error().to_bytes() == b"HTTP/1.1 500 Internal Server Error\r\n\r\n"
