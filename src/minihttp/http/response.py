"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Accumulates a response (status, header lines, body) and serializes it to
the bytes that go on the wire.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP RESPONSE STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                       ◄── status line        │
    │    Content-Type: text/plain\r\n              ◄── header lines       │
    │    Content-Length: 3\r\n                                             │
    │    \r\n                                      ◄── blank line         │
    │    abc                                       ◄── body               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Serialization is exactly that order and nothing more. Unlike a framework,
serialize() adds no Content-Length, Date or Server header on its own: the
handler that fills the response decides which headers it carries. A bare

    HTTPResponse(HTTPStatus.NOT_FOUND)

goes out as "HTTP/1.1 404 Not Found\r\n\r\n".

=============================================================================
BUILDER STYLE
=============================================================================

The mutators return ``self`` so a handler can write a response in one
expression:

    return (ok()
        .add_header("Content-Type", "application/octet-stream")
        .add_header("Content-Length", str(len(data)))
        .write(data))

=============================================================================
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from .status_codes import HTTPStatus


CRLF = "\r\n"


@dataclass
class HTTPResponse:
    """
    Mutable response accumulator.

    Created once per request, filled by exactly one handler, serialized
    once. Header lines keep insertion order and may repeat.
    """

    status: HTTPStatus = HTTPStatus.OK
    header_lines: List[str] = field(default_factory=list)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        # "HTTP/1.1 404 Not Found"
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def set_status(self, status: HTTPStatus) -> "HTTPResponse":
        self.status = status
        return self

    def add_header(self, name: str, value: str) -> "HTTPResponse":
        """Append a "Name: value" header line."""
        self.header_lines.append(f"{name}: {value}")
        return self

    def get_header(self, name: str) -> Optional[str]:
        """First value of header ``name`` (case-insensitive), or None."""
        wanted = name.lower()
        for line in self.header_lines:
            key, _, value = line.partition(":")
            if key.strip().lower() == wanted:
                return value.strip()
        return None

    def write(self, data: Union[str, bytes]) -> "HTTPResponse":
        """Append to the body. Text is encoded as UTF-8."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.body += data
        return self

    def to_bytes(self) -> bytes:
        return serialize(self)


def serialize(response: HTTPResponse) -> bytes:
    """
    Status line, each header line, a blank line, then the body.

    Every line is CRLF-terminated; the body is appended untouched.
    """
    head = "".join(line + CRLF for line in [response.status_line, *response.header_lines])
    return (head + CRLF).encode("utf-8") + response.body


# =============================================================================
# CONVENIENCE FUNCTIONS - one per status the server sends
# =============================================================================

def ok() -> HTTPResponse:
    return HTTPResponse(HTTPStatus.OK)


def created() -> HTTPResponse:
    return HTTPResponse(HTTPStatus.CREATED)


def not_found() -> HTTPResponse:
    return HTTPResponse(HTTPStatus.NOT_FOUND)


def method_not_allowed() -> HTTPResponse:
    return HTTPResponse(HTTPStatus.METHOD_NOT_ALLOWED)


def internal_error() -> HTTPResponse:
    return HTTPResponse(HTTPStatus.INTERNAL_SERVER_ERROR)


def service_unavailable() -> HTTPResponse:
    return HTTPResponse(HTTPStatus.SERVICE_UNAVAILABLE)
