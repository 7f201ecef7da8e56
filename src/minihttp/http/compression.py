"""
=============================================================================
GZIP CONTENT ENCODING
=============================================================================

Compresses response bodies for clients that ask for it.

=============================================================================
HOW NEGOTIATION WORKS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    GZIP NEGOTIATION                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Client                                Server                       │
    │     │                                      │                         │
    │     │  GET /echo/abc HTTP/1.1              │                         │
    │     │  Accept-Encoding: gzip, br           │                         │
    │     │ ────────────────────────────────────►│                         │
    │     │                                      │  "gzip" in header?      │
    │     │                                      │  Yes → gzip.compress()  │
    │     │  HTTP/1.1 200 OK                     │                         │
    │     │  Content-Type: text/plain            │                         │
    │     │  Content-Encoding: gzip              │                         │
    │     │  Content-Length: 23   ◄── compressed size                     │
    │     │ ◄────────────────────────────────────│                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Negotiation is a case-insensitive substring check on every Accept-Encoding
line. There is no q-value parsing ("gzip;q=0" still counts) and gzip is the
only encoding offered.

The one rule that matters: Content-Length is computed AFTER compression.
Advertising the uncompressed size makes clients hang waiting for bytes that
never come, or truncate the gzip stream.

=============================================================================
"""

import gzip

from .request import HTTPRequest
from .response import HTTPResponse


GZIP = "gzip"


def accepts_gzip(request: HTTPRequest) -> bool:
    """True if any Accept-Encoding header mentions gzip."""
    return any(GZIP in value.lower() for value in request.get_header_values("Accept-Encoding"))


def compress(data: bytes, level: int = 9) -> bytes:
    return gzip.compress(data, compresslevel=level)


def encode_body(request: HTTPRequest, response: HTTPResponse, body: bytes) -> HTTPResponse:
    """
    Write ``body`` into ``response``, gzip-compressed if the client accepts it.

    Adds ``Content-Encoding: gzip`` when compressing, then ``Content-Length``
    for the bytes actually written.
    """
    if accepts_gzip(request):
        body = compress(body)
        response.add_header("Content-Encoding", GZIP)

    return (response
        .add_header("Content-Length", str(len(body)))
        .write(body))
