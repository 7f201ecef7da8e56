"""
=============================================================================
HTTP PROTOCOL MODULE
=============================================================================

The protocol half of the server: everything between "bytes arrived" and
"bytes to send", with no sockets involved.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   stream ──► RequestParser ──► HTTPRequest ──► Router ──► handler   │
    │                                                              │       │
    │   bytes  ◄── serialize() ◄──── HTTPResponse ◄────────────────┘       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    request.py       HTTPRequest, RequestParser (header pass + body pass)
    response.py      HTTPResponse, serialize(), status helpers
    compression.py   gzip negotiation and encoding
    router.py        Router, Route, RouteMatch
    status_codes.py  HTTPStatus

=============================================================================
"""

from .request import HTTPRequest, RequestParser, parse_header, read_body
from .response import (
    HTTPResponse,
    serialize,
    ok,                  # 200 OK
    created,             # 201 Created
    not_found,           # 404 Not Found
    method_not_allowed,  # 405 Method Not Allowed
    internal_error,      # 500 Internal Server Error
    service_unavailable, # 503 Service Unavailable
)
from .compression import accepts_gzip, compress, encode_body
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus

__all__ = [
    # Request
    "HTTPRequest",
    "RequestParser",
    "parse_header",
    "read_body",

    # Response
    "HTTPResponse",
    "serialize",
    "ok",
    "created",
    "not_found",
    "method_not_allowed",
    "internal_error",
    "service_unavailable",

    # Compression
    "accepts_gzip",
    "compress",
    "encode_body",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Status codes
    "HTTPStatus",
]
