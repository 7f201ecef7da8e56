"""
=============================================================================
HTTP STATUS CODES (RFC 7231)
=============================================================================

The status codes this server can answer with, plus their reason phrases.

=============================================================================
STATUS CODES IN USE
=============================================================================

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  Code  │ When we send it                                           │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  200   │ /, /index.html, /echo/..., /user-agent, GET /files/...   │
    │  201   │ POST /files/... wrote the file                           │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  404   │ Unknown path, or GET of a file that isn't there          │
    │  405   │ /files/... with a method other than GET or POST          │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  500   │ No files directory configured, write failure, or any     │
    │        │ unexpected error while handling the request              │
    │  503   │ Worker pool refused the connection (bounded queue only)  │
    └────────┴───────────────────────────────────────────────────────────┘

The status line on the wire is "HTTP/1.1 <code> <phrase>", e.g.

    HTTP/1.1 404 Not Found

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes as an IntEnum.

    IntEnum members compare equal to plain ints, so both of these work:

        response.status == HTTPStatus.NOT_FOUND
        response.status == 404
    """

    OK = 200                            # Standard success response
    CREATED = 201                       # New resource was created (POST)

    NOT_FOUND = 404                     # Resource doesn't exist
    METHOD_NOT_ALLOWED = 405            # HTTP method not supported for resource

    INTERNAL_SERVER_ERROR = 500         # Unexpected server error (catch-all)
    SERVICE_UNAVAILABLE = 503           # Server overloaded

    @property
    def phrase(self) -> str:
        """The standard reason phrase, e.g. "Not Found"."""
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
}
