"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads an HTTP/1.1 request off a connection stream, line by line, into an
immutable HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    POST /files/a.txt HTTP/1.1\r\n                               │ │
    │  │    ─┬── ──────┬─────                                            │ │
    │  │   Method     Path   (the version token is ignored)             │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADER LINES ─────────────────────────────────────────────────┐ │
    │  │    Host: localhost:4221\r\n                                     │ │
    │  │    Content-Length: 5\r\n                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (only read for POST /files/...) ─────────────────────────┐ │
    │  │    hello                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
TWO-PASS PARSING
=============================================================================

Parsing happens in two passes over the same stream:

    1. parse_header()  reads lines until the blank line. Nothing past the
                       blank line is consumed.

    2. read_body()     reads exactly Content-Length more bytes. The server
                       only calls it for POST /files/... requests.

Header lines are kept in arrival order as raw "Name: value" strings rather
than a dict. Lookups are a case-insensitive linear scan, first match wins,
and duplicate headers survive untouched.

=============================================================================
MALFORMED INPUT
=============================================================================

    Situation                          Result
    ─────────────────────────────────  ───────────────────────────────────
    Stream closed before any line      None (no request at all)
    Request line with < 2 tokens       method = path = "" (routes to 404)
    Missing / garbage Content-Length   body length 0
    Stream ends before Content-Length  whatever bytes arrived

No HTTPParseError exists here: a malformed request is still a request.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from typing import BinaryIO, Dict, List, Optional, Tuple


# Largest single read() issued for a body; Content-Length is client input
BODY_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Frozen: the only "change" ever made to a request is attaching the body
    (see RequestParser.read_body) or the router's path parameters, and both
    produce a new object via dataclasses.replace().

        method:         Uppercased first token of the request line
        path:           Second token, trimmed, NOT URL-decoded
        header_lines:   Raw "Name: value" lines after the request line,
                        in arrival order, without line terminators
        body:           Request body, empty unless explicitly read
        path_params:    Wildcard captures injected by the router
    """

    method: str
    path: str
    header_lines: Tuple[str, ...] = ()
    body: bytes = b""
    path_params: Dict[str, str] = field(default_factory=dict, compare=False)

    def get_header(self, name: str, default: str = "") -> str:
        """
        Return the trimmed value of the first header called ``name``.

        The name comparison is case-insensitive; later duplicates are
        ignored.
        """
        wanted = name.lower()
        for line in self.header_lines:
            key, sep, value = line.partition(":")
            if sep and key.strip().lower() == wanted:
                return value.strip()
        return default

    def get_header_values(self, name: str) -> List[str]:
        """Return the values of every header called ``name``, in order."""
        wanted = name.lower()
        values = []
        for line in self.header_lines:
            key, sep, value = line.partition(":")
            if sep and key.strip().lower() == wanted:
                values.append(value.strip())
        return values

    @property
    def user_agent(self) -> str:
        return self.get_header("User-Agent")

    @property
    def content_length(self) -> int:
        """
        Declared body length, or 0 when the header is missing, unparseable
        or negative.
        """
        try:
            length = int(self.get_header("Content-Length", "0"))
        except ValueError:
            return 0
        return max(length, 0)


class RequestParser:
    """
    Reads requests from a binary, file-like stream.

    Anything with ``readline()`` and ``read(n)`` works: the buffered reader
    returned by ``socket.makefile("rb")`` in production, ``io.BytesIO`` in
    tests.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def parse_header(self, stream: BinaryIO) -> Optional[HTTPRequest]:
        """
        Read the request line and header lines, stopping at the blank line.

        Returns None when the stream closes before yielding a single line,
        which is how "client connected and went away" looks. If the stream
        ends mid-headers, the lines read so far still make a request.
        """
        lines: List[str] = []
        received_any = False

        while True:
            raw = stream.readline()
            if not raw:
                break  # EOF

            received_any = True

            # Normalize CRLF / LF / stray CR endings away
            line = raw.decode(self.encoding, errors="replace").rstrip("\r\n")
            if not line:
                break  # Blank line: end of headers

            lines.append(line)

        if not received_any:
            return None

        request_line = lines[0] if lines else ""
        method, path = self._parse_request_line(request_line)

        return HTTPRequest(
            method=method,
            path=path,
            header_lines=tuple(lines[1:]),
        )

    def _parse_request_line(self, line: str) -> Tuple[str, str]:
        # "GET /echo/abc HTTP/1.1" -> ("GET", "/echo/abc")
        parts = line.split(" ")
        if len(parts) < 2:
            return "", ""
        return parts[0].upper(), parts[1].strip()

    def read_body(self, stream: BinaryIO, request: HTTPRequest) -> HTTPRequest:
        """
        Read ``Content-Length`` bytes and return a copy of ``request`` with
        that body attached.

        Keeps reading until the full count arrives or the stream ends; a
        short body is accepted as-is.
        Reads go in chunks of at most BODY_CHUNK_SIZE, so memory use follows
        the bytes actually received rather than the declared length.
        """
        remaining = request.content_length
        chunks: List[bytes] = []

        while remaining > 0:
            chunk = stream.read(min(remaining, BODY_CHUNK_SIZE))
            if not chunk:
                break  # Client closed mid-body
            chunks.append(chunk)
            remaining -= len(chunk)

        return replace(request, body=b"".join(chunks))


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def parse_header(stream: BinaryIO) -> Optional[HTTPRequest]:
    """Parse a request head from ``stream`` with a default parser."""
    return RequestParser().parse_header(stream)


def read_body(stream: BinaryIO, request: HTTPRequest) -> bytes:
    """Read the body ``request`` declares from ``stream`` and return it."""
    return RequestParser().read_body(stream, request).body
