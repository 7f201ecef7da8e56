"""
=============================================================================
CONNECTION HANDLING
=============================================================================

Wraps one accepted client socket and tracks where it is in its lifecycle.

=============================================================================
CONNECTION LIFECYCLE
=============================================================================

One request per connection, no keep-alive:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   ACCEPTED ──► PARSING_HEADER ──► READING_BODY ──► ROUTING          │
    │                     │               (POST /files/...   │             │
    │                     │                only)             ▼             │
    │                     │                          WRITING_RESPONSE      │
    │            nothing received                            │             │
    │                     │                                  ▼             │
    │                     └──────────────────────────────► CLOSED          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every path ends in CLOSED. The only path that sends nothing is the client
closing before a single line arrived.

=============================================================================
READING
=============================================================================

The socket is wrapped in a buffered binary reader (socket.makefile("rb")).
The header pass uses readline(), the body pass read(n), and because both go
through the same buffer, body bytes that arrived together with the headers
aren't lost.

There are no read timeouts: a client that stops sending holds its worker
until it disconnects.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional
import uuid

from ..http.request import HTTPRequest, RequestParser


logger = logging.getLogger(__name__)


# Longest close() waits for the client to stop sending
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    ACCEPTED = "accepted"              # Just accepted, nothing read yet
    PARSING_HEADER = "parsing_header"  # Reading request line + headers
    READING_BODY = "reading_body"      # Reading Content-Length bytes
    ROUTING = "routing"                # Handler is producing the response
    WRITING_RESPONSE = "writing_response"  # Sending response bytes
    CLOSED = "closed"                  # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Use as a context manager so the socket is released on every path:

        with Connection(sock, addr) as conn:
            request = conn.read_header(parser)
            ...
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # Blocking, no timeout
        self.socket.settimeout(None)
        self._reader = self.socket.makefile("rb", buffering=self.buffer_size)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def age(self) -> float:
        """Seconds since accept."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_header(self, parser: RequestParser) -> Optional[HTTPRequest]:
        """Run the header pass. None means the client sent nothing."""
        self.state = ConnectionState.PARSING_HEADER
        try:
            return parser.parse_header(self._reader)
        except (ConnectionResetError, BrokenPipeError):
            logger.debug(f"[{self.id}] Reset while reading header")
            return None

    def read_body(self, parser: RequestParser, request: HTTPRequest) -> HTTPRequest:
        self.state = ConnectionState.READING_BODY
        return parser.read_body(self._reader, request)

    def begin_routing(self):
        self.state = ConnectionState.ROUTING

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the serialized response.

        Returns False (after logging) if the client is gone.
        """
        self.state = ConnectionState.WRITING_RESPONSE

        try:
            self.socket.sendall(data)
            return True
        except (ConnectionResetError, BrokenPipeError, OSError) as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self, drain: bool = True):
        """
        Gracefully close the connection. Safe to call more than once.

        Half-close first so the client sees EOF after the response, then
        drain whatever it still sends (e.g. an unread request body) so the
        kernel doesn't answer with RST and clobber the response.

        ``drain=False`` skips the drain, which can take up to
        DRAIN_TIMEOUT; the accept thread uses it when turning a client away.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        if drain:
            try:
                self.socket.settimeout(DRAIN_TIMEOUT)
                while self.socket.recv(1024):
                    pass
            except OSError:
                pass  # socket.timeout is an OSError

        try:
            self._reader.close()
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
