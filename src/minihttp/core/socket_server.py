"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop. Every accepted socket is
wrapped in a Connection and handed to a callback; what happens to it next
is the callback's business.

=============================================================================
SOCKET LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   socket() ──► setsockopt(SO_REUSEADDR) ──► bind() ──► listen()     │
    │                                                           │          │
    │                                                           ▼          │
    │                         ┌───────────────────────► accept() ───┐     │
    │                         │                     (1s poll so     │     │
    │                         │                      shutdown()     │     │
    │                         │                      is noticed)    ▼     │
    │                         └──────────────── connection_handler(conn)  │
    │                                                                      │
    │   shutdown() ──► loop exits ──► close()                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

SO_REUSEADDR lets a restarted server bind immediately instead of waiting
out TIME_WAIT on the old port.

The 1 second timeout applies to the LISTENING socket only. Accepted client
sockets are fully blocking.

=============================================================================
SIGNALS
=============================================================================

SIGINT / SIGTERM trigger a graceful shutdown, but Python only allows
installing signal handlers from the main thread. When the server runs in
a background thread (tests, embedding) signals are left alone and the
owner calls shutdown() instead.

=============================================================================
"""

import logging
import signal
import socket
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


ConnectionHandler = Callable[[Connection], None]

# How often the accept loop wakes up to check for shutdown()
ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Example:
        listener = SocketServer(ServerConfig(port=4221))
        listener.start(lambda conn: ...)    # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._listener: Optional[socket.socket] = None
        self._serving = threading.Event()
        self._ready = threading.Event()     # Set while listening
        self._bound: Optional[Tuple[str, int]] = None

    @property
    def address(self) -> Tuple[str, int]:
        """
        The (host, port) actually bound. Differs from the config when
        port 0 was requested.
        """
        return self._bound or (self.config.host, self.config.port)

    # =========================================================================
    # SERVING
    # =========================================================================

    def start(self, handler: ConnectionHandler):
        """
        Bind, listen and accept until shutdown().

        Raises:
            OSError: If the address can't be bound
        """
        self._listener = self._listen()
        self._bound = self._listener.getsockname()[:2]
        self._serving.set()

        logger.info(f"Server listening on {self._bound[0]}:{self._bound[1]}")
        self._ready.set()

        try:
            with self._shutdown_on_signals():
                self._serve(handler)
        finally:
            self._close_listener()

    def _listen(self) -> socket.socket:
        host, port = self.config.host, self.config.port
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.settimeout(ACCEPT_POLL_INTERVAL)

        try:
            listener.bind((host, port))
            listener.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Cannot listen on {host}:{port}: {e}")
            listener.close()
            raise

        return listener

    def _serve(self, handler: ConnectionHandler):
        while self._serving.is_set():
            try:
                client, peer = self._listener.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._serving.is_set():
                    logger.error(f"accept() failed: {e}")
                return

            logger.debug(f"Accepted connection from {peer[0]}:{peer[1]}")
            handler(Connection(socket=client, address=peer, buffer_size=self.config.buffer_size))

    def shutdown(self):
        """Stop accepting. Callable from any thread or a signal handler."""
        if self._serving.is_set():
            logger.info("Stopping listener...")
        self._serving.clear()

    def _close_listener(self):
        self._serving.clear()
        self._ready.clear()

        if self._listener is not None:
            try:
                self._listener.close()
            except OSError:
                pass
            self._listener = None

        logger.info("Listener closed")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. False on timeout."""
        return self._ready.wait(timeout)

    # =========================================================================
    # SIGNALS
    # =========================================================================

    @contextmanager
    def _shutdown_on_signals(self) -> Iterator[None]:
        """Route SIGINT/SIGTERM to shutdown() for the duration of the block."""
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        def on_signal(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, shutting down")
            self.shutdown()

        previous = {sig: signal.signal(sig, on_signal) for sig in (signal.SIGINT, signal.SIGTERM)}
        try:
            yield
        finally:
            for sig, old_handler in previous.items():
                signal.signal(sig, old_handler)
