"""
=============================================================================
HTTP SERVER - Connection Supervisor
=============================================================================

Ties the pieces together: the socket server accepts, the thread pool
schedules, and _process_connection() takes one connection from accept to
close.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Client ──TCP──► SocketServer.accept()                             │
    │                         │                                            │
    │                         ▼                                            │
    │                   ThreadPool.submit(_process_connection, conn)      │
    │                         │                                            │
    │   ┌─────────────────────┼────────────── worker thread ───────────┐  │
    │   │                     ▼                                         │  │
    │   │   1. parse header ── nothing received? ──► close, no reply   │  │
    │   │                     │                                         │  │
    │   │   2. POST /files/...? read Content-Length body bytes         │  │
    │   │                     │                                         │  │
    │   │   3. Router.handle(request) ──► HTTPResponse                 │  │
    │   │                     │           (any exception → 500)         │  │
    │   │   4. send serialize(response)                                │  │
    │   │                     │                                         │  │
    │   │   5. close (always, via the Connection context manager)      │  │
    │   └───────────────────────────────────────────────────────────────┘  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Steps run strictly in that order and exactly one response is written for
every connection that sent at least one line.

=============================================================================
SHARED STATE
=============================================================================

Workers share only read-only objects: the frozen ServerConfig, the route
table and the StaticFileStore (which holds nothing but its root path).
Nothing needs a lock.

=============================================================================
"""

import logging
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool
from .handlers import StaticFileStore, expects_body, register_routes
from .http import (
    HTTPRequest, RequestParser,
    HTTPResponse, Router,
    internal_error, service_unavailable,
)


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("minihttp.access")


class HTTPServer:
    """
    Example:
        server = HTTPServer(ServerConfig(port=4221, directory="/tmp/files"))
        server.run()      # blocks; Ctrl+C to stop

    Or in the background:
        server.start()
        host, port = server.address
        ...
        server.stop()

    Raises:
        ValueError: From ServerConfig.validate() on bad settings
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser()

        files_root = self.config.files_root
        self._store = StaticFileStore(files_root) if files_root else None

        self._router = register_routes(Router(), self._store)

        self._running = False
        self._thread: Optional[threading.Thread] = None

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); meaningful once the server is listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """Serve until shutdown (SIGINT/SIGTERM or stop())."""
        self._running = True
        self._setup_logging()
        self._thread_pool.start()

        if self._store:
            logger.info(f"Serving files from {self._store.root_dir}")
        else:
            logger.info("No files directory configured; /files/ endpoints disabled")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def start(self, timeout: float = 5.0):
        """
        Run the server in a daemon thread and wait until it is listening.

        Raises:
            RuntimeError: If the server isn't listening within ``timeout``
        """
        self._thread = threading.Thread(target=self.run, name="minihttp-server", daemon=True)
        self._thread.start()

        if not self._socket_server.wait_until_ready(timeout):
            self.stop()
            raise RuntimeError("Server failed to start")

    def stop(self, timeout: float = 5.0):
        """Stop a server started with start()."""
        self._socket_server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        self._thread = None

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("minihttp").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=5.0)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called on the accept thread: hand the connection to a worker."""
        try:
            submitted = self._thread_pool.submit(self._process_connection, args=(conn,))
        except RuntimeError as e:
            logger.warning(f"[{conn.id}] Rejecting connection: {e}")
            submitted = False

        if not submitted:
            logger.warning(
                f"[{conn.id}] Thread pool full ({self._thread_pool.busy_workers} busy), "
                f"rejecting connection"
            )
            try:
                conn.send_response(service_unavailable().to_bytes())
            finally:
                # No drain: this runs on the accept thread
                conn.close(drain=False)

    def _process_connection(self, conn: Connection):
        """Take one connection from accept to close, on a worker thread."""
        with conn:
            try:
                request = conn.read_header(self._parser)
                if request is None:
                    logger.debug(f"[{conn.id}] Connection closed before any data")
                    return

                if expects_body(request):
                    request = conn.read_body(self._parser, request)

                conn.begin_routing()
                response = self.handle_request(request)

            except Exception as e:
                logger.exception(f"[{conn.id}] Error handling request: {e}")
                response = internal_error()

            conn.send_response(response.to_bytes())

    def handle_request(self, request: HTTPRequest) -> HTTPResponse:
        """Route ``request`` and log the outcome."""
        response = self._router.handle(request)

        access_logger.info(
            f"{request.method or '-'} {request.path or '-'} "
            f"{int(response.status)} {len(response.body)}"
        )
        return response


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """Factory function for creating a server."""
    return HTTPServer(config)
