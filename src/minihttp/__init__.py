"""
=============================================================================
MINIHTTP - A Small HTTP/1.1 Server Built From Scratch
=============================================================================

A raw-socket HTTP server with a fixed set of endpoints: echo, user-agent
reflection, gzip negotiation, and file download/upload under a configured
directory.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttp)
    ├── server.py            # HTTPServer - per-connection supervisor
    ├── config.py            # ServerConfig frozen dataclass
    ├── core/                # Sockets and threads
    │   ├── socket_server.py # Listening socket + accept loop
    │   ├── connection.py    # Client connection + lifecycle state
    │   └── thread_pool.py   # Worker threads
    ├── http/                # Protocol
    │   ├── request.py       # Request parsing (header pass, body pass)
    │   ├── response.py      # Response accumulation + serialization
    │   ├── compression.py   # gzip negotiation
    │   ├── router.py        # Route table
    │   └── status_codes.py  # HTTPStatus enum
    └── handlers/            # Endpoints
        ├── endpoints.py     # /, /echo/, /user-agent
        ├── files.py         # GET/POST /files/
        └── static.py        # Filesystem access under the root

=============================================================================
ENDPOINTS
=============================================================================

    ┌────────────────────┬────────┬──────────────────────────────────────┐
    │ Path               │ Method │ Response                             │
    ├────────────────────┼────────┼──────────────────────────────────────┤
    │ / , /index.html    │ any    │ 200, empty                           │
    │ /echo/{text}       │ any    │ 200, text (gzip if accepted)         │
    │ /user-agent        │ any    │ 200, User-Agent value (gzip too)     │
    │ /files/{name}      │ GET    │ 200 file bytes / 404 / 500           │
    │ /files/{name}      │ POST   │ 201 / 500                            │
    │ /files/{name}      │ other  │ 405                                  │
    │ anything else      │ any    │ 404                                  │
    └────────────────────┴────────┴──────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=4221, directory="/tmp/files"))
    server.run()

    $ curl -v http://localhost:4221/echo/abc
    $ curl -v --data-binary "hello" http://localhost:4221/files/a.txt

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
