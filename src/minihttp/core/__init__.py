"""
=============================================================================
CORE MODULE - Networking and Concurrency
=============================================================================

The transport half of the server: sockets and threads, no HTTP knowledge
beyond "hand the stream to a parser".

    socket_server.py   Listening socket + accept loop
    connection.py      One client socket, its stream and lifecycle state
    thread_pool.py     Workers that run one connection each

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer ──accept()──► Connection ──submit()──► ThreadPool    │
    │                                                          │           │
    │                                                          ▼           │
    │                                          HTTPServer._process_connection
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool


__all__ = [
    "SocketServer",     # Listening socket - accepts connections
    "Connection",       # Client socket wrapper - stream + lifecycle
    "ConnectionState",  # Enum for connection lifecycle states
    "ThreadPool",       # Worker threads, one connection per task
]
