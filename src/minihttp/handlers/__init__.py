"""
=============================================================================
HANDLERS MODULE
=============================================================================

The five request handlers and the route table that reaches them.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Priority │ Path            │ Method │ Handler                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │    1     │ / , /index.html │ any    │ endpoints.root                │
    │    2     │ /echo/*text     │ any    │ endpoints.echo                │
    │    3     │ /user-agent     │ any    │ endpoints.user_agent          │
    │    4     │ /files/*name    │ GET    │ FileHandler.get               │
    │          │ /files/*name    │ POST   │ FileHandler.post              │
    │          │ /files/*name    │ other  │ 405 (from the router)         │
    │    5     │ anything else   │ any    │ 404 (from the router)         │
    └─────────────────────────────────────────────────────────────────────┘

Function handlers are stateless. FileHandler is a class because it holds
the StaticFileStore (or None when file serving is disabled).

=============================================================================
"""

from typing import Optional

from ..http.router import Router
from .endpoints import root, echo, user_agent, text_response
from .files import FileHandler, expects_body, FILES_PREFIX
from .static import StaticFileStore


def register_routes(router: Router, store: Optional[StaticFileStore]) -> Router:
    """Install the built-in route table on ``router``, in priority order."""
    files = FileHandler(store)

    router.add_route("/", root)
    router.add_route("/index.html", root)
    router.add_route("/echo/*text", echo)
    router.add_route("/user-agent", user_agent)
    router.add_route(FILES_PREFIX + "*name", files.get, method="GET", name="file_get")
    router.add_route(FILES_PREFIX + "*name", files.post, method="POST", name="file_post")

    return router


__all__ = [
    "register_routes",
    "root",
    "echo",
    "user_agent",
    "text_response",
    "FileHandler",
    "expects_body",
    "FILES_PREFIX",
    "StaticFileStore",
]
