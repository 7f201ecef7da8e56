"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) to a handler. Two kinds of path pattern exist:

- Static paths:   /user-agent       exact match only
- Wildcard paths: /echo/*text       literal prefix, the rest is captured

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Incoming Request                                                   │
    │   DELETE /files/a.txt                                                │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  Routes, checked in registration order:                      │   │
    │   │                                                              │   │
    │   │   *    /               → root                                │   │
    │   │   *    /index.html     → root                                │   │
    │   │   *    /echo/*text     → echo                                │   │
    │   │   *    /user-agent     → user_agent                          │   │
    │   │   GET  /files/*name    → files.get      ← path matches,      │   │
    │   │   POST /files/*name    → files.post     ← method doesn't     │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   No route for DELETE, but the path is known → 405                  │
    │   Path matched nothing at all                → 404                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A route registered without a method (``*`` above) accepts every method,
including ones it arguably shouldn't: DELETE / answers 200.

Paths are matched raw: no trailing-slash normalization, no URL decoding.
"/echo/" matches "/echo/*text" with text = "".

404 and 405 responses carry no headers and no body.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found, method_not_allowed


# Type alias for handler functions
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A single registered route.

        path:       Pattern as registered, e.g. "/files/*name"
        method:     Required method, or None for any method
        handler:    Called with the request, returns the response
        name:       Optional label, used in route listings
    """

    path: str
    method: Optional[str]
    handler: Handler
    name: Optional[str] = None

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)

    def match_path(self, path: str) -> Optional[Dict[str, str]]:
        """Captured wildcard params if ``path`` fits this route, else None."""
        match = self._pattern.fullmatch(path) if self._pattern else None
        return match.groupdict() if match else None


@dataclass
class RouteMatch:
    route: Route                     # The Route that matched
    params: Dict[str, str]           # Wildcard captures


class Router:
    """
    Ordered route table.

    The first route whose path AND method fit wins. If some route's path
    fits but none of those accept the method, the answer is 405.
    """

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Route:
        route = Route(
            path=path,
            method=method.upper() if method else None,
            handler=handler,
            name=name or getattr(handler, "__name__", None),
            _pattern=self._compile_pattern(path),
        )
        self._routes.append(route)
        return route

    def _compile_pattern(self, path: str) -> re.Pattern:
        """
        "/user-agent"   → ^/user\\-agent$
        "/files/*name"  → ^/files/(?P<name>.*)$

        Only a trailing "*segment" is special; everything before it is
        matched literally.
        """
        head, star, param_name = path.rpartition("*")
        if not star or "/" in param_name:
            return re.compile(re.escape(path), re.DOTALL)

        param_name = param_name or "wildcard"
        return re.compile(f"{re.escape(head)}(?P<{param_name}>.*)", re.DOTALL)

    # =========================================================================
    # MATCHING
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        method = method.upper()

        for route in self._routes:
            if route.method and route.method != method:
                continue

            params = route.match_path(path)
            if params is not None:
                return RouteMatch(route=route, params=params)

        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """
        Methods registered for ``path``.

        Empty when nothing matches the path. A method-less route matches
        everything, but match() would already have found it, so only
        method-specific routes contribute here.
        """
        methods = set()
        for route in self._routes:
            if route.method and route.match_path(path) is not None:
                methods.add(route.method)
        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Dispatch to the matching handler, or answer 404 / 405."""
        match = self.match(request.method, request.path)

        if match:
            return match.route.handler(replace(request, path_params=match.params))

        if self.get_allowed_methods(request.path):
            return method_not_allowed()

        return not_found()
