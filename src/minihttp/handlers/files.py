"""
=============================================================================
FILE ENDPOINTS
=============================================================================

    GET  /files/{name}   → 200 + file bytes (application/octet-stream)
                           404 if the file isn't there
    POST /files/{name}   → 201, body written to the file
                           500 if the write fails or the name is invalid

Both answer 500 without touching the filesystem when the server was
started without a files directory.

=============================================================================
"""

import logging
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok, created, not_found, internal_error
from .static import StaticFileStore


logger = logging.getLogger(__name__)


FILES_PREFIX = "/files/"
OCTET_STREAM = "application/octet-stream"


def expects_body(request: HTTPRequest) -> bool:
    """Only file uploads have their body read off the connection."""
    return request.method == "POST" and request.path.startswith(FILES_PREFIX)


class FileHandler:
    """
    GET/POST handlers for ``/files/*name``.

    ``store`` is None when no directory is configured.
    """

    def __init__(self, store: Optional[StaticFileStore]):
        self.store = store

    def _filename(self, request: HTTPRequest) -> str:
        return request.path_params.get("name", request.path[len(FILES_PREFIX):])

    def get(self, request: HTTPRequest) -> HTTPResponse:
        if self.store is None:
            return internal_error()

        content = self.store.read(self._filename(request))
        if content is None:
            return not_found()

        return (ok()
            .add_header("Content-Type", OCTET_STREAM)
            .add_header("Content-Length", str(len(content)))
            .write(content))

    def post(self, request: HTTPRequest) -> HTTPResponse:
        if self.store is None:
            return internal_error()

        name = self._filename(request)
        try:
            self.store.write(name, request.body)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to write {name!r}: {e}")
            return internal_error()

        return created()
