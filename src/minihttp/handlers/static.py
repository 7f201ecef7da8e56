"""
=============================================================================
STATIC FILE STORE
=============================================================================

Whole-file reads and writes under a single root directory. This is the
only module that touches the filesystem on behalf of a request.

=============================================================================
PATH RESOLUTION
=============================================================================

    root_dir = /srv/files

    name                     resolved                      allowed?
    ───────────────────────  ────────────────────────────  ────────
    "a.txt"                  /srv/files/a.txt              yes
    "sub/b.bin"              /srv/files/sub/b.bin          yes
    "../../etc/passwd"       /etc/passwd                   NO
    "/etc/passwd"            /etc/passwd                   NO

Names are normalized lexically ("." and ".." collapsed, symlinks left
alone) and must stay under the root. A name that escapes reads as missing
and fails to write. A symlink that lives under the root is served like
any other entry, wherever it points.

=============================================================================
FAILURE MODES
=============================================================================

    read()   never raises: missing, not a regular file, unreadable,
             outside the root or not a valid filename at all (NUL
             byte, too long) all come back as None.

    write()  raises OSError (PermissionError for an escaping name). It
             creates or truncates the target but never creates parent
             directories.

=============================================================================
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union


logger = logging.getLogger(__name__)


class StaticFileStore:
    """
    Reads and writes files beneath ``root_dir``.

    Example:
        store = StaticFileStore("/srv/files")
        store.write("a.txt", b"hello")
        store.read("a.txt")        # b"hello"
        store.read("missing.txt")  # None
    """

    def __init__(self, root_dir: Union[str, Path]):
        self.root_dir = Path(root_dir).resolve()

        if not self.root_dir.is_dir():
            raise ValueError(f"Files directory does not exist: {root_dir}")

    def resolve(self, name: str) -> Path:
        """
        Absolute path for ``name`` under the root.

        Raises PermissionError if the normalized path lands outside the root.
        """
        full_path = Path(os.path.normpath(self.root_dir / name))

        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            raise PermissionError(f"Path escapes files directory: {name}")

        return full_path

    def read(self, name: str) -> Optional[bytes]:
        """Full contents of regular file ``name``, or None."""
        try:
            path = self.resolve(name)
            if not path.is_file():
                return None
            return path.read_bytes()
        except PermissionError as e:
            logger.warning(f"Refused read: {e}")
        except (OSError, ValueError) as e:
            logger.warning(f"Error reading {name!r}: {e}")
        return None

    def write(self, name: str, data: bytes) -> Path:
        """Create or truncate ``name`` and write ``data`` to it."""
        path = self.resolve(name)
        path.write_bytes(data)
        logger.debug(f"Wrote {len(data)} bytes to {path}")
        return path
