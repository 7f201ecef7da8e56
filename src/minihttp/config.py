"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All server settings in one frozen dataclass, built once at startup.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m minihttp --directory /tmp/files                 │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_DIRECTORY=/tmp/files python -m minihttp              │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY FROZEN?
=============================================================================

Every worker thread reads the config (the files directory in particular)
and none of them may change it. A frozen dataclass makes that a property of
the type instead of a convention: assignment raises FrozenInstanceError.
To run with different settings, build a new config:

    config = dataclasses.replace(config, port=0)

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


# Workers kept alive even when idle, unless the cap is lower
DEFAULT_MIN_WORKERS = 4


@dataclass(frozen=True)
class ServerConfig:
    """
    HTTP server configuration.

    Example:
        config = ServerConfig(port=4221, directory="/tmp/files")
        config.validate()
    """

    # =========================================================================
    # NETWORK SETTINGS
    # =========================================================================

    host: str = "127.0.0.1"

    # 0 lets the OS pick a free port (handy in tests)
    port: int = 4221

    # Pending connections the OS queues before accept()
    backlog: int = 128

    # Read buffer for the per-connection stream
    buffer_size: int = 8192

    # =========================================================================
    # CONCURRENCY SETTINGS
    # =========================================================================

    min_workers: int = DEFAULT_MIN_WORKERS

    # Upper bound on connections handled at the same time
    max_workers: int = 64

    # Connections waiting for a worker; 0 = unbounded
    queue_size: int = 0

    # =========================================================================
    # FILE SERVING
    # =========================================================================

    # Root for /files/...; None disables those endpoints (they answer 500)
    directory: Optional[str] = None

    # =========================================================================
    # LOGGING
    # =========================================================================

    # DEBUG, INFO, WARNING, ERROR
    log_level: str = "INFO"

    @property
    def files_root(self) -> Optional[Path]:
        """Resolved files directory, or None when file serving is off."""
        if self.directory is None:
            return None
        return Path(self.directory).resolve()

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Build a config from environment variables.

            HTTP_HOST       - Bind address (default: 127.0.0.1)
            HTTP_PORT       - Port (default: 4221)
            HTTP_WORKERS    - Max worker threads (default: 64)
            HTTP_DIRECTORY  - Files directory (default: none)
            HTTP_LOG_LEVEL  - Logging level (default: INFO)
        """
        workers = int(os.getenv("HTTP_WORKERS", "64"))

        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            min_workers=min(DEFAULT_MIN_WORKERS, workers),
            max_workers=workers,
            directory=os.getenv("HTTP_DIRECTORY"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Fail fast on bad settings.

        Raises:
            ValueError: With a message naming the offending setting
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 0:
            raise ValueError("queue_size must be >= 0")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.directory is not None and not os.path.isdir(self.directory):
            raise ValueError(
                f"Directory does not exist or is not a directory: {self.directory}"
            )
