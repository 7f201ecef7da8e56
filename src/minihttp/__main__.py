"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    python -m minihttp [OPTIONS]

=============================================================================
USAGE EXAMPLES
=============================================================================

    # Defaults: 127.0.0.1:4221, file endpoints disabled
    python -m minihttp

    # Serve and accept uploads under /tmp/files
    python -m minihttp --directory /tmp/files

    # Listen on all interfaces with verbose logging
    python -m minihttp --host 0.0.0.0 --log-level DEBUG

=============================================================================
"""

import argparse
import sys

from . import __version__
from .server import HTTPServer
from .config import DEFAULT_MIN_WORKERS, ServerConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Small HTTP/1.1 server built from scratch in Python",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Directory served and written by /files/ (default: disabled)"
    )

    parser.add_argument(
        "--host", "-H",
        default="127.0.0.1",
        help="Address to listen on (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=4221,
        help="Port to listen on (default: 4221)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=64,
        help="Maximum worker threads (default: 64)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Minimum level for log output (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        host=args.host,
        port=args.port,
        min_workers=min(DEFAULT_MIN_WORKERS, args.workers),
        max_workers=args.workers,
        directory=args.directory,
        log_level=args.log_level,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        server = HTTPServer(config_from_args(args))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
