"""
=============================================================================
STATIC SERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on 0.0.0.0:4000
    python -m staticserver

    # Custom port and directory
    python -m staticserver --port 8000 --root ./public

    # Refuse paths that escape the served directory
    python -m staticserver --confine

Every option falls back to the matching STATIC_* environment variable
(see ServerConfig.from_env), then to the built-in default.

=============================================================================
"""

import argparse
import sys
from typing import Optional

from . import __version__
from .server import HTTPServer
from .config import ServerConfig, LOG_LEVELS


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Build the argument parser, with defaults taken from `defaults`."""
    parser = argparse.ArgumentParser(
        prog="staticserver",
        description="Minimal static file HTTP server built on raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m staticserver                         # Serve . on port 4000
  python -m staticserver --port 8000             # Custom port
  python -m staticserver --root ./public         # Serve another directory
  python -m staticserver --host 127.0.0.1        # Localhost only
        """
    )

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--root", "-r",
        default=defaults.root_dir,
        help=f"Directory to serve files from (default: {defaults.root_dir})"
    )

    parser.add_argument(
        "--confine",
        action="store_true",
        default=defaults.confine_to_root,
        help="Treat paths that resolve outside the root directory as not found"
    )

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"staticserver {__version__}"
    )

    return parser


def config_from_args(argv: Optional[list[str]] = None) -> ServerConfig:
    """Translate command-line arguments (and environment) into a ServerConfig."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    return ServerConfig(
        host=args.host,
        port=args.port,
        root_dir=args.root,
        index_file=defaults.index_file,
        buffer_size=defaults.buffer_size,
        confine_to_root=args.confine,
        log_level=args.log_level,
    )


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entry point."""
    try:
        config = config_from_args(argv)
        server = HTTPServer(config)
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
