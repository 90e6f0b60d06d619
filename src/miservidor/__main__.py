"""
=============================================================================
COMMAND LINE ENTRY POINT
=============================================================================

    python -m miservidor                        # ./www on 127.0.0.1:9090
    python -m miservidor --port 8080 --www site
    python -m miservidor --log-level DEBUG      # log every exchange
    miservidor --no-log-file                    # console logging only

Flags override MISERVIDOR_* environment variables, which override the
built-in defaults (see config.py).

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .handlers import StatusPageError
from .log import configure_logging
from .server import FileServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="miservidor",
        description="Static file server with content negotiation and HTML form templating",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m miservidor                      # Run with defaults
  python -m miservidor --port 3000          # Custom port
  python -m miservidor --host 0.0.0.0       # Listen on all interfaces
  python -m miservidor --www ./public       # Serve another directory
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=defaults.timeout,
        help=f"Idle timeout in seconds (default: {defaults.timeout})",
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT AND WORKERS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--www", "-w",
        default=defaults.www_root,
        help=f"Directory to serve (default: {defaults.www_root})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=defaults.max_workers,
        help=f"Maximum worker threads (default: {defaults.max_workers})",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level,
        help=f"Logging level (default: {defaults.log_level})",
    )
    parser.add_argument(
        "--log-file",
        default=defaults.log_file,
        help=f"JSON log file (default: {defaults.log_file})",
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Log to the console only",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"MiServidor {__version__}",
    )

    return parser


def config_from_args(argv: Optional[Sequence[str]] = None) -> ServerConfig:
    """Translate CLI arguments (on top of the environment) into a ServerConfig."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    return ServerConfig(
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        www_root=args.www,
        min_workers=min(defaults.min_workers, args.workers),
        max_workers=args.workers,
        log_level=args.log_level,
        log_file=None if args.no_log_file else args.log_file,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        config = config_from_args(argv)
        config.validate()
        logger = configure_logging(config)
        server = FileServer(config, logger=logger)
        server.run()
    except (ValueError, StatusPageError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
