"""
=============================================================================
HTTP SERVER CLI ENTRY POINT
=============================================================================

    python -m cannedhttp <address> <port>
    cannedhttp <address> <port>

Examples:

    python -m cannedhttp 0.0.0.0 8080
    python -m cannedhttp ::1 8080 --log-level DEBUG
    python -m cannedhttp 127.0.0.1 8080 --max-sessions 64

Serves DEFAULT_ROUTES:

    /       → welcome ! available routes: /test, /foo
    /test   → Hello World
    /foo    → bar

Exit status:
    2  wrong number of arguments (argparse prints the usage to stderr)
    1  invalid address/port or the address could not be bound

Settings not given on the command line come from HTTP_* environment
variables (see ServerConfig.from_env).

=============================================================================
"""

import argparse
import ipaddress
import sys

from . import __version__
from .server import HTTPServer
from .config import ServerConfig, DEFAULT_ROUTES, LOG_LEVELS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cannedhttp",
        description="Static-route HTTP/1.1 server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
    cannedhttp 0.0.0.0 8080
        """
    )

    parser.add_argument("address", help="IP address to bind to (e.g. 0.0.0.0 or ::)")
    parser.add_argument("port", help="Port to listen on (e.g. 8080)")

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS[:4],
        default=None,
        help="Logging level (default: HTTP_LOG_LEVEL or INFO)"
    )

    parser.add_argument(
        "--max-sessions",
        type=int,
        default=None,
        help="Cap on concurrent connections (default: unbounded)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"cannedhttp {__version__}"
    )

    return parser


def main(argv=None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Arguments after the program name (defaults to sys.argv[1:]).

    Returns:
        Process exit status. Only returns on startup failure or Ctrl+C;
        a running server blocks forever.
    """
    args = build_parser().parse_args(argv)

    try:
        address = str(ipaddress.ip_address(args.address))
        port = int(args.port)

        config = ServerConfig.from_env()
        config.host = address
        config.port = port
        if args.log_level:
            config.log_level = args.log_level
        if args.max_sessions is not None:
            config.max_sessions = args.max_sessions

        server = HTTPServer(DEFAULT_ROUTES, config)
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
