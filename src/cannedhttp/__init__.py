"""
=============================================================================
CANNEDHTTP - Static-Route HTTP/1.1 Server on Raw Sockets
=============================================================================

Accepts TCP connections, reads HTTP/1.1 requests, matches the request
target against a fixed table of routes and answers with that route's
canned text, or with "Illegal request-target" when nothing matches.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    cannedhttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m cannedhttp)
    ├── server.py            # HTTPServer: session loop + thread handoff
    ├── config.py            # ServerConfig dataclass, DEFAULT_ROUTES
    ├── core/
    │   ├── socket_server.py # Listener: bind + accept loop
    │   └── connection.py    # Buffered read / write / half-close
    └── http/
        ├── request.py       # HTTP request parsing
        ├── response.py      # HTTP response serialization
        ├── router.py        # Route, RouteTable
        ├── dispatcher.py    # Request + RouteTable → Response
        └── status_codes.py  # HTTP status enum

=============================================================================
QUICK START
=============================================================================

    from cannedhttp import HTTPServer, ServerConfig

    server = HTTPServer(
        [
            ("/", "welcome ! available routes: /test, /foo"),
            ("/test", "Hello World"),
            ("/foo", "bar"),
        ],
        ServerConfig(host="0.0.0.0", port=8080),
    )
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig, DEFAULT_ROUTES
from .http import Route, RouteTable

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "DEFAULT_ROUTES",
    "Route",
    "RouteTable",
    "__version__",
]
