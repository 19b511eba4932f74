"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables live in one dataclass, validated once at startup.

    ServerConfig(host="0.0.0.0", port=8080)     # explicit
    ServerConfig.from_env()                      # 12-factor style

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================

    HTTP_HOST          Bind address (default: 127.0.0.1)
    HTTP_PORT          Bind port (default: 8080)
    HTTP_TIMEOUT       Session read timeout in seconds (default: none)
    HTTP_MAX_SESSIONS  Cap on concurrent sessions (default: unbounded)
    HTTP_LOG_LEVEL     Logging level (default: INFO)

=============================================================================
ROUTES ARE NOT CONFIGURATION FILES
=============================================================================

The route table is handed to HTTPServer in code, as an ordered list of
(path, body) pairs. DEFAULT_ROUTES is the table the command-line entry
point serves.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional

from .http.dispatcher import DEFAULT_SERVER_NAME


DEFAULT_ROUTES = (
    ("/", "welcome ! available routes: /test, /foo"),
    ("/test", "Hello World"),
    ("/foo", "bar"),
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _optional(value: Optional[str], cast):
    return cast(value) if value not in (None, "") else None


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    HTTP SETTINGS
    - max_request_size, server_name

    CONCURRENCY
    - max_sessions

    LOGGING
    - log_level
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    IP literal to bind to (IPv4 or IPv6).
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """Port to listen on. 0 lets the OS pick one (useful in tests)."""

    backlog: int = 128
    """Maximum number of queued connections before the OS refuses new ones."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    timeout: Optional[float] = None
    """
    Socket timeout for session reads and writes, in seconds.
    None = block forever; sessions only end on disconnect, error or
    Connection: close.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 1024 * 1024  # 1 MB
    """Largest request (headers + body) a session will buffer."""

    server_name: str = DEFAULT_SERVER_NAME
    """Sent in the Server header of fallback responses."""

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    max_sessions: Optional[int] = None
    """
    Upper bound on concurrently running sessions.
    None = one thread per connection with no limit.
    When set, accept() stalls while the cap is reached.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create configuration from HTTP_* environment variables."""
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            timeout=_optional(os.getenv("HTTP_TIMEOUT"), float),
            max_sessions=_optional(os.getenv("HTTP_MAX_SESSIONS"), int),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_request_size < 1:
            raise ValueError("max_request_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_sessions is not None and self.max_sessions < 1:
            raise ValueError("max_sessions must be >= 1")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")
