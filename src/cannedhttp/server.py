"""
=============================================================================
MAIN HTTP SERVER
=============================================================================

Ties the listener, the per-connection session loop and the dispatcher
together.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐        │
    │    │ SocketServer │    │   Session    │    │  dispatch()  │        │
    │    │  (Listener)  │    │   threads    │    │ + RouteTable │        │
    │    └──────────────┘    └──────────────┘    └──────────────┘        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SESSION LOOP (one thread per connection)
=============================================================================

    ┌──────────► READING ── end of stream ─────────────┐
    │               │                                   │
    │               ├──── read / parse failure (log) ───┤
    │               ▼                                   │
    │          DISPATCHING (pure, no I/O)               │
    │               │                                   │
    │               ▼                                   │
    │            WRITING ─── write failure (log) ───────┤
    │               │                                   │
    │               ├──── response needs EOF ───────────┤
    │               │                                   ▼
    └── keep-alive ─┘                                CLOSING
                                                  (shutdown SHUT_WR)

Every failure ends only its own session. Nothing is retried, and nothing
propagates to the listener or to other sessions.

=============================================================================
CONCURRENCY
=============================================================================

The listener starts a daemon thread per accepted connection and moves on;
it never joins sessions. The only state the threads share is the route
table, which is immutable, so reads need no lock. The session counter is
the one piece of mutable shared state and has its own lock.

With ServerConfig.max_sessions set, a bounded semaphore caps the number
of live sessions: the listener waits for a free slot before starting the
next one, which pushes back on accept().

=============================================================================
"""

import logging
import threading
from typing import Iterable, Optional, Tuple, Union

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .http import (
    RequestParser, HTTPParseError,
    Route, RouteTable, dispatch,
)


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Static-route HTTP/1.1 server.

    USAGE

        server = HTTPServer(
            [("/test", "Hello World"), ("/foo", "bar")],
            ServerConfig(host="0.0.0.0", port=8080),
        )
        server.run()   # blocks

    The route table is frozen at construction; there is no way to add
    routes to a running server.
    """

    def __init__(
        self,
        routes: Union[RouteTable, Iterable[Union[Route, Tuple[str, str]]]] = (),
        config: Optional[ServerConfig] = None,
    ):
        """
        Initialize the HTTP server.

        Args:
            routes: RouteTable, or routes / (path, body) pairs in priority order.
            config: Server configuration. Uses defaults if not provided.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._routes = routes if isinstance(routes, RouteTable) else RouteTable(routes)

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        self._session_slots: Optional[threading.BoundedSemaphore] = None
        if self.config.max_sessions is not None:
            self._session_slots = threading.BoundedSemaphore(self.config.max_sessions)

        self._sessions_lock = threading.Lock()
        self._active_sessions = 0

    @property
    def routes(self) -> RouteTable:
        return self._routes

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port) once listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    @property
    def active_sessions(self) -> int:
        """Number of sessions currently running."""
        with self._sessions_lock:
            return self._active_sessions

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def bind(self) -> None:
        """
        Open the listening socket without serving yet.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket_server.bind()

    def run(self) -> None:
        """
        Start the server (blocking).

        Binds (unless bind() was already called) and then accepts
        connections until stop() is called or the process is interrupted.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._setup_logging()

        if not self._socket_server.is_bound:
            self.bind()
        self._print_startup_banner()

        try:
            self._socket_server.serve(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")

    def stop(self) -> None:
        """Stop accepting new connections. Running sessions are not touched."""
        self._socket_server.shutdown()

    def _print_startup_banner(self):
        host, port = self.address
        print(f"{self.config.server_name} listening on {host}:{port}")
        self._routes.print_routes()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("cannedhttp").setLevel(level)

    # =========================================================================
    # CONNECTION HANDOFF
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a session thread for a freshly accepted connection.

        Called on the listener thread. Returns as soon as the thread is
        running; the listener keeps no reference to it.
        """
        if self._session_slots is not None:
            self._session_slots.acquire()

        with self._sessions_lock:
            self._active_sessions += 1

        thread = threading.Thread(
            target=self._run_session,
            args=(conn,),
            name=f"session-{conn.id}",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError as e:
            logger.error(f"[{conn.id}] Could not start session: {e}")
            self._session_finished()
            conn.close()

    def _run_session(self, conn: Connection):
        try:
            self._process_connection(conn)
        except Exception as e:
            logger.exception(f"[{conn.id}] Session error: {e}")
            conn.close()
        finally:
            self._session_finished()

    def _session_finished(self):
        with self._sessions_lock:
            self._active_sessions -= 1
        if self._session_slots is not None:
            self._session_slots.release()

    # =========================================================================
    # SESSION LOOP
    # =========================================================================

    def _process_connection(self, conn: Connection):
        """
        Serve requests on one connection until it is done.

        Args:
            conn: The client connection. Closed on return.
        """
        with conn:  # Context manager performs the half-close
            while True:
                # READ
                try:
                    raw_request = conn.read_request()
                    if raw_request is None:
                        break  # Peer closed cleanly
                    request = self._parser.parse(raw_request, conn.address)
                except HTTPParseError as e:
                    # Not answered; the status only classifies the failure
                    logger.error(f"[{conn.id}] read: {e} ({int(e.status_code)} {e.status_code.phrase})")
                    break
                except (OSError, ValueError) as e:
                    logger.error(f"[{conn.id}] read: {e}")
                    break

                # DISPATCH
                conn.state = ConnectionState.PROCESSING
                response = dispatch(request, self._routes, self.config.server_name)
                logger.debug(
                    f"[{conn.id}] {request.method} {request.target} -> "
                    f"{int(response.status)} ({len(response.body)} bytes)"
                )

                # WRITE
                close = response.need_eof
                if not conn.send_response(response.to_bytes()):
                    break

                if close:
                    break

                conn.set_keep_alive()
