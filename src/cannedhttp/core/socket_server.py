"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

The listener: binds the address, then accepts connections forever and
hands each one off. It never reads or writes HTTP itself.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a socket file descriptor
    2. bind()      Associate the socket with an IP:PORT
                   └─ Fails fast: address in use, bad address, no privilege
    3. listen()    Mark socket as a "listening" socket
                   └─ backlog = max queue size before refusing
    4. accept()    Wait for and accept an incoming connection
                   └─ Returns a NEW socket just for that client
                   └─ Original socket keeps listening!

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    └───────────┬───────────┘
                                │ accept()
              ┌─────────────────┼─────────────────┐
              ▼                 ▼                 ▼
        ┌───────────┐     ┌───────────┐     ┌───────────┐
        │ Client #1 │     │ Client #2 │     │ Client #3 │
        │  socket   │     │  socket   │     │  socket   │
        └───────────┘     └───────────┘     └───────────┘
          session           session           session
          thread            thread            thread

bind() and serve() are separate calls so that startup errors surface to
the caller before the accept loop begins.

=============================================================================
"""

import socket
import logging
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.bind()                     # raises OSError on bind failure
        server.serve(handle_connection)   # blocks
    """

    # accept() wakes up this often to notice shutdown()
    ACCEPT_POLL_INTERVAL = 1.0

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_bound(self) -> bool:
        return self._socket is not None

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port); reflects the OS-chosen port when port=0."""
        if self._socket is not None:
            sockname = self._socket.getsockname()
            return (sockname[0], sockname[1])
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        family = socket.AF_INET6 if ":" in self.config.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)

        # SO_REUSEADDR: avoid "Address already in use" while old sockets
        # from a previous run sit in TIME_WAIT.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # TCP_NODELAY: small responses go out immediately.
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(self.ACCEPT_POLL_INTERVAL)
        return sock

    def bind(self) -> None:
        """
        Create, bind and listen.

        Raises:
            OSError: Address in use, invalid address, insufficient privilege.
        """
        sock = self._create_socket()
        try:
            sock.bind((self.config.host, self.config.port))
            sock.listen(self.config.backlog)
        except OSError as e:
            sock.close()
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            raise

        self._socket = sock
        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")

    def serve(self, connection_handler: Callable[[Connection], None]) -> None:
        """
        Accept connections until shutdown() is called.

        Each accepted client socket is wrapped in a Connection and passed
        to `connection_handler`, which must not block for long: the next
        accept() waits for it.
        """
        if not self.is_bound:
            self.bind()

        self._running = True
        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Periodic wake-up so shutdown() is noticed
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            if not self._running:
                # shutdown() arrived while accept() was blocked
                client_socket.close()
                break

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_request_size=self.config.max_request_size,
            )
            logger.debug(f"[{conn.id}] Accepted connection from {conn.client_ip}:{conn.client_port}")

            connection_handler(conn)

    def shutdown(self) -> None:
        """
        Stop accepting connections.

        Sessions already running are left alone.
        """
        self._running = False

    def _cleanup(self):
        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None
        self._running = False
        logger.info("Socket server stopped")
