"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with the blocking primitives a session
needs: read exactly one request, write one response, half-close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

    Client sends:
        GET /test HTTP/1.1\r\n\r\nGET /foo HTTP/1.1\r\n\r\n

    Server might receive:
        recv() → "GET /test HTTP/1.1\r\n\r\nGET /f"
        recv() → "oo HTTP/1.1\r\n\r\n"

So received bytes go into a buffer that lives as long as the connection.
read_request() cuts exactly one request off the front of the buffer and
leaves the rest (here "GET /f") for the next call. This is what makes
pipelined requests on a keep-alive connection work.

Reading a complete request:
1. Read until we see \r\n\r\n (end of headers)
2. Parse Content-Length from headers
3. Read until Content-Length body bytes are buffered

=============================================================================
END OF STREAM VS. FAILURE
=============================================================================

    recv() returns b"" with an EMPTY buffer   → None (clean end of stream)
    recv() returns b"" with a PARTIAL request → ConnectionError
    buffer grows past max_request_size        → ValueError
    socket error / timeout                    → OSError propagates

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► PROCESSING ──────► WRITING ────────┐
     │             │                                    │           │
     │             │                                    │           ▼
     │             │                                    │      KEEP_ALIVE
     │             │                                    │           │
     │             ▼                                    │           │
     └──────────► CLOSING ◄─────────────────────────────┴───────────┘
                    │
                    ▼
                  CLOSED

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"                # Just accepted, haven't read anything yet
    READING = "reading"        # Blocked reading a request
    PROCESSING = "processing"  # Request parsed, dispatcher running
    WRITING = "writing"        # Sending response data
    KEEP_ALIVE = "keep_alive"  # Response sent, about to read the next request
    CLOSING = "closing"        # Half-close in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's address tuple.
        id: Short connection identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
        requests_handled: Number of requests read on this connection.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.monotonic)
    requests_handled: int = 0

    buffer_size: int = 8192
    timeout: Optional[float] = None
    max_request_size: int = 1024 * 1024

    # Persists across reads on this connection
    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request from the socket.

        Returns:
            The request bytes (headers and body), or None if the peer closed
            the connection before sending anything more.

        Raises:
            ConnectionError: Peer closed in the middle of a request.
            ValueError: Request exceeds max_request_size.
            OSError: Socket failure or timeout.
        """
        self.state = ConnectionState.READING

        while b"\r\n\r\n" not in self._buffer:
            chunk = self._recv()
            if not chunk:
                if self._buffer:
                    raise ConnectionError("peer closed the connection mid-request")
                return None  # Clean end of stream
            self._buffer += chunk
            self._check_size(len(self._buffer))

        header_end = self._buffer.find(b"\r\n\r\n")
        header_section = self._buffer[:header_end]
        body_start = header_end + 4

        content_length = self._parse_content_length(header_section)
        self._check_size(body_start + content_length)

        while len(self._buffer) - body_start < content_length:
            chunk = self._recv()
            if not chunk:
                raise ConnectionError("peer closed the connection mid-body")
            self._buffer += chunk

        # Cut one request off the front; pipelined bytes stay buffered
        request_end = body_start + content_length
        request_data = self._buffer[:request_end]
        self._buffer = self._buffer[request_end:]

        self.requests_handled += 1
        return request_data

    def _recv(self) -> bytes:
        return self.socket.recv(self.buffer_size)

    def _check_size(self, size: int) -> None:
        if size > self.max_request_size:
            raise ValueError(f"Request too large: {size} bytes")

    def _parse_content_length(self, headers: bytes) -> int:
        """
        Find Content-Length in raw header bytes.

        Only used for framing; RequestParser validates the value properly.
        A missing or malformed value frames the request as having no body.
        """
        for line in headers.split(b"\r\n")[1:]:
            name, _, value = line.partition(b":")
            if name.strip().lower() == b"content-length":
                value = value.strip()
                return int(value) if value.isdigit() else 0
        return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes to the client.

        Uses sendall(), which blocks until every byte is handed to the OS.

        Returns:
            True if send succeeded, False if the write failed (logged).
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.error(f"[{self.id}] write: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        1. shutdown(SHUT_WR): send FIN, telling the client we're done sending.
           Errors are ignored; the peer may already be gone.
        2. close(): release the file descriptor and drop the read buffer.

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self._buffer = b""
        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Connection closed after {self.requests_handled} requests "
            f"({time.monotonic() - self.created_at:.3f}s)"
        )

    def set_keep_alive(self):
        """Mark connection for keep-alive (ready for next request)."""
        self.state = ConnectionState.KEEP_ALIVE

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
