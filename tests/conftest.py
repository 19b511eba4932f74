"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cannedhttp import HTTPServer, ServerConfig, DEFAULT_ROUTES


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /test?page=1 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b'{"name": "John"}'
    return (
        b"POST /foo HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"Connection: close\r\n"
        b"\r\n"
    ) + body


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@dataclass
class RawResponse:
    """A response as read off the wire by RawClient."""
    version: str
    status: int
    reason: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


class RawClient:
    """Minimal blocking HTTP client over a plain socket."""

    def __init__(self, address, timeout: float = 5.0):
        self.sock = socket.create_connection(address, timeout=timeout)
        self._buffer = b""

    def send(self, data: bytes):
        self.sock.sendall(data)

    def get(self, target: str, version: str = "HTTP/1.1", **headers: str) -> RawResponse:
        lines = [f"GET {target} {version}", "Host: localhost"]
        lines += [f"{name.replace('_', '-')}: {value}" for name, value in headers.items()]
        self.send(("\r\n".join(lines) + "\r\n\r\n").encode())
        return self.read_response()

    def _fill(self):
        chunk = self.sock.recv(4096)
        if not chunk:
            raise ConnectionError("server closed the connection")
        self._buffer += chunk

    def read_response(self) -> RawResponse:
        while b"\r\n\r\n" not in self._buffer:
            self._fill()

        head, self._buffer = self._buffer.split(b"\r\n\r\n", 1)
        status_line, *header_lines = head.decode("latin-1").split("\r\n")
        version, status, reason = status_line.split(" ", 2)

        headers = {}
        for line in header_lines:
            name, _, value = line.partition(":")
            headers[name.strip().lower()] = value.strip()

        length = int(headers.get("content-length", 0))
        while len(self._buffer) < length:
            self._fill()
        body, self._buffer = self._buffer[:length], self._buffer[length:]

        return RawResponse(version, int(status), reason, headers, body)

    def at_eof(self) -> bool:
        """True if the server has closed its sending side."""
        if self._buffer:
            return False
        try:
            return self.sock.recv(1) == b""
        except ConnectionResetError:
            return True

    def close(self):
        self.sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class ServerThread:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self):
        return self.server.address

    def start(self):
        # Bind on the test thread so the port is known before serving
        self.server.bind()
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        deadline = time.monotonic() + 5.0
        while not self.server.is_running and time.monotonic() < deadline:
            time.sleep(0.01)

    def stop(self):
        self.server.stop()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def client(self, timeout: float = 5.0) -> RawClient:
        return RawClient(self.address, timeout=timeout)

    def wait_for_sessions(self, count: int, timeout: float = 5.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if self.server.active_sessions == count:
                return True
            time.sleep(0.01)
        return False


@pytest.fixture
def server_factory() -> Generator:
    """Start servers on an OS-assigned port; all are stopped at teardown."""
    started = []

    def start(routes=DEFAULT_ROUTES, **config_overrides) -> ServerThread:
        config = ServerConfig(host="127.0.0.1", port=0, log_level="WARNING")
        for name, value in config_overrides.items():
            setattr(config, name, value)
        srv = ServerThread(HTTPServer(routes, config))
        srv.start()
        started.append(srv)
        return srv

    yield start

    for srv in started:
        srv.stop()


@pytest.fixture
def test_server(server_factory) -> ServerThread:
    """A running server with the reference routes."""
    return server_factory()
