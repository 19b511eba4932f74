"""
=============================================================================
HTTP RESPONSE SERIALIZATION
=============================================================================

An HTTPResponse is a plain container that knows how to turn itself into
the bytes written back on the socket.

=============================================================================
RESPONSE FORMAT
=============================================================================

    HTTP/1.1 400 Bad Request\r\n        ← Status line
    Content-Type: text/html\r\n         ← Headers, in insertion order
    Content-Length: 11\r\n              ← Added from the body if absent
    \r\n                                ← Blank line
    Hello World                         ← Body bytes

Only Content-Length is filled in automatically. Every other header is
exactly what the dispatcher set, so the wire output stays predictable
(no Date, no Server unless asked for).

=============================================================================
THE CONNECTION HEADER
=============================================================================

set_keep_alive() writes the smallest Connection header that expresses
the wanted behaviour for the response's HTTP version:

    ┌──────────┬────────────┬─────────────────────────────┐
    │ Version  │ Keep-alive │ Connection header           │
    ├──────────┼────────────┼─────────────────────────────┤
    │ HTTP/1.1 │ yes        │ (none, 1.1 default)         │
    │ HTTP/1.1 │ no         │ Connection: close           │
    │ HTTP/1.0 │ yes        │ Connection: keep-alive      │
    │ HTTP/1.0 │ no         │ (none, 1.0 default)         │
    └──────────┴────────────┴─────────────────────────────┘

need_eof reads it back: the session closes after writing a response
whose need_eof is True.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Union

from .request import keep_alive_for
from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

        Dispatcher returns       to_bytes()              Connection sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """Get the status line, e.g. "HTTP/1.1 400 Bad Request"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a response header. Returns self for method chaining."""
        self.headers[name] = value
        return self

    def set_content_type(self, content_type: str) -> "HTTPResponse":
        """Set the Content-Type header."""
        return self.set_header("Content-Type", content_type)

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the response body, encoding strings as UTF-8."""
        if isinstance(body, str):
            self.body = body.encode("utf-8")
        else:
            self.body = body
        return self

    def set_keep_alive(self, keep_alive: bool) -> "HTTPResponse":
        """
        Make the Connection header advertise `keep_alive`.

        Other Connection tokens (e.g. "upgrade") are preserved; only the
        close/keep-alive tokens are rewritten.
        """
        tokens = [
            token.strip() for token in self.headers.get("Connection", "").split(",")
            if token.strip().lower() not in ("", "close", "keep-alive")
        ]

        if self.version == "HTTP/1.0":
            if keep_alive:
                tokens.append("keep-alive")
        elif not keep_alive:
            tokens.append("close")

        if tokens:
            self.headers["Connection"] = ", ".join(tokens)
        else:
            self.headers.pop("Connection", None)
        return self

    @property
    def is_keep_alive(self) -> bool:
        """Whether this response leaves the connection open."""
        return keep_alive_for(self.version, self.headers.get("Connection", ""))

    @property
    def need_eof(self) -> bool:
        """Whether the connection must be closed after sending this response."""
        return not self.is_keep_alive

    def to_bytes(self) -> bytes:
        """
        Serialize the response to bytes for socket.sendall().

        Returns:
            Status line, headers, blank line and body.
        """
        response_headers = dict(self.headers)

        # Content-Length: client needs it to find the end of the body
        # on a kept-alive connection.
        if "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("latin-1") + b"\r\n"
        return header_bytes + self.body
