"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

This module turns the raw bytes of one HTTP/1.x request into an HTTPRequest.

=============================================================================
HTTP REQUEST FORMAT
=============================================================================

    GET /test?x=1 HTTP/1.1\r\n          ← Request line
    Host: localhost:8080\r\n            ← Headers
    Connection: keep-alive\r\n
    \r\n                                ← Blank line ends the headers
    (optional body, Content-Length bytes)

The request line has three parts:

    GET /test?x=1 HTTP/1.1
    ─┬─ ─────┬─── ────┬───
     │       │        │
   Method  Target   Version

=============================================================================
THE TARGET IS KEPT VERBATIM
=============================================================================

Routes are matched against the request-target EXACTLY as the client sent
it: no percent-decoding, no query stripping, no slash normalization.

    Route "/test" matches   GET /test HTTP/1.1
    Route "/test" does NOT  GET /test/ HTTP/1.1
                            GET /test?x=1 HTTP/1.1
                            GET /%74est HTTP/1.1

The head of the request is decoded as UTF-8, so a route path compares
byte-for-byte with the target: route "/café" matches the wire bytes
"/caf\xc3\xa9". Bytes that are not valid UTF-8 survive as surrogates
and can never equal a route.

`path` and `query_params` are still derived for logging and for callers
that want them, but nothing routes on them.

=============================================================================
KEEP-ALIVE NEGOTIATION
=============================================================================

    HTTP/1.1 (default: keep-alive):
        Connection: close       → close after response
        (missing)               → keep alive

    HTTP/1.0 (default: close):
        Connection: keep-alive  → keep alive
        (missing)               → close after response

The Connection header is a comma-separated token list, compared
case-insensitively ("Connection: Upgrade, Close" means close).

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict
from urllib.parse import parse_qs, urlsplit
import re

from .status_codes import HTTPStatus


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the HTTP status code that describes the problem:

        400 Bad Request                - Malformed request syntax
        413 Payload Too Large          - Request exceeds size limit
        505 HTTP Version Not Supported - Unknown HTTP version

    The session treats any parse error as a failed read: it is logged and
    the connection is closed.
    """

    def __init__(self, message: str, status_code: HTTPStatus = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status_code = status_code  # HTTPStatus describing the failure


def connection_tokens(value: str) -> set[str]:
    """Split a Connection header value into lowercase tokens."""
    return {token.strip().lower() for token in value.split(",") if token.strip()}


def keep_alive_for(version: str, connection: str) -> bool:
    """
    Decide keep-alive from an HTTP version and a Connection header value.

    Shared by requests and responses so both sides of the exchange
    agree on what a given header means.
    """
    tokens = connection_tokens(connection)
    if version == "HTTP/1.0":
        # HTTP/1.0 closes unless explicitly kept alive
        return "keep-alive" in tokens
    # HTTP/1.1 keeps alive unless explicitly closed
    return "close" not in tokens


@dataclass
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Attributes:
        method:         Request method token. Never inspected by the
                        dispatcher: GET and POST to /test get the same body.
        target:         The request-target exactly as received.
        version:        "HTTP/1.1" or "HTTP/1.0".
        headers:        Header name (lowercase) → value.
        body:           Raw body bytes (Content-Length framed).
        path:           Target without the query string.
        query_params:   Parsed query string as dict of lists.
        client_address: (ip, port) of the peer.
    """

    method: str
    target: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    path: str = ""
    query_params: Dict[str, list[str]] = field(default_factory=dict)

    client_address: tuple = ("", 0)

    def __post_init__(self):
        if not self.path:
            self.path = urlsplit(self.target).path or self.target

    @property
    def is_keep_alive(self) -> bool:
        """Check if the client wants the connection kept open."""
        return keep_alive_for(self.version, self.headers.get("connection", ""))

    @property
    def content_length(self) -> int:
        """Get the Content-Length header value as integer (0 if missing)."""
        try:
            return int(self.headers.get("content-length", 0))
        except ValueError:
            return 0

    @property
    def host(self) -> str:
        """Get the Host header value."""
        return self.headers.get("host", "")

    def get_header(self, name: str, default: str = "") -> str:
        """Get a header value (case-insensitive lookup)."""
        return self.headers.get(name.lower(), default)


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

    Parsing steps:

        1. Size check                → HTTPParseError(413)
        2. Split at \\r\\n\\r\\n         → HTTPParseError if missing
        3. Request line              → HTTPParseError(400 / 505)
        4. Headers                   → lowercased, duplicates joined
        5. Body via Content-Length   → HTTPParseError if short
        6. Build HTTPRequest

    Any method token is accepted (RFC 7230 "token" characters); routing
    never looks at the method.
    """

    # token = 1*tchar, tchar per RFC 7230 section 3.2.6
    REQUEST_LINE_PATTERN = re.compile(
        r"^([!#$%&'*+\-.^_`|~0-9A-Za-z]+) ([^ ]+) (HTTP/\d\.\d)$"
    )
    HEADER_PATTERN = re.compile(r"^([^:\s]+):\s*(.*)$")
    SUPPORTED_VERSIONS = ("HTTP/1.0", "HTTP/1.1")

    def __init__(self, max_request_size: int = 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest object.

        Args:
            data: One complete request as framed by Connection.read_request().
            client_address: Client's (ip, port) tuple.

        Returns:
            Parsed HTTPRequest object.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=HTTPStatus.PAYLOAD_TOO_LARGE,
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        # UTF-8 so "/café" on the wire equals the route "/café";
        # surrogateescape keeps invalid bytes distinct instead of failing.
        header_section = data[:header_end].decode("utf-8", errors="surrogateescape")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, target, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        if "transfer-encoding" in headers:
            raise HTTPParseError("Transfer-Encoding bodies are not supported")

        content_length = self._content_length(headers)
        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        split = urlsplit(target)
        return HTTPRequest(
            method=method,
            target=target,
            version=version,
            headers=headers,
            body=body[:content_length],
            path=split.path or target,
            query_params=parse_qs(split.query, keep_blank_values=True),
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """Split "METHOD SP TARGET SP VERSION" into its three parts."""
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, target, version = match.groups()
        if version not in self.SUPPORTED_VERSIONS:
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=HTTPStatus.HTTP_VERSION_NOT_SUPPORTED,
            )
        return method, target, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse header lines into a dict with lowercase names.

        Repeated headers are folded into one comma-separated value, which
        RFC 7230 treats as equivalent:

            Connection: keep-alive
            Connection: close        →  {"connection": "keep-alive, close"}
        """
        headers: Dict[str, str] = {}
        for line in lines:
            if not line:
                continue
            match = self.HEADER_PATTERN.match(line)
            if not match:
                raise HTTPParseError(f"Invalid header line: {line!r}")

            name, value = match.groups()
            name = name.lower()
            value = value.strip()
            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value
        return headers

    @staticmethod
    def _content_length(headers: Dict[str, str]) -> int:
        raw: Optional[str] = headers.get("content-length")
        if raw is None:
            return 0
        # isdigit() alone accepts "²"
        if not (raw.isascii() and raw.isdigit()):
            raise HTTPParseError(f"Invalid Content-Length: {raw!r}")
        return int(raw)


def parse_request(
    data: bytes,
    client_address: tuple = ("", 0),
    max_size: int = 1024 * 1024
) -> HTTPRequest:
    """Convenience function: parse one request with a throwaway parser."""
    return RequestParser(max_request_size=max_size).parse(data, client_address)
