"""
=============================================================================
HTTP STATUS CODES (RFC 7231)
=============================================================================

The status codes this server uses, with their reason phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK - HTTPResponse default, never sent by dispatch()  │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request   - Every canned response uses this one  │
    │        │ 413 Payload Too Large - Request exceeds the size limit   │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 505 HTTP Version Not Supported                           │
    └────────┴───────────────────────────────────────────────────────────┘

Only 400 ever reaches the wire. 413 and 505 classify parse failures
(HTTPParseError.status_code) in the session's log line; the connection is
closed without a response.

Note that a MATCHED route is answered with 400 as well. Existing clients
depend on that status, so it is kept as-is.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    This enum extends IntEnum, so status codes can be used as integers:

        >>> HTTPStatus.BAD_REQUEST == 400
        True
        >>> HTTPStatus.BAD_REQUEST.phrase
        'Bad Request'
    """

    OK = 200                            # Standard success response

    BAD_REQUEST = 400                   # Malformed request syntax
    PAYLOAD_TOO_LARGE = 413             # Request too large

    HTTP_VERSION_NOT_SUPPORTED = 505    # HTTP version not supported

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 400 Bad Request
                     ─── ───────────
                      │       │
                      │       └── Reason phrase
                      └────────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_client_error(self) -> bool:
        """Check if this is a 4xx (client error) status code."""
        return 400 <= self < 500


# Per RFC 7230, reason phrases are purely informational and may be
# modified or ignored by clients.
_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
