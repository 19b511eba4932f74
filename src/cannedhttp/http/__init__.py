"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

    request.py       Raw bytes → HTTPRequest (RequestParser)
    response.py      HTTPResponse → raw bytes
    router.py        Route / RouteTable (exact-match lookup)
    dispatcher.py    HTTPRequest + RouteTable → HTTPResponse
    status_codes.py  HTTPStatus enum with reason phrases

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import HTTPResponse
from .router import Route, RouteTable
from .dispatcher import dispatch, DEFAULT_SERVER_NAME, ILLEGAL_TARGET_BODY
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Responses
    "HTTPResponse",
    "HTTPStatus",

    # Routing
    "Route",
    "RouteTable",
    "dispatch",
    "DEFAULT_SERVER_NAME",
    "ILLEGAL_TARGET_BODY",
]
