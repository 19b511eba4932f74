"""
=============================================================================
REQUEST DISPATCHER
=============================================================================

Turns one parsed request into one response. Pure: no I/O, no shared
state written, and no exceptions for any request the parser produced.

    HTTPRequest ──► routes.lookup(target) ──┬── body  ──► canned response
                                            └── None  ──► fallback response

Both responses:
    - status 400 Bad Request (matched routes included, clients rely on it)
    - Content-Type: text/html
    - same HTTP version as the request
    - keep-alive mirrored from the request

The fallback additionally names the server and always carries the body
"Illegal request-target".

=============================================================================
"""

from .request import HTTPRequest
from .response import HTTPResponse
from .router import RouteTable
from .status_codes import HTTPStatus


DEFAULT_SERVER_NAME = "cannedhttp/1.0"
ILLEGAL_TARGET_BODY = "Illegal request-target"
CONTENT_TYPE = "text/html"


def bad_request(request: HTTPRequest, why: str, server_name: str = DEFAULT_SERVER_NAME) -> HTTPResponse:
    """Build the fallback response carrying `why` as its body."""
    response = HTTPResponse(status=HTTPStatus.BAD_REQUEST, version=request.version)
    response.set_header("Server", server_name)
    response.set_content_type(CONTENT_TYPE)
    response.set_keep_alive(request.is_keep_alive)
    response.set_body(why)
    return response


def dispatch(
    request: HTTPRequest,
    routes: RouteTable,
    server_name: str = DEFAULT_SERVER_NAME,
) -> HTTPResponse:
    """
    Produce the response for a request.

    Args:
        request: The parsed request. Only its target, version and
                 keep-alive flag are consulted.
        routes: The route table.
        server_name: Value of the Server header on the fallback response.

    Returns:
        The canned response for a matched target, otherwise the
        "Illegal request-target" fallback.
    """
    body = routes.lookup(request.target)
    if body is None:
        return bad_request(request, ILLEGAL_TARGET_BODY, server_name)

    response = HTTPResponse(status=HTTPStatus.BAD_REQUEST, version=request.version)
    response.set_content_type(CONTENT_TYPE)
    response.set_keep_alive(request.is_keep_alive)
    response.set_body(body)
    return response
