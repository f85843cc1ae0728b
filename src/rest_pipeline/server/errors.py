"""Terminal error mapping.

Every failure a request can hit ends up here and becomes exactly one
bodyless Response. Detail never reaches the client; it goes to the log
(or the configured error sink, for action errors).
"""

import logging

from rest_pipeline.errors import HTTPError
from rest_pipeline.http.request import Request
from rest_pipeline.http.response import Response

logger = logging.getLogger("rest_pipeline.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to a bodyless Response with its status."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    response = Response.empty(exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(exc: Exception, request: Request) -> Response:
    """Handle unexpected exceptions raised outside an action as 500 errors."""
    logger.error("500 %s %s", request.method, request.path, exc_info=exc)
    return Response.empty(500)
