"""ASGI handler — translates ASGI scope/messages to pipeline types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, runs middleware, serves the API document
endpoints, routes, dispatches, and sends the Response back through ASGI
send().
"""

import logging
from collections.abc import Callable
from contextvars import Token
from typing import Any

from rest_pipeline._internal.asgi import Receive, Scope, Send
from rest_pipeline.config import PipelineConfig
from rest_pipeline.context import ResponseWriter, request_var
from rest_pipeline.errors import HTTPError
from rest_pipeline.http.request import Request
from rest_pipeline.http.response import Response
from rest_pipeline.middleware.protocol import Next
from rest_pipeline.routing.router import Router
from rest_pipeline.schema.ui import ApiDocs
from rest_pipeline.server.dispatcher import dispatch
from rest_pipeline.server.errors import handle_http_error, handle_internal_error

logger = logging.getLogger("rest_pipeline.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    config: PipelineConfig,
    docs: ApiDocs | None = None,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    writer = ResponseWriter(send)

    # Set request context var (reset after dispatch)
    token: Token[Request] = request_var.set(request)

    try:
        # Build the innermost handler (docs endpoints + router dispatch)
        async def inner(req: Request) -> Response | None:
            if docs is not None:
                served = docs.serve(req)
                if served is not None:
                    return served

            match = router.match(req.method, req.path)
            return await dispatch(req.with_path_params(match.path_params), writer, match.route, config)

        # Wrap middleware around the dispatch
        handler: Next = inner
        for mw in reversed(middleware):
            outer = handler

            async def make_next(req: Request, _mw: Any = mw, _next: Next = outer) -> Response | None:
                return await _mw(req, _next)

            handler = make_next

        response = await handler(request)

    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request)
    finally:
        request_var.reset(token)

    if response is None:
        return
    if writer.sent:
        logger.warning(
            "Dropping %d response for %s %s: a response was already sent",
            response.status,
            request.method,
            request.path,
        )
        return
    await writer.send(response)
