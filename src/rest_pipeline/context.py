"""Request-scoped context.

Provides:
- ``request_var``: the current ``Request`` for this task.
- ``ResponseWriter``: the outbound response sink handed to actions.
- ``RequestContext``: what an action sees of the request it serves.

``request_var`` is set by the ASGI handler before middleware runs and
reset after the response is produced. Accessing it outside a request
raises ``LookupError``.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from rest_pipeline._internal.asgi import Send
from rest_pipeline.http.request import Request
from rest_pipeline.http.response import Response
from rest_pipeline.server.normalize import (
    JsonBody,
    RawBody,
    StatusOnly,
    Suppress,
    json_response,
)
from rest_pipeline.server.sender import send_response

# -- Request context --

request_var: ContextVar[Request] = ContextVar("rest_pipeline_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


# -- Response sink --


class ResponseWriter:
    """Sends at most one response straight to the ASGI server.

    Actions that stream or build their own response write through this
    and then return ``ctx.skip_response()`` (or ``False``) so the
    pipeline does not send a second one.
    """

    __slots__ = ("_send", "_sent")

    def __init__(self, send: Send) -> None:
        self._send = send
        self._sent = False

    @property
    def sent(self) -> bool:
        """Whether a response has already gone out."""
        return self._sent

    async def send(self, response: Response) -> None:
        """Send *response*. Raises ``RuntimeError`` on a second call."""
        if self._sent:
            msg = "A response has already been sent for this request."
            raise RuntimeError(msg)
        self._sent = True
        await send_response(response, self._send)

    async def json(self, value: Any, status: int = 200) -> None:
        """Send *value* as a JSON response."""
        await self.send(json_response(value, status))

    async def text(self, body: str, status: int = 200) -> None:
        """Send a plain text response."""
        await self.send(Response(body=body, status=status, content_type="text/plain; charset=utf-8"))


# -- Per-invocation context --


@dataclass(frozen=True, slots=True)
class RequestContext:
    """The request being served and the helpers to answer it.

    Created fresh for every action invocation. Actions receive it by
    declaring a ``ctx`` (or ``context``) parameter::

        async def show(ctx: RequestContext, id: int):
            user = await db.users.get(id)
            if user is None:
                return ctx.status(404)
            return ctx.response(200, user)
    """

    request: Request
    response: ResponseWriter

    @property
    def path_params(self) -> dict[str, str]:
        return self.request.path_params

    @property
    def principal(self) -> Any:
        """The principal attached during authentication, or ``None``."""
        return self.request.principal

    # -- Result helpers --

    def status(self, code: int) -> StatusOnly:
        """A bodyless response with status *code*."""
        return StatusOnly(code)

    def skip_response(self) -> Suppress:
        """Tell the pipeline the action already sent its own response."""
        return Suppress()

    def response(self, *args: Any) -> JsonBody | RawBody:
        """Build a response result.

        ``response(200, obj)``                -> JSON body
        ``response(200, "text/csv", raw)``    -> raw body with that type
        ``response("html", raw)``             -> raw body, status 200
        """
        match args:
            case (int() as status, obj) if not isinstance(status, bool):
                return JsonBody(status, obj)
            case (int() as status, str() as content_type, raw) if not isinstance(status, bool):
                return RawBody(status, content_type, raw)
            case (str() as content_type, raw):
                return RawBody(200, content_type, raw)
            case _:
                msg = (
                    "response() takes (status, body), (status, content_type, body) "
                    f"or (content_type, body); got {len(args)} arguments."
                )
                raise TypeError(msg)
