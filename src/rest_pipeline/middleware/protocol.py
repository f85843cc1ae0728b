"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response | None: ...

No base class required. The pipeline checks the shape, not the lineage.

``next`` returns ``None`` when the action already answered through its
``ResponseWriter``; middleware that decorates responses must pass that
through unchanged.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from rest_pipeline.http.request import Request
from rest_pipeline.http.response import Response

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[Response | None]]


class Middleware(Protocol):
    """Protocol for pipeline middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Response | None:
            start = time.monotonic()
            response = await next(request)
            if response is None:
                return None
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")

        # Class middleware
        class RequestId:
            async def __call__(self, request: Request, next: Next) -> Response | None:
                ...
    """

    async def __call__(self, request: Request, next: Next) -> Response | None: ...
