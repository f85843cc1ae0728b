"""API-key query parameter to bearer header.

The interactive API page sends credentials as ``?api_key=<key>``. This
middleware rewrites such requests to carry ``Authorization: Bearer <key>``
so routes using a bearer scheme authenticate them like any other client.
A request that already has an ``Authorization`` header is left alone.
"""

from dataclasses import dataclass

from rest_pipeline.http.request import Request
from rest_pipeline.http.response import Response
from rest_pipeline.middleware.protocol import Next


@dataclass(frozen=True, slots=True)
class ApiKeyToBearer:
    """Convert an ``api_key`` query parameter into a bearer header."""

    param: str = "api_key"
    header: str = "Authorization"
    prefix: str = "Bearer"

    async def __call__(self, request: Request, next: Next) -> Response | None:
        key = request.query.get(self.param)
        if key and self.header not in request.headers:
            headers = request.headers.with_header(self.header, f"{self.prefix} {key}")
            request = request.with_headers(headers)
        return await next(request)
