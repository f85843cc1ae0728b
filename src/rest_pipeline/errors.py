"""rest_pipeline exception hierarchy.

Shared across the router, the auth stages, the dispatcher and the schema
generator so every module raises and catches the same types.
"""

from dataclasses import dataclass
from typing import Any


class PipelineError(Exception):
    """Base for all rest_pipeline-specific errors."""


class ConfigurationError(PipelineError):
    """Raised when a controller definition or configuration is invalid.

    Surfaces at registration time, not while serving requests.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(PipelineError):
    """An error that maps directly to an HTTP status code.

    Raised by the router and the auth stages. The dispatcher and the ASGI
    handler catch these and emit a bodyless response with ``status``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no controller, path, or method matched the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class Unauthenticated(HTTPError):  # noqa: N818
    """401 — the authentication stage failed."""

    def __init__(self, detail: str = "authentication failed") -> None:
        super().__init__(status=401, detail=detail)


class Unauthorized(HTTPError):  # noqa: N818
    """403 — the authorization stage failed."""

    def __init__(self, detail: str = "authorization failed") -> None:
        super().__init__(status=403, detail=detail)


class SchemaValidationError(PipelineError):
    """The generated API document failed schema validation.

    ``errors`` holds one entry per validator error, each with the failing
    ``path`` (JSON pointer style) and the validator ``message``.
    """

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        summary = "; ".join(f"{e['path']}: {e['message']}" for e in errors[:3])
        super().__init__(f"API document failed validation ({len(errors)} errors): {summary}")
