"""Response normalization — maps action return values to Responses.

Two pure steps. ``classify`` turns whatever an action returned into one
of the ``ActionResult`` variants; ``to_response`` turns a variant into a
``Response`` (or ``None`` when the action handled the response itself).

    None                 -> NoContent          -> 204, empty
    False                -> Suppress           -> nothing sent
    True                 -> JsonBody(200, True) -> 200, ``true``
    int N                -> StatusOnly(N)      -> N, empty
    (N, obj)             -> JsonBody(N, obj)   -> N, JSON
    (N, type, raw)       -> RawBody(...)       -> N, type, raw verbatim
    anything else        -> JsonBody(200, v)   -> 200, JSON

Only tuples are read as status pairs and triples; a list is always a
JSON body. A triple whose first item is a status but whose content type
is not a ``str`` raises ``TypeError``, which the dispatcher turns into a
500. ``bool`` is checked before ``int`` since it is a subclass.
"""

import json as json_module
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from rest_pipeline.http.response import JSON_CONTENT_TYPE, Response

# -- Result variants --


@dataclass(frozen=True, slots=True)
class NoContent:
    """The action returned nothing: 204 unless a response was already sent."""


@dataclass(frozen=True, slots=True)
class Suppress:
    """The action wrote its own response; emit nothing."""


@dataclass(frozen=True, slots=True)
class StatusOnly:
    """A bodyless response with ``status``."""

    status: int


@dataclass(frozen=True, slots=True)
class JsonBody:
    """``value`` serialized as JSON with ``status``."""

    status: int
    value: Any


@dataclass(frozen=True, slots=True)
class RawBody:
    """``body`` sent verbatim with ``content_type`` and ``status``."""

    status: int
    content_type: str
    body: Any


type ActionResult = NoContent | Suppress | StatusOnly | JsonBody | RawBody


@runtime_checkable
class Serializable(Protocol):
    """A value that knows its own JSON representation."""

    def to_json(self) -> Any: ...


# Short names accepted wherever a content type is given
SHORT_CONTENT_TYPES: dict[str, str] = {
    "html": "text/html; charset=utf-8",
    "text": "text/plain; charset=utf-8",
    "txt": "text/plain; charset=utf-8",
    "json": JSON_CONTENT_TYPE,
    "xml": "application/xml",
    "css": "text/css; charset=utf-8",
    "js": "application/javascript; charset=utf-8",
    "csv": "text/csv; charset=utf-8",
    "svg": "image/svg+xml",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "pdf": "application/pdf",
    "bin": "application/octet-stream",
}


def expand_content_type(content_type: str) -> str:
    """Expand a short name like ``"html"`` to a full MIME type.

    Values that already contain ``/`` are returned unchanged. Unknown
    short names fall back to ``application/octet-stream``.
    """
    if "/" in content_type:
        return content_type
    return SHORT_CONTENT_TYPES.get(content_type.lower().lstrip("."), "application/octet-stream")


def classify(value: Any) -> ActionResult:
    """Map an action's return value to an ``ActionResult`` variant."""
    match value:
        case NoContent() | Suppress() | StatusOnly() | JsonBody() | RawBody():
            return value
        case None:
            return NoContent()
        case False:
            return Suppress()
        case True:
            return JsonBody(200, True)
        case int():
            return StatusOnly(value)
        case (int() as status, str() as content_type, raw) if _is_status_tuple(value):
            return RawBody(status, content_type, raw)
        case (int() as status, obj) if _is_status_tuple(value):
            return JsonBody(status, obj)
        case (int(), content_type, _) if _is_status_tuple(value):
            msg = (
                "A (status, content_type, body) result needs a str content type, "
                f"not {type(content_type).__name__}."
            )
            raise TypeError(msg)
        case _:
            return JsonBody(200, value)


def _is_status_tuple(value: Any) -> bool:
    return isinstance(value, tuple) and not isinstance(value[0], bool)


def to_response(result: ActionResult) -> Response | None:
    """Build the Response for *result*. ``None`` means send nothing."""
    match result:
        case Suppress():
            return None
        case NoContent():
            return Response.empty(204)
        case StatusOnly(status=status):
            return Response.empty(status)
        case JsonBody(status=status, value=value):
            return json_response(value, status)
        case RawBody(status=status, content_type=content_type, body=body):
            if not isinstance(body, (str, bytes)):
                body = str(body)
            return Response(body=body, status=status, content_type=expand_content_type(content_type))
        case _:
            msg = f"Not an action result: {result!r}"
            raise TypeError(msg)


def json_response(value: Any, status: int = 200) -> Response:
    """Serialize *value* to a JSON Response, honoring ``to_json()`` hooks."""
    if isinstance(value, Serializable):
        value = value.to_json()
    return Response(
        body=json_module.dumps(value, default=_encode_serializable),
        status=status,
        content_type=JSON_CONTENT_TYPE,
    )


def _encode_serializable(value: Any) -> Any:
    if isinstance(value, Serializable):
        return value.to_json()
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def normalize(value: Any) -> tuple[ActionResult, Response | None]:
    """Classify *value* and build its Response in one step."""
    result = classify(value)
    return result, to_response(result)
