"""Per-request pipeline — authenticate, authorize, invoke, normalize.

``dispatch`` runs one matched route through the stages in order and
turns every outcome into exactly one Response (or ``None`` when the
action answered through its ``ResponseWriter``):

    PUT/DELETE on a controller index       -> 404
    authentication fails                   -> 401  (trace: authentication failed)
    authorization fails                    -> 403  (trace: authorization failed)
    action raises a validation error       -> 400  {"validationErrors": ...}
    action raises anything else            -> 500  (error sink)
    action returns                         -> normalized result

Authorization only runs when the route authenticates; a route whose
effective authentication is ``None`` skips it entirely.
"""

import inspect
from collections.abc import Callable
from typing import Any

from rest_pipeline._internal.invoke import invoke
from rest_pipeline.auth.authentication import authenticate
from rest_pipeline.auth.authorization import authorize
from rest_pipeline.config import PipelineConfig
from rest_pipeline.context import RequestContext, ResponseWriter
from rest_pipeline.errors import HTTPError, NotFound, Unauthenticated, Unauthorized
from rest_pipeline.http.request import Request
from rest_pipeline.http.response import Response
from rest_pipeline.routing.params import convert_param
from rest_pipeline.routing.route import Route
from rest_pipeline.routing.router import parse_path
from rest_pipeline.routing.table import INDEX_REJECTED_METHODS
from rest_pipeline.server.errors import handle_http_error
from rest_pipeline.server.normalize import NoContent, Suppress, classify, json_response, to_response

_CONTEXT_NAMES = frozenset({"ctx", "context"})


async def dispatch(
    request: Request,
    writer: ResponseWriter,
    route: Route,
    config: PipelineConfig,
) -> Response | None:
    """Run *route* for *request*. Returns ``None`` if nothing should be sent."""
    try:
        return await _run(request, writer, route, config)
    except HTTPError as exc:
        if writer.sent:
            config.report("%s %s raised %s after sending a response", request.method, request.path, exc)
            return None
        return handle_http_error(exc, request)


async def _run(
    request: Request,
    writer: ResponseWriter,
    route: Route,
    config: PipelineConfig,
) -> Response | None:
    config.trace("Hit %s handler for %s on %s", route.method, route.path, route.controller or "root")

    if route.is_index and route.method in INDEX_REJECTED_METHODS:
        raise NotFound(f"{route.method} is not served on index {route.path!r}")

    definition = route.definition.with_defaults(
        config.default_authentication,
        config.default_authorization,
    )

    try:
        await authenticate(request, definition.authentication, config.authenticator)
    except Unauthenticated:
        config.trace("authentication failed")
        raise

    if definition.authentication is not None:
        try:
            await authorize(request, definition.authorization, config.role_checker)
        except Unauthorized:
            config.trace("authorization failed")
            raise

    ctx = RequestContext(request=request, response=writer)
    action = definition.action
    try:
        kwargs = build_action_kwargs(action, ctx, route)
        value = await invoke(action, **kwargs)
    except HTTPError:
        raise
    except Exception as exc:
        return _action_failed(exc, request, writer, config)

    return _respond(value, request, writer, config)


def build_action_kwargs(
    action: Callable[..., Any],
    ctx: RequestContext,
    route: Route,
) -> dict[str, Any]:
    """Inspect the action signature and build kwargs for it.

    Resolution order:
    1. ``ctx`` / ``context`` parameter (by name or ``RequestContext`` annotation)
    2. ``request`` parameter (by name or ``Request`` annotation)
    3. ``response`` parameter (by name or ``ResponseWriter`` annotation)
    4. Path parameters (by name, converted by the route's segment type
       and then by the annotation, if any)
    """
    sig = inspect.signature(action, eval_str=True)
    path_params = ctx.path_params
    kwargs: dict[str, Any] = {}
    types: dict[str, str] | None = None

    for name, param in sig.parameters.items():
        annotation = param.annotation
        if name in _CONTEXT_NAMES or annotation is RequestContext:
            kwargs[name] = ctx
        elif name == "request" or annotation is Request:
            kwargs[name] = ctx.request
        elif name == "response" or annotation is ResponseWriter:
            kwargs[name] = ctx.response
        elif name in path_params:
            if types is None:
                types = {
                    seg.param_name: seg.param_type
                    for seg in parse_path(route.path)
                    if seg.is_param and seg.param_name
                }
            kwargs[name] = _convert(path_params[name], types.get(name, "str"), annotation)

    return kwargs


def _convert(raw: str, param_type: str, annotation: Any) -> Any:
    value: Any = convert_param(raw, param_type)
    if annotation in (int, float, str) and not isinstance(value, annotation):
        try:
            value = annotation(value)
        except (ValueError, TypeError):
            value = raw
    return value


def _respond(
    value: Any,
    request: Request,
    writer: ResponseWriter,
    config: PipelineConfig,
) -> Response | None:
    try:
        result = classify(value)
        response = to_response(result)
    except Exception as exc:
        return _internal_failure(exc, request, writer, config)

    if isinstance(result, Suppress):
        return None
    if writer.sent:
        if not isinstance(result, NoContent):
            config.report(
                "%s %s returned %r after sending a response; result dropped",
                request.method,
                request.path,
                result,
            )
        return None
    return response


def _action_failed(
    exc: Exception,
    request: Request,
    writer: ResponseWriter,
    config: PipelineConfig,
) -> Response | None:
    try:
        is_validation = bool(config.is_validation_error(exc))
    except Exception as classifier_exc:
        return _internal_failure(classifier_exc, request, writer, config)

    if not is_validation:
        return _internal_failure(exc, request, writer, config)
    if writer.sent:
        return _internal_failure(exc, request, writer, config)

    try:
        return json_response({"validationErrors": validation_details(exc)}, 400)
    except Exception as encode_exc:
        return _internal_failure(encode_exc, request, writer, config)


def validation_details(exc: BaseException) -> Any:
    """The ``errors`` a validation exception carries.

    Reads ``exc.errors``, calling it when it is a method (pydantic
    style). Falls back to the exception message.
    """
    errors = getattr(exc, "errors", None)
    if callable(errors):
        errors = errors()
    if errors is None:
        return [str(exc)]
    return errors


def _internal_failure(
    exc: BaseException,
    request: Request,
    writer: ResponseWriter,
    config: PipelineConfig,
) -> Response | None:
    config.report("Unhandled error in %s %s", request.method, request.path, exc=exc)
    if writer.sent:
        return None
    return Response.empty(500)
