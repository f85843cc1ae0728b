"""rest_pipeline — declarative REST controllers behind an ASGI pipeline.

Each request runs authenticate -> authorize -> action -> normalize, with
a typed short-circuit at every stage (401, 403, 400, 500).

Basic usage::

    from rest_pipeline import Pipeline, PipelineConfig

    pipeline = Pipeline(PipelineConfig(default_authentication=None))

    def show_user(ctx, id: int):
        return ctx.response(200, {"id": id})

    pipeline.register("users", {"/:id": {"GET": show_user}})

Serve ``pipeline`` with any ASGI server.
"""

__version__ = "0.1.0"
__all__ = [
    "REQUIRE_PRINCIPAL",
    "UNSET",
    "ApiKeyToBearer",
    "AuthenticatorProvider",
    "ConfigurationError",
    "HTTPError",
    "LogSink",
    "Middleware",
    "Next",
    "NotFound",
    "NullSink",
    "Pipeline",
    "PipelineConfig",
    "PipelineError",
    "Request",
    "RequestContext",
    "Response",
    "ResponseWriter",
    "RouteDefinition",
    "SchemaValidationError",
    "SchemeAuthenticator",
    "Serializable",
    "Unauthenticated",
    "Unauthorized",
    "bearer_scheme",
    "get_request",
    "validation_error_types",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import rest_pipeline`` fast while providing a clean top-level API.
    """
    if name == "Pipeline":
        from rest_pipeline.app import Pipeline

        return Pipeline

    if name in ("PipelineConfig", "validation_error_types"):
        from rest_pipeline import config as _config

        return getattr(_config, name)

    if name in ("UNSET", "REQUIRE_PRINCIPAL"):
        from rest_pipeline._internal import types as _types

        return getattr(_types, name)

    if name == "RouteDefinition":
        from rest_pipeline.routing.table import RouteDefinition

        return RouteDefinition

    if name in ("RequestContext", "ResponseWriter", "get_request"):
        from rest_pipeline import context as _ctx

        return getattr(_ctx, name)

    if name == "Request":
        from rest_pipeline.http.request import Request

        return Request

    if name == "Response":
        from rest_pipeline.http.response import Response

        return Response

    if name == "Serializable":
        from rest_pipeline.server.normalize import Serializable

        return Serializable

    if name in ("AuthenticatorProvider", "SchemeAuthenticator", "bearer_scheme"):
        from rest_pipeline.auth import schemes as _schemes

        return getattr(_schemes, name)

    if name in ("LogSink", "NullSink"):
        from rest_pipeline import sinks as _sinks

        return getattr(_sinks, name)

    if name in ("Middleware", "Next"):
        from rest_pipeline.middleware import protocol as _mw

        return getattr(_mw, name)

    if name == "ApiKeyToBearer":
        from rest_pipeline.middleware.api_key import ApiKeyToBearer

        return ApiKeyToBearer

    if name in (
        "ConfigurationError",
        "HTTPError",
        "NotFound",
        "PipelineError",
        "SchemaValidationError",
        "Unauthenticated",
        "Unauthorized",
    ):
        from rest_pipeline import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
