"""Registration-time checks for authentication and authorization specs.

Route definitions and ``PipelineConfig`` run these when they are built,
so a malformed spec fails with ``ConfigurationError`` at registration
instead of while a request is being served.
"""

from typing import Any

from rest_pipeline._internal.types import REQUIRE_PRINCIPAL, UNSET
from rest_pipeline.errors import ConfigurationError


def validate_authentication(spec: Any, *, allow_unset: bool = True) -> None:
    """Accept ``None``, a scheme name, a predicate, or (optionally) ``UNSET``."""
    if spec is UNSET:
        if allow_unset:
            return
    elif spec is None or isinstance(spec, str) or callable(spec):
        return
    msg = f"Unsupported authentication spec {spec!r}."
    raise ConfigurationError(msg)


def validate_authorization(spec: Any, *, allow_unset: bool = True) -> None:
    """Accept every authorization form, recursing into any-of lists.

    ``UNSET`` is only meaningful at the top of a route definition and is
    rejected inside a list.
    """
    if spec is UNSET:
        if allow_unset:
            return
    elif spec is None or spec is REQUIRE_PRINCIPAL or isinstance(spec, str):
        return
    elif isinstance(spec, (list, tuple)):
        for element in spec:
            validate_authorization(element, allow_unset=False)
        return
    elif callable(spec):
        return
    msg = f"Unsupported authorization spec {spec!r}."
    raise ConfigurationError(msg)
