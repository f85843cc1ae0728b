"""Authentication stage — who is making this request?

Resolves a route's authentication spec against the request:

- ``None`` — no authentication; always passes.
- callable — a predicate invoked with the request; passes when it
  returns ``None`` or ``True``.
- ``str`` — a named scheme delegated to the configured
  ``AuthenticatorProvider``; passes when the provider returns a
  principal, which is attached to the request.

Every failure, including a predicate or provider raising, becomes
``Unauthenticated``. No retries.
"""

import logging
from typing import Any

from rest_pipeline._internal.invoke import invoke, is_pass
from rest_pipeline._internal.types import UNSET, AuthenticationSpec
from rest_pipeline.auth.schemes import AuthenticatorProvider
from rest_pipeline.errors import ConfigurationError, Unauthenticated
from rest_pipeline.http.request import Request

logger = logging.getLogger("rest_pipeline.auth")


async def authenticate(
    request: Request,
    spec: AuthenticationSpec,
    authenticator: AuthenticatorProvider | None = None,
) -> None:
    """Run the authentication stage, raising ``Unauthenticated`` on failure."""
    if spec is None:
        return

    if spec is UNSET:
        msg = "authenticate() needs a resolved spec; merge config defaults first."
        raise ConfigurationError(msg)

    if isinstance(spec, str):
        principal = await _authenticate_scheme(request, spec, authenticator)
        request.set_principal(principal)
        return

    if callable(spec):
        try:
            result = await invoke(spec, request)
        except Exception as exc:
            logger.debug("Authentication predicate raised: %r", exc)
            raise Unauthenticated() from exc
        if not is_pass(result):
            raise Unauthenticated()
        return

    msg = f"Unsupported authentication spec {spec!r}."
    raise ConfigurationError(msg)


async def _authenticate_scheme(
    request: Request,
    scheme: str,
    authenticator: AuthenticatorProvider | None,
) -> Any:
    if authenticator is None:
        # Fail closed: a named scheme without a provider authenticates nobody
        logger.debug("No authenticator configured for scheme %r", scheme)
        raise Unauthenticated(f"no authenticator for scheme {scheme!r}")

    try:
        principal = await invoke(authenticator.authenticate, scheme, request)
    except Exception as exc:
        logger.debug("Authenticator raised for scheme %r: %r", scheme, exc)
        raise Unauthenticated() from exc

    if principal is None:
        raise Unauthenticated()
    return principal
