"""Named authentication schemes.

A route with ``authentication="bearer"`` delegates to the configured
``AuthenticatorProvider`` by scheme name. The provider returns the
principal on success, or ``None`` (or raises) on failure.

``SchemeAuthenticator`` is the built-in provider: a registry of scheme
name -> verifier callable. ``bearer_scheme`` builds a verifier for
``Authorization: Bearer <token>`` headers::

    async def verify_token(token: str) -> User | None:
        return await db.users.by_token(token)

    config = PipelineConfig(
        authenticator=SchemeAuthenticator({"bearer": bearer_scheme(verify_token)}),
    )
"""

from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable

from rest_pipeline._internal.invoke import invoke
from rest_pipeline.http.request import Request

# Verifier: (request) -> principal | None, sync or async
type Verifier = Callable[[Request], Any]


@runtime_checkable
class AuthenticatorProvider(Protocol):
    """Resolves a named scheme for one request.

    Returns the principal, or ``None`` when the request carries no valid
    credential for *scheme*. May be sync or async.
    """

    def authenticate(self, scheme: str, request: Request) -> Any: ...


class SchemeAuthenticator:
    """Registry of named scheme verifiers.

    Scheme names are compared case-insensitively. An unknown scheme
    authenticates nobody.
    """

    __slots__ = ("_schemes",)

    def __init__(self, schemes: Mapping[str, Verifier] | None = None) -> None:
        self._schemes: dict[str, Verifier] = {
            name.lower(): verifier for name, verifier in (schemes or {}).items()
        }

    def add(self, name: str, verifier: Verifier) -> None:
        """Register (or replace) the verifier for *name*."""
        self._schemes[name.lower()] = verifier

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._schemes

    async def authenticate(self, scheme: str, request: Request) -> Any:
        verifier = self._schemes.get(scheme.lower())
        if verifier is None:
            return None
        return await invoke(verifier, request)


def extract_token(request: Request, *, header: str = "Authorization", prefix: str = "Bearer") -> str | None:
    """Pull the credential out of ``<header>: <prefix> <token>``.

    Returns ``None`` when the header is missing, uses a different scheme
    prefix, or carries an empty token.
    """
    value = request.headers.get(header)
    if value is None:
        return None

    scheme_prefix = f"{prefix} "
    if not value.startswith(scheme_prefix):
        return None

    token = value[len(scheme_prefix) :].strip()
    return token if token else None


def bearer_scheme(
    verify_token: Callable[[str], Any],
    *,
    header: str = "Authorization",
    prefix: str = "Bearer",
) -> Verifier:
    """Build a verifier that checks a bearer token with *verify_token*.

    *verify_token* receives the raw token and returns the principal or
    ``None``; it may be sync or async.
    """

    async def verify(request: Request) -> Any:
        token = extract_token(request, header=header, prefix=prefix)
        if token is None:
            return None
        return await invoke(verify_token, token)

    return verify
