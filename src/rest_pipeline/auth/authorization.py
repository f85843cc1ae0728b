"""Authorization stage — is this principal allowed?

Resolves a route's authorization spec against the request:

- ``UNSET`` / ``REQUIRE_PRINCIPAL`` — passes when the authentication
  stage attached a principal.
- ``None`` — always passes.
- callable — a predicate invoked with the request; passes when it
  returns ``None`` or ``True``.
- ``str`` — a role; passes when a principal exists and the configured
  role checker accepts ``(principal, role)``.
- list or tuple — "any of": every element is checked concurrently and
  the first success authorizes the request.

Every failure, including a predicate or role checker raising, becomes
``Unauthorized``.
"""

import asyncio
import logging
from collections.abc import Sequence

from rest_pipeline._internal.invoke import invoke, is_pass
from rest_pipeline._internal.types import REQUIRE_PRINCIPAL, UNSET, AuthorizationSpec, RoleChecker
from rest_pipeline.auth.specs import validate_authorization
from rest_pipeline.errors import ConfigurationError, Unauthorized
from rest_pipeline.http.request import Request

logger = logging.getLogger("rest_pipeline.auth")

# Checks still running after an "any of" list resolved. Held so the event
# loop does not garbage-collect them mid-flight; they drop out when done.
_stragglers: set[asyncio.Task[bool]] = set()


async def authorize(
    request: Request,
    spec: AuthorizationSpec,
    role_checker: RoleChecker,
) -> None:
    """Run the authorization stage, raising ``Unauthorized`` on failure."""
    if not await check(request, spec, role_checker):
        raise Unauthorized()


async def check(request: Request, spec: AuthorizationSpec, role_checker: RoleChecker) -> bool:
    """Evaluate one authorization spec. Never raises for a failed check."""
    if spec is UNSET or spec is REQUIRE_PRINCIPAL:
        return request.principal is not None

    if spec is None:
        return True

    if isinstance(spec, str):
        return await _check_role(request, spec, role_checker)

    if isinstance(spec, (list, tuple)):
        return await any_of(request, spec, role_checker)

    if callable(spec):
        try:
            result = await invoke(spec, request)
        except Exception as exc:
            logger.debug("Authorization predicate raised: %r", exc)
            return False
        return is_pass(result)

    msg = f"Unsupported authorization spec {spec!r}."
    raise ConfigurationError(msg)


async def _check_role(request: Request, role: str, role_checker: RoleChecker) -> bool:
    principal = request.principal
    if principal is None:
        return False
    try:
        return bool(await invoke(role_checker, principal, role))
    except Exception as exc:
        logger.debug("Role checker raised for role %r: %r", role, exc)
        return False


async def any_of(
    request: Request,
    specs: Sequence[AuthorizationSpec],
    role_checker: RoleChecker,
) -> bool:
    """Race every spec; ``True`` as soon as one passes.

    Returns ``False`` only once every spec has failed (an empty list
    fails). Which of several passing checks is seen first is not
    defined. Checks still in flight when the race resolves keep running
    and their results are discarded; nothing is cancelled.
    """
    if not specs:
        return False
    validate_authorization(list(specs), allow_unset=False)

    pending: set[asyncio.Task[bool]] = {
        asyncio.ensure_future(_check_quietly(request, spec, role_checker)) for spec in specs
    }
    try:
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            if any(task.result() for task in done):
                return True
        return False
    finally:
        for task in pending:
            _stragglers.add(task)
            task.add_done_callback(_stragglers.discard)


async def _check_quietly(request: Request, spec: AuthorizationSpec, role_checker: RoleChecker) -> bool:
    try:
        return await check(request, spec, role_checker)
    except Exception as exc:
        logger.debug("Authorization check raised: %r", exc)
        return False
