"""Route table — controller definitions keyed by controller prefix.

A controller definition maps route paths to per-method route definitions::

    {
        "/": {"get": list_users, "post": {"action": create_user, "authorization": "admin"}},
        "/:id": {"GET": RouteDefinition(action=get_user)},
    }

Each per-method value may be a bare callable (the action), a mapping of
``RouteDefinition`` fields, or a ``RouteDefinition``. Method keys are
case-insensitive.

The table is append-only during registration, except that registering
an existing prefix again replaces that controller wholesale: last write
wins, the two definitions are never merged.
"""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

from rest_pipeline._internal.types import UNSET, Action, AuthenticationSpec, AuthorizationSpec
from rest_pipeline.auth.specs import validate_authentication, validate_authorization
from rest_pipeline.errors import ConfigurationError
from rest_pipeline.routing.params import CONVERTERS
from rest_pipeline.routing.route import Route
from rest_pipeline.routing.router import Router, parse_path

logger = logging.getLogger("rest_pipeline.routing")

METHODS: frozenset[str] = frozenset({"GET", "PUT", "POST", "DELETE"})

# Never served on a controller's bare index path, whatever is registered
INDEX_REJECTED_METHODS: frozenset[str] = frozenset({"PUT", "DELETE"})


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """Per-path-and-method bundle of action and auth specs.

    ``authentication`` and ``authorization`` left as ``UNSET`` are filled
    from ``PipelineConfig`` defaults when a request is dispatched.
    ``summary``, ``description`` and ``responses`` only feed the
    generated API document.
    """

    action: Action
    authentication: AuthenticationSpec = UNSET
    authorization: AuthorizationSpec = UNSET
    summary: str | None = None
    description: str | None = None
    responses: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        validate_authentication(self.authentication)
        validate_authorization(self.authorization)

    def with_defaults(
        self,
        authentication: AuthenticationSpec,
        authorization: AuthorizationSpec,
    ) -> "RouteDefinition":
        """Return a copy with ``UNSET`` auth fields filled from the defaults."""
        changes: dict[str, Any] = {}
        if self.authentication is UNSET:
            changes["authentication"] = authentication
        if self.authorization is UNSET:
            changes["authorization"] = authorization
        return replace(self, **changes) if changes else self

    @classmethod
    def coerce(cls, value: Any, *, where: str = "") -> "RouteDefinition":
        """Build a RouteDefinition from any accepted controller shape."""
        if isinstance(value, RouteDefinition):
            return value
        if callable(value):
            return cls(action=value)
        if isinstance(value, Mapping):
            known = {f.name for f in fields(cls)}
            unknown = set(value) - known
            if unknown:
                msg = f"Unknown route definition keys {sorted(unknown)} for {where}."
                raise ConfigurationError(msg)
            if not callable(value.get("action")):
                msg = f"Route definition for {where} needs a callable 'action'."
                raise ConfigurationError(msg)
            try:
                return cls(**value)
            except ConfigurationError as exc:
                msg = f"{exc} (route {where})"
                raise ConfigurationError(msg) from exc
        msg = (
            f"Route definition for {where} must be a callable, a mapping, "
            f"or a RouteDefinition, not {type(value).__name__}."
        )
        raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class Controller:
    """A named group of route definitions under a common prefix."""

    name: str | None
    prefix: str
    routes: dict[str, dict[str, RouteDefinition]] = field(default_factory=dict)

    @property
    def tag(self) -> str:
        """Label used to group this controller's entries in the API document."""
        return self.name or "root"

    def full_path(self, route_path: str) -> str:
        """The request path a route key is served at."""
        path = self.prefix + ("" if route_path == "/" else route_path)
        return path or "/"


def controller_prefix(name: str | None, prefix: str = "") -> str:
    """Compute the path prefix a controller is mounted under.

    ``("test", "/dev")`` -> ``"/dev/test"``; ``(None, "/dev")`` -> ``"/dev"``;
    ``(None, "")`` -> ``""`` (the root).
    """
    prefix = prefix.rstrip("/")
    if name is None:
        return prefix
    return f"{prefix}/{name.strip('/')}"


def _normalize_controller(definition: Mapping[str, Any], prefix: str) -> dict[str, dict[str, RouteDefinition]]:
    routes: dict[str, dict[str, RouteDefinition]] = {}
    for route_path, methods in definition.items():
        if not isinstance(route_path, str) or not route_path.startswith("/"):
            msg = f"Route path {route_path!r} under {prefix or '/'!r} must start with '/'."
            raise ConfigurationError(msg)
        if not isinstance(methods, Mapping):
            msg = f"Route {route_path!r} must map HTTP methods to route definitions."
            raise ConfigurationError(msg)
        for seg in parse_path(route_path):
            if seg.is_param and seg.param_type not in CONVERTERS:
                msg = f"Unknown path converter {seg.param_type!r} in {route_path!r}."
                raise ConfigurationError(msg)

        by_method: dict[str, RouteDefinition] = {}
        for method, value in methods.items():
            upper = str(method).upper()
            if upper not in METHODS:
                msg = (
                    f"Unsupported method {method!r} on {route_path!r}. "
                    f"Supported: {', '.join(sorted(METHODS))}."
                )
                raise ConfigurationError(msg)
            by_method[upper] = RouteDefinition.coerce(value, where=f"{upper} {route_path}")
        routes[route_path] = by_method
    return routes


class RouteTable:
    """Mapping from controller prefix to its route definitions.

    Iteration yields controllers in registration order. Replacing a
    prefix keeps the controller's original position.
    """

    __slots__ = ("_controllers", "_version")

    def __init__(self) -> None:
        self._controllers: dict[str, Controller] = {}
        self._version = 0

    def register(
        self,
        name: str | None,
        definition: Mapping[str, Any],
        prefix: str = "",
    ) -> Controller:
        """Add (or replace) the controller mounted at the computed prefix."""
        mount = controller_prefix(name, prefix)
        controller = Controller(
            name=name,
            prefix=mount,
            routes=_normalize_controller(definition, mount),
        )
        if mount in self._controllers:
            logger.debug("Replacing controller registered at %r", mount or "/")
        self._controllers[mount] = controller
        self._version += 1
        return controller

    @property
    def version(self) -> int:
        """Incremented on every registration; used to detect stale routers."""
        return self._version

    def __iter__(self) -> Iterator[Controller]:
        return iter(self._controllers.values())

    def __len__(self) -> int:
        return len(self._controllers)

    def __contains__(self, prefix: object) -> bool:
        return prefix in self._controllers

    def get(self, prefix: str) -> Controller | None:
        """Return the controller mounted at *prefix*, if any."""
        return self._controllers.get(prefix)

    def routes(self) -> Iterator[Route]:
        """Yield one Route per (controller, path, method)."""
        for controller in self:
            for route_path, by_method in controller.routes.items():
                for method, definition in by_method.items():
                    yield Route(
                        path=controller.full_path(route_path),
                        method=method,
                        definition=definition,
                        controller=controller.name,
                        route_path=route_path,
                    )

    def compile(self) -> Router:
        """Build a frozen Router from the current table."""
        router = Router()
        for route in self.routes():
            router.add(route)
        router.compile()
        return router
