"""Route and RouteMatch frozen dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rest_pipeline.routing.table import RouteDefinition


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``     (is_param=False)
    Param:   ``/:id``       (is_param=True, param_name="id")
    Param:   ``/{id}``      (is_param=True, param_name="id")
    Typed:   ``/{id:int}``  (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """One (full path, method) pair compiled from the route table.

    ``controller`` is the owning controller's name (``None`` at the root)
    and ``route_path`` the path key as written in the controller
    definition (``"/"`` for the controller's index).
    """

    path: str
    method: str
    definition: RouteDefinition
    controller: str | None = None
    route_path: str = "/"

    @property
    def is_index(self) -> bool:
        """Whether this route is its controller's bare index path."""
        return self.route_path == "/"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
