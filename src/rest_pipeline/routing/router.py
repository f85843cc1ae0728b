"""Compiled router with trie-based path matching.

Routes are added when the route table is compiled and frozen into an
immutable lookup structure before the first request is matched.
"""

import re
from dataclasses import dataclass

from rest_pipeline.errors import ConfigurationError, NotFound
from rest_pipeline.routing.params import CONVERTERS
from rest_pipeline.routing.route import PathSegment, Route, RouteMatch


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/:id"      -> [PathSegment("users"), PathSegment(":id", is_param=True, ...)]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/{id:int}" -> [..., PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{path:path}" -> [..., PathSegment("{path:path}", is_param=True, param_type="path")]

    Leading, trailing and doubled slashes are ignored, so ``/test`` and
    ``/test/`` parse to the same segments.
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith(":") and len(part) > 1:
            segments.append(PathSegment(value=part, is_param=True, param_name=part[1:]))
        elif part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            if ":" in inner:
                param_name, param_type = inner.split(":", 1)
            else:
                param_name = inner
                param_type = "str"
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


# Order in which sibling parameter edges are tried; narrower converters first
_PARAM_PRIORITY: dict[str, int] = {"int": 0, "float": 1, "str": 2}


@dataclass(frozen=True, slots=True)
class _Endpoint:
    """A route plus the names its captured values are bound to, in order."""

    route: Route
    param_names: tuple[str, ...]


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all", "children", "param_children", "routes_by_method")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Parameter children keyed by converter type, tried in priority order
        self.param_children: dict[str, _ParamEdge] = {}
        # Catch-all endpoints (path converter), keyed by HTTP method
        self.catch_all: dict[str, _Endpoint] = {}
        # Endpoints at this node, keyed by HTTP method
        self.routes_by_method: dict[str, _Endpoint] = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie, shared by every route whose segment
    at this level uses the same converter, whatever it names the value."""

    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.add(Route("/users", "GET", definition))
        router.add(Route("/users/:id", "GET", definition))
        router.compile()
        match = router.match("GET", "/users/42")

    Captured values are bound to the names of the route that matched, so
    ``/:id`` and ``/:user/posts`` can sit side by side. A later ``add``
    for the same (path, method) replaces the earlier one.
    """

    __slots__ = ("_compiled", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        segments = parse_path(route.path)
        endpoint = _Endpoint(
            route=route,
            param_names=tuple(seg.param_name or "" for seg in segments if seg.is_param),
        )
        node = self._root

        for seg in segments:
            if seg.is_param and seg.param_type not in CONVERTERS:
                msg = f"Unknown path converter {seg.param_type!r} in {route.path!r}."
                raise ConfigurationError(msg)

            if seg.is_param and seg.param_type == "path":
                # Catch-all: consumes rest of path, must be last segment
                node.catch_all[route.method] = endpoint
                return

            if seg.is_param:
                edge = node.param_children.get(seg.param_type)
                if edge is None:
                    pattern, _ = CONVERTERS[seg.param_type]
                    edge = _ParamEdge(
                        param_type=seg.param_type,
                        regex=re.compile(f"^{pattern}$"),
                        node=_TrieNode(),
                    )
                    node.param_children[seg.param_type] = edge
                    node.param_children = dict(
                        sorted(node.param_children.items(), key=lambda item: _PARAM_PRIORITY[item[0]])
                    )
                node = edge.node
            else:
                if seg.value not in node.children:
                    node.children[seg.value] = _TrieNode()
                node = node.children[seg.value]

        node.routes_by_method[route.method] = endpoint

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Returns a ``RouteMatch`` on success. Raises ``NotFound`` when no
        route serves *method* at *path*.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, method, ())

        if result is None:
            raise NotFound(f"No route matches {method} {path!r}")

        endpoint, values = result
        return RouteMatch(
            route=endpoint.route,
            path_params=dict(zip(endpoint.param_names, values, strict=True)),
        )

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        method: str,
        values: tuple[str, ...],
    ) -> tuple[_Endpoint, tuple[str, ...]] | None:
        """Recursively match path parts against the trie."""
        if index == len(parts):
            endpoint = node.routes_by_method.get(method)
            if endpoint is not None:
                return endpoint, values
            return None

        part = parts[index]

        # 1. Static child first (exact match)
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, method, values)
            if result is not None:
                return result

        # 2. Parameter children, narrowest converter first
        for edge in node.param_children.values():
            if edge.regex.match(part):
                result = self._match_node(edge.node, parts, index + 1, method, (*values, part))
                if result is not None:
                    return result

        # 3. Catch-all
        endpoint = node.catch_all.get(method)
        if endpoint is not None:
            return endpoint, (*values, "/".join(parts[index:]))

        return None
