"""Swagger 2.0 document generation from the route table.

One ``paths`` entry per (controller prefix, route path), one operation
per method. Path parameters written as ``:id`` or ``{id:int}`` are
rewritten to ``{id}`` and listed under the operation's ``parameters``.
Controllers are walked in registration order, so the document reflects
every registration made before it was built.
"""

import logging
from collections.abc import Mapping
from typing import Any

from rest_pipeline.routing.router import parse_path
from rest_pipeline.routing.table import INDEX_REJECTED_METHODS, Controller, RouteDefinition, RouteTable

logger = logging.getLogger("rest_pipeline.schema")

DEFAULT_INFO: dict[str, str] = {"title": "API", "version": "1.0.0"}

DEFAULT_RESPONSES: dict[str, dict[str, str]] = {
    "default": {"description": "Unspecified response"},
}

# Path segment converter -> Swagger parameter type
_PARAM_TYPES: dict[str, str] = {
    "str": "string",
    "int": "integer",
    "float": "number",
    "path": "string",
}


def build_document(
    table: RouteTable,
    info: Mapping[str, Any] | None = None,
    *,
    host: str | None = None,
    base_path: str | None = None,
) -> dict[str, Any]:
    """Build a Swagger 2.0 document describing every registered route."""
    document: dict[str, Any] = {
        "swagger": "2.0",
        "info": {**DEFAULT_INFO, **(info or {})},
    }
    if host is not None:
        document["host"] = host
    if base_path is not None:
        document["basePath"] = base_path

    paths: dict[str, dict[str, Any]] = {}
    tags: list[dict[str, str]] = []
    seen_tags: set[str] = set()

    for controller in table:
        if controller.tag not in seen_tags:
            seen_tags.add(controller.tag)
            tags.append({"name": controller.tag})

        for route_path, by_method in controller.routes.items():
            full_path = controller.full_path(route_path)
            item = paths.setdefault(swagger_path(full_path), {})
            for method, definition in by_method.items():
                if route_path == "/" and method in INDEX_REJECTED_METHODS:
                    continue
                item[method.lower()] = _operation(controller, full_path, definition)

    document["paths"] = paths
    document["tags"] = tags
    logger.debug("Built API document: %d paths, %d tags", len(paths), len(tags))
    return document


def swagger_path(path: str) -> str:
    """Rewrite a route path into Swagger's ``/users/{id}`` template form."""
    parts = []
    for seg in parse_path(path):
        parts.append(f"{{{seg.param_name}}}" if seg.is_param else seg.value)
    return "/" + "/".join(parts)


def _operation(controller: Controller, full_path: str, definition: RouteDefinition) -> dict[str, Any]:
    operation: dict[str, Any] = {"tags": [controller.tag]}
    if definition.summary:
        operation["summary"] = definition.summary
    if definition.description:
        operation["description"] = definition.description

    parameters = path_parameters(full_path)
    if parameters:
        operation["parameters"] = parameters

    if definition.responses:
        operation["responses"] = {str(code): dict(spec) for code, spec in definition.responses.items()}
    else:
        operation["responses"] = {k: dict(v) for k, v in DEFAULT_RESPONSES.items()}
    return operation


def path_parameters(path: str) -> list[dict[str, Any]]:
    """Swagger parameter objects for each path parameter in *path*."""
    return [
        {
            "name": seg.param_name,
            "in": "path",
            "required": True,
            "type": _PARAM_TYPES.get(seg.param_type, "string"),
        }
        for seg in parse_path(path)
        if seg.is_param
    ]
