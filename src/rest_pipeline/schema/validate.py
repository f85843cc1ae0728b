"""Swagger 2.0 document validation.

Checks a generated document against the subset of the Swagger 2.0 JSON
Schema (draft-04) that the generator can produce, so a bad ``info``
block or a malformed ``responses`` declaration is caught before the
document is served.
"""

from collections.abc import Mapping
from typing import Any

from jsonschema import Draft4Validator

from rest_pipeline.errors import SchemaValidationError

_EXTENSIONS: dict[str, Any] = {"^x-": {}}

_OPERATION_REF = {"$ref": "#/definitions/operation"}

SWAGGER_2_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-04/schema#",
    "title": "Swagger 2.0 API document",
    "type": "object",
    "required": ["swagger", "info", "paths"],
    "additionalProperties": False,
    "patternProperties": _EXTENSIONS,
    "properties": {
        "swagger": {"enum": ["2.0"]},
        "info": {"$ref": "#/definitions/info"},
        "host": {"type": "string", "pattern": r"^[^{}/ :\\]+(?::\d+)?$"},
        "basePath": {"type": "string", "pattern": "^/"},
        "schemes": {
            "type": "array",
            "items": {"enum": ["http", "https", "ws", "wss"]},
            "uniqueItems": True,
        },
        "consumes": {"type": "array", "items": {"type": "string"}},
        "produces": {"type": "array", "items": {"type": "string"}},
        "paths": {"$ref": "#/definitions/paths"},
        "tags": {
            "type": "array",
            "items": {"$ref": "#/definitions/tag"},
            "uniqueItems": True,
        },
    },
    "definitions": {
        "info": {
            "type": "object",
            "required": ["title", "version"],
            "additionalProperties": False,
            "patternProperties": _EXTENSIONS,
            "properties": {
                "title": {"type": "string"},
                "version": {"type": "string"},
                "description": {"type": "string"},
                "termsOfService": {"type": "string"},
                "contact": {
                    "type": "object",
                    "additionalProperties": False,
                    "patternProperties": _EXTENSIONS,
                    "properties": {
                        "name": {"type": "string"},
                        "url": {"type": "string"},
                        "email": {"type": "string"},
                    },
                },
                "license": {
                    "type": "object",
                    "required": ["name"],
                    "additionalProperties": False,
                    "patternProperties": _EXTENSIONS,
                    "properties": {
                        "name": {"type": "string"},
                        "url": {"type": "string"},
                    },
                },
            },
        },
        "paths": {
            "type": "object",
            "additionalProperties": False,
            "patternProperties": {
                "^x-": {},
                "^/": {"$ref": "#/definitions/pathItem"},
            },
        },
        "pathItem": {
            "type": "object",
            "additionalProperties": False,
            "patternProperties": _EXTENSIONS,
            "properties": {
                "get": _OPERATION_REF,
                "put": _OPERATION_REF,
                "post": _OPERATION_REF,
                "delete": _OPERATION_REF,
                "options": _OPERATION_REF,
                "head": _OPERATION_REF,
                "patch": _OPERATION_REF,
                "parameters": {"type": "array", "items": {"$ref": "#/definitions/parameter"}},
            },
        },
        "operation": {
            "type": "object",
            "required": ["responses"],
            "additionalProperties": False,
            "patternProperties": _EXTENSIONS,
            "properties": {
                "tags": {"type": "array", "items": {"type": "string"}, "uniqueItems": True},
                "summary": {"type": "string"},
                "description": {"type": "string"},
                "operationId": {"type": "string"},
                "consumes": {"type": "array", "items": {"type": "string"}},
                "produces": {"type": "array", "items": {"type": "string"}},
                "parameters": {
                    "type": "array",
                    "items": {"$ref": "#/definitions/parameter"},
                    "uniqueItems": True,
                },
                "responses": {"$ref": "#/definitions/responses"},
                "deprecated": {"type": "boolean"},
            },
        },
        "parameter": {
            "type": "object",
            "required": ["name", "in"],
            "patternProperties": _EXTENSIONS,
            "properties": {
                "name": {"type": "string"},
                "in": {"enum": ["query", "header", "path", "formData", "body"]},
                "description": {"type": "string"},
                "required": {"type": "boolean"},
                "type": {"enum": ["string", "number", "integer", "boolean", "array", "file"]},
                "format": {"type": "string"},
                "schema": {"type": "object"},
            },
        },
        "responses": {
            "type": "object",
            "minProperties": 1,
            "additionalProperties": False,
            "patternProperties": {
                "^([0-9]{3})$|^(default)$": {"$ref": "#/definitions/response"},
                "^x-": {},
            },
        },
        "response": {
            "type": "object",
            "required": ["description"],
            "additionalProperties": False,
            "patternProperties": _EXTENSIONS,
            "properties": {
                "description": {"type": "string"},
                "schema": {"type": "object"},
                "headers": {"type": "object"},
                "examples": {"type": "object"},
            },
        },
        "tag": {
            "type": "object",
            "required": ["name"],
            "additionalProperties": False,
            "patternProperties": _EXTENSIONS,
            "properties": {
                "name": {"type": "string"},
                "description": {"type": "string"},
            },
        },
    },
}

_validator = Draft4Validator(SWAGGER_2_SCHEMA)


def document_errors(document: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Every schema violation in *document*, ordered by location."""
    errors: list[dict[str, Any]] = []
    for error in sorted(_validator.iter_errors(document), key=lambda e: list(map(str, e.path))):
        path = "/" + "/".join(str(part) for part in error.path)
        errors.append({"path": path, "message": error.message})
    return errors


def validate_document(document: Mapping[str, Any]) -> None:
    """Raise ``SchemaValidationError`` if *document* is not valid Swagger 2.0."""
    errors = document_errors(document)
    if errors:
        raise SchemaValidationError(errors)
