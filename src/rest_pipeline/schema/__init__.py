"""Swagger 2.0 document generation, validation and serving."""

from rest_pipeline.schema.generator import build_document, path_parameters, swagger_path
from rest_pipeline.schema.ui import ApiDocs, render_ui_page
from rest_pipeline.schema.validate import SWAGGER_2_SCHEMA, document_errors, validate_document

__all__ = [
    "SWAGGER_2_SCHEMA",
    "ApiDocs",
    "build_document",
    "document_errors",
    "path_parameters",
    "render_ui_page",
    "swagger_path",
    "validate_document",
]
