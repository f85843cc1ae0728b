"""Middleware — ``async (request, next)`` callables wrapped around dispatch."""

from rest_pipeline.middleware.api_key import ApiKeyToBearer
from rest_pipeline.middleware.protocol import Middleware, Next

__all__ = ["ApiKeyToBearer", "Middleware", "Next"]
