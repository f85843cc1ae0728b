"""ASGI request handling — dispatch, normalization and response sending."""
