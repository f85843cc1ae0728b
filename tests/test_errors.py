"""Tests for rest_pipeline.errors and the server error mapping."""

import logging
from typing import Any

import pytest

from rest_pipeline.errors import (
    ConfigurationError,
    HTTPError,
    NotFound,
    PipelineError,
    SchemaValidationError,
    Unauthenticated,
    Unauthorized,
)
from rest_pipeline.http.request import Request
from rest_pipeline.server.errors import handle_http_error, handle_internal_error


async def _receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


def _request() -> Request:
    return Request.from_asgi({"type": "http", "method": "GET", "path": "/x"}, _receive)


class TestHierarchy:
    @pytest.mark.parametrize(
        ("exc", "status"),
        [(NotFound(), 404), (Unauthenticated(), 401), (Unauthorized(), 403)],
    )
    def test_status(self, exc: HTTPError, status: int) -> None:
        assert exc.status == status
        assert isinstance(exc, PipelineError)

    def test_str(self) -> None:
        assert str(Unauthenticated()) == "401: authentication failed"
        assert str(HTTPError(status=418)) == "418"

    def test_configuration_error_is_pipeline_error(self) -> None:
        assert issubclass(ConfigurationError, PipelineError)

    def test_schema_validation_error_summary(self) -> None:
        exc = SchemaValidationError([{"path": "/info/version", "message": "bad"}])
        assert exc.errors == [{"path": "/info/version", "message": "bad"}]
        assert "/info/version: bad" in str(exc)


class TestHandlers:
    def test_http_error_is_bodyless(self) -> None:
        exc = HTTPError(status=401, headers=(("WWW-Authenticate", "Bearer"),))
        response = handle_http_error(exc, _request())
        assert response.status == 401
        assert response.body == ""
        assert response.content_type is None
        assert response.header("WWW-Authenticate") == "Bearer"

    def test_internal_error_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="rest_pipeline.server"):
            response = handle_internal_error(RuntimeError("kaboom"), _request())
        assert response.status == 500
        assert response.body == ""
        assert "kaboom" in caplog.text
