"""Tests for rest_pipeline.auth.authorization — principal, role, predicate and any-of checks."""

import asyncio
from typing import Any

import pytest

from rest_pipeline._internal.types import REQUIRE_PRINCIPAL, UNSET
from rest_pipeline.auth import authorization as authorization_module
from rest_pipeline.auth.authorization import any_of, authorize, check
from rest_pipeline.auth.specs import validate_authentication, validate_authorization
from rest_pipeline.config import deny_all_roles
from rest_pipeline.errors import ConfigurationError, Unauthorized
from rest_pipeline.http.request import Request


async def _receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


def _request(principal: Any = None) -> Request:
    request = Request.from_asgi({"type": "http", "method": "GET", "path": "/"}, _receive)
    if principal is not None:
        request.set_principal(principal)
    return request


def _roles(principal: dict[str, Any], role: str) -> bool:
    return role in principal.get("roles", ())


async def _async_roles(principal: dict[str, Any], role: str) -> bool:
    await asyncio.sleep(0)
    return role in principal.get("roles", ())


def _fail(request: Request) -> bool:
    return False


def _pass(request: Request) -> None:
    return None


ADMIN = {"name": "root", "roles": ["admin"]}
READER = {"name": "guest", "roles": ["reader"]}


class TestPrincipalRequired:
    @pytest.mark.parametrize("spec", [UNSET, REQUIRE_PRINCIPAL])
    async def test_passes_with_principal(self, spec: Any) -> None:
        await authorize(_request(READER), spec, deny_all_roles)

    @pytest.mark.parametrize("spec", [UNSET, REQUIRE_PRINCIPAL])
    async def test_fails_without_principal(self, spec: Any) -> None:
        with pytest.raises(Unauthorized) as exc_info:
            await authorize(_request(), spec, deny_all_roles)
        assert exc_info.value.status == 403


class TestNone:
    async def test_always_allows(self) -> None:
        await authorize(_request(), None, deny_all_roles)


class TestPredicate:
    async def test_pass(self) -> None:
        await authorize(_request(), _pass, deny_all_roles)

    async def test_fail(self) -> None:
        with pytest.raises(Unauthorized):
            await authorize(_request(), _fail, deny_all_roles)

    async def test_non_boolean_result_fails(self) -> None:
        with pytest.raises(Unauthorized):
            await authorize(_request(), lambda request: 1, deny_all_roles)

    async def test_raising_fails(self) -> None:
        def boom(request: Request) -> None:
            raise RuntimeError

        with pytest.raises(Unauthorized):
            await authorize(_request(), boom, deny_all_roles)

    async def test_predicate_sees_principal(self) -> None:
        def is_root(request: Request) -> bool:
            return request.principal["name"] == "root"

        await authorize(_request(ADMIN), is_root, deny_all_roles)


class TestRole:
    async def test_role_held(self) -> None:
        await authorize(_request(ADMIN), "admin", _roles)

    async def test_role_missing(self) -> None:
        with pytest.raises(Unauthorized):
            await authorize(_request(READER), "admin", _roles)

    async def test_async_role_checker(self) -> None:
        await authorize(_request(ADMIN), "admin", _async_roles)

    async def test_no_principal_skips_checker(self) -> None:
        calls: list[str] = []

        def record(principal: Any, role: str) -> bool:
            calls.append(role)
            return True

        with pytest.raises(Unauthorized):
            await authorize(_request(), "admin", record)
        assert calls == []

    async def test_default_checker_denies(self) -> None:
        with pytest.raises(Unauthorized):
            await authorize(_request(ADMIN), "admin", deny_all_roles)

    async def test_raising_checker_fails(self) -> None:
        def boom(principal: Any, role: str) -> bool:
            raise KeyError(role)

        with pytest.raises(Unauthorized):
            await authorize(_request(ADMIN), "admin", boom)


class TestAnyOf:
    @pytest.mark.parametrize("position", [0, 1, 2])
    async def test_single_success_anywhere(self, position: int) -> None:
        specs: list[Any] = [_fail, _fail, _fail]
        specs[position] = "admin"
        await authorize(_request(ADMIN), specs, _roles)

    async def test_all_failing(self) -> None:
        with pytest.raises(Unauthorized):
            await authorize(_request(READER), ["admin", _fail, "owner"], _roles)

    async def test_empty_list_fails(self) -> None:
        with pytest.raises(Unauthorized):
            await authorize(_request(ADMIN), [], _roles)

    async def test_tuple_accepted(self) -> None:
        await authorize(_request(READER), ("admin", "reader"), _roles)

    async def test_nested_list(self) -> None:
        await authorize(_request(READER), [_fail, ["admin", "reader"]], _roles)

    async def test_raising_element_does_not_block_success(self) -> None:
        def boom(request: Request) -> None:
            raise RuntimeError

        await authorize(_request(READER), [boom, "reader"], _roles)

    async def test_first_success_wins_without_waiting(self) -> None:
        release = asyncio.Event()
        finished: list[str] = []

        async def slow(request: Request) -> bool:
            await release.wait()
            finished.append("slow")
            return False

        assert await any_of(_request(), [slow, None], deny_all_roles) is True
        assert finished == []

        # The straggler was not cancelled; it completes once released
        release.set()
        for _ in range(5):
            await asyncio.sleep(0)
        assert finished == ["slow"]
        assert not authorization_module._stragglers

    async def test_waits_for_every_failure(self) -> None:
        order: list[str] = []

        async def late_fail(request: Request) -> bool:
            await asyncio.sleep(0)
            order.append("late")
            return False

        assert await any_of(_request(), [_fail, late_fail], deny_all_roles) is False
        assert order == ["late"]


class TestCheck:
    async def test_unsupported_spec(self) -> None:
        with pytest.raises(ConfigurationError):
            await check(_request(), 3.5, deny_all_roles)  # type: ignore[arg-type]

    async def test_unsupported_element_in_list(self) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported authorization spec 5"):
            await any_of(_request(ADMIN), [_pass, 5], _roles)


class TestValidateSpecs:
    @pytest.mark.parametrize(
        "spec",
        [UNSET, REQUIRE_PRINCIPAL, None, "admin", _pass, ["admin", _fail], ("a", ["b", None])],
    )
    def test_accepted_authorization(self, spec: Any) -> None:
        validate_authorization(spec)

    @pytest.mark.parametrize("spec", [5, 3.5, [_pass, 5], ["admin", [object()]], [UNSET]])
    def test_rejected_authorization(self, spec: Any) -> None:
        with pytest.raises(ConfigurationError):
            validate_authorization(spec)

    def test_unset_rejected_when_disallowed(self) -> None:
        with pytest.raises(ConfigurationError):
            validate_authorization(UNSET, allow_unset=False)
        with pytest.raises(ConfigurationError):
            validate_authentication(UNSET, allow_unset=False)

    @pytest.mark.parametrize("spec", [UNSET, None, "bearer", _pass])
    def test_accepted_authentication(self, spec: Any) -> None:
        validate_authentication(spec)

    @pytest.mark.parametrize("spec", [REQUIRE_PRINCIPAL, ["bearer"], 0])
    def test_rejected_authentication(self, spec: Any) -> None:
        with pytest.raises(ConfigurationError):
            validate_authentication(spec)
