"""Tests for rest_pipeline.routing.router — compiled trie-based router."""

import pytest

from rest_pipeline.errors import ConfigurationError, NotFound
from rest_pipeline.routing.params import convert_param
from rest_pipeline.routing.route import Route
from rest_pipeline.routing.router import Router, parse_path
from rest_pipeline.routing.table import RouteDefinition


def _action() -> str:
    return "ok"


def _route(path: str, method: str = "GET", route_path: str = "/") -> Route:
    return Route(path=path, method=method, definition=RouteDefinition(action=_action), route_path=route_path)


def _router(*routes: Route) -> Router:
    r = Router()
    for route in routes:
        r.add(route)
    r.compile()
    return r


class TestParsePath:
    def test_static(self) -> None:
        segments = parse_path("/users")
        assert len(segments) == 1
        assert segments[0].value == "users"
        assert segments[0].is_param is False

    def test_colon_param(self) -> None:
        segments = parse_path("/users/:id")
        assert segments[1].is_param is True
        assert segments[1].param_name == "id"
        assert segments[1].param_type == "str"

    def test_bracket_param(self) -> None:
        segments = parse_path("/users/{id}")
        assert segments[1].param_name == "id"

    def test_typed_param(self) -> None:
        segments = parse_path("/users/{id:int}")
        assert segments[1].param_type == "int"

    def test_root(self) -> None:
        assert parse_path("/") == []

    def test_trailing_slash_ignored(self) -> None:
        assert parse_path("/dev/test/") == parse_path("/dev/test")

    def test_lone_colon_is_static(self) -> None:
        assert parse_path("/:")[0].is_param is False


class TestRouterMatch:
    def test_root(self) -> None:
        match = _router(_route("/")).match("GET", "/")
        assert match.path_params == {}

    def test_static(self) -> None:
        match = _router(_route("/users")).match("GET", "/users")
        assert match.route.path == "/users"

    def test_trailing_slash(self) -> None:
        r = _router(_route("/dev/test"))
        assert r.match("GET", "/dev/test/").route.path == "/dev/test"

    def test_param_captured(self) -> None:
        match = _router(_route("/users/:id")).match("GET", "/users/42")
        assert match.path_params == {"id": "42"}

    def test_static_beats_param(self) -> None:
        r = _router(_route("/users/:id"), _route("/users/me"))
        assert r.match("GET", "/users/me").route.path == "/users/me"
        assert r.match("GET", "/users/7").route.path == "/users/:id"

    def test_typed_param_must_match(self) -> None:
        r = _router(_route("/items/{id:int}"))
        assert r.match("GET", "/items/12").path_params == {"id": "12"}
        with pytest.raises(NotFound):
            r.match("GET", "/items/twelve")

    def test_catch_all(self) -> None:
        r = _router(_route("/files/{rest:path}"))
        assert r.match("GET", "/files/a/b/c.txt").path_params == {"rest": "a/b/c.txt"}

    def test_unknown_path(self) -> None:
        with pytest.raises(NotFound):
            _router(_route("/users")).match("GET", "/posts")

    def test_method_mismatch_is_not_found(self) -> None:
        with pytest.raises(NotFound):
            _router(_route("/users")).match("DELETE", "/users")

    def test_methods_share_path(self) -> None:
        r = _router(_route("/users", "GET"), _route("/users", "POST"))
        assert r.match("POST", "/users").route.method == "POST"
        assert r.match("GET", "/users").route.method == "GET"

    def test_later_add_replaces(self) -> None:
        first = _route("/users")
        second = _route("/users")
        r = _router(first, second)
        assert r.match("GET", "/users").route is second

    def test_add_after_compile_fails(self) -> None:
        r = _router()
        with pytest.raises(RuntimeError):
            r.add(_route("/late"))

    def test_unknown_converter(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown path converter"):
            Router().add(_route("/items/{id:uuid}"))


class TestSiblingParams:
    def test_each_route_keeps_its_own_names(self) -> None:
        show = _route("/:id")
        posts = _route("/:user/posts")
        r = _router(show, posts)

        match = r.match("GET", "/5/posts")
        assert match.route is posts
        assert match.path_params == {"user": "5"}

        match = r.match("GET", "/5")
        assert match.route is show
        assert match.path_params == {"id": "5"}

    def test_different_types_at_same_level(self) -> None:
        by_id = _route("/{id:int}")
        by_slug = _route("/{slug}/info")
        r = _router(by_id, by_slug)

        assert r.match("GET", "/12").path_params == {"id": "12"}
        match = r.match("GET", "/abc/info")
        assert match.route is by_slug
        assert match.path_params == {"slug": "abc"}

    def test_narrower_type_tried_first(self) -> None:
        by_name = _route("/{name}")
        by_id = _route("/{id:int}")
        r = _router(by_name, by_id)

        assert r.match("GET", "/7").route is by_id
        assert r.match("GET", "/seven").route is by_name

    def test_same_node_different_methods_different_names(self) -> None:
        show = _route("/:id", "GET")
        replace = _route("/:key", "PUT")
        r = _router(show, replace)

        assert r.match("GET", "/a").path_params == {"id": "a"}
        assert r.match("PUT", "/a").path_params == {"key": "a"}

    def test_method_picks_branch(self) -> None:
        r = _router(_route("/{id:int}", "GET"), _route("/{slug}", "POST"))
        match = r.match("POST", "/5")
        assert match.route.method == "POST"
        assert match.path_params == {"slug": "5"}

    def test_nested_names_bound_in_order(self) -> None:
        first = _route("/:a/x/:b")
        second = _route("/:c/y/:d")
        r = _router(first, second)
        assert r.match("GET", "/1/y/2").path_params == {"c": "1", "d": "2"}
        assert r.match("GET", "/1/x/2").path_params == {"a": "1", "b": "2"}

    def test_catch_all_beside_param(self) -> None:
        r = _router(_route("/:id/meta"), _route("/{rest:path}"))
        assert r.match("GET", "/a/b/c").path_params == {"rest": "a/b/c"}
        assert r.match("GET", "/a/meta").path_params == {"id": "a"}


class TestRoute:
    def test_index(self) -> None:
        assert _route("/users", route_path="/").is_index is True
        assert _route("/users/:id", route_path="/:id").is_index is False


class TestParams:
    def test_convert(self) -> None:
        assert convert_param("5", "int") == 5
        assert convert_param("1.5", "float") == 1.5
        assert convert_param("x", "str") == "x"

    def test_convert_rejects_bad_value(self) -> None:
        with pytest.raises(ValueError):
            convert_param("x", "int")
