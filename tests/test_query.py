"""Tests for rest_pipeline.http.query — immutable QueryParams."""

import pytest

from rest_pipeline.http.query import QueryParams


class TestQueryParams:
    def test_getitem(self) -> None:
        q = QueryParams(b"q=hello&page=2")
        assert q["q"] == "hello"
        assert q["page"] == "2"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            QueryParams(b"q=hello")["missing"]

    def test_multi_value(self) -> None:
        q = QueryParams(b"tag=a&tag=b")
        assert q["tag"] == "a"
        assert q.get_list("tag") == ["a", "b"]
        assert q.get_list("missing") == []

    def test_blank_values_kept(self) -> None:
        q = QueryParams(b"api_key=&x=1")
        assert q["api_key"] == ""
        assert q.get("api_key", "d") == ""

    def test_percent_decoding(self) -> None:
        assert QueryParams(b"q=a%20b")["q"] == "a b"

    def test_len_and_iter(self) -> None:
        q = QueryParams(b"a=1&b=2")
        assert len(q) == 2
        assert sorted(q) == ["a", "b"]

    def test_raw(self) -> None:
        assert QueryParams(b"a=1").raw == b"a=1"

    def test_empty(self) -> None:
        q = QueryParams()
        assert len(q) == 0
        assert q.get("a") is None
