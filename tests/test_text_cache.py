"""Tests for the agent-scoped text conversion cache."""

from __future__ import annotations

import pytest

from agent_gateway.utils.text_cache import TextConversionCache, simplified_to_traditional


class Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _counting_converter():
    calls: list[str] = []

    def convert(text: str) -> str:
        calls.append(text)
        return text.upper()

    return convert, calls


def test_cache_reuses_converted_values() -> None:
    convert, calls = _counting_converter()
    cache = TextConversionCache(convert, max_size=4)

    assert cache.convert("abc") == "ABC"
    assert cache.convert("abc") == "ABC"
    assert calls == ["abc"]


def test_cache_evicts_least_recently_used() -> None:
    convert, calls = _counting_converter()
    cache = TextConversionCache(convert, max_size=2)

    cache.convert("a")
    cache.convert("b")
    cache.convert("a")
    cache.convert("c")

    assert len(cache) == 2
    cache.convert("a")
    cache.convert("b")
    assert calls == ["a", "b", "c", "b"]


def test_cache_entries_expire_after_ttl() -> None:
    convert, calls = _counting_converter()
    clock = Clock()
    cache = TextConversionCache(convert, max_size=8, ttl_seconds=10, clock=clock)

    cache.convert("a")
    clock.now = 9.9
    cache.convert("a")
    clock.now = 10.0
    cache.convert("a")

    assert calls == ["a", "a"]


def test_cache_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        TextConversionCache(str.upper, max_size=0)


def test_instances_do_not_share_entries() -> None:
    convert, calls = _counting_converter()
    first = TextConversionCache(convert)
    second = TextConversionCache(convert)

    first.convert("x")
    second.convert("x")

    assert calls == ["x", "x"]


def test_opencc_converts_simplified_to_traditional() -> None:
    convert = simplified_to_traditional()

    assert convert("简体中文") == "簡體中文"
