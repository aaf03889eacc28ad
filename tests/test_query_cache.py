"""Tests for the query cache."""

import pytest

from koperasi.context.query_cache import QueryCache


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def cache(clock):
    return QueryCache(stale_seconds=300, clock=clock)


class Loader:
    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.values.pop(0)


def test_fetch_uses_cache_while_fresh(cache, clock):
    loader = Loader(["a"], ["b"])
    assert cache.fetch("k", loader) == ["a"]
    clock.now += 299
    assert cache.fetch("k", loader) == ["a"]
    assert loader.calls == 1


def test_fetch_reloads_when_stale(cache, clock):
    loader = Loader(["a"], ["b"])
    cache.fetch("k", loader)
    clock.now += 300
    assert cache.fetch("k", loader) == ["b"]


def test_fetch_force(cache):
    loader = Loader(["a"], ["b"])
    cache.fetch("k", loader)
    assert cache.fetch("k", loader, force=True) == ["b"]


def test_fetch_refetches_empty_when_asked(cache):
    loader = Loader([], ["b"])
    assert cache.fetch("k", loader, keep_empty=False) == []
    assert cache.fetch("k", loader, keep_empty=False) == ["b"]


def test_failed_loader_keeps_previous_entry(cache, clock):
    cache.fetch("k", Loader(["a"]))
    clock.now += 301

    def broken():
        raise RuntimeError("down")

    with pytest.raises(RuntimeError):
        cache.fetch("k", broken)
    assert cache.get("k") == ["a"]


def test_invalidate_prefix(cache):
    cache.set("a1:tabungan", 1)
    cache.set("a1:transactions", 2)
    cache.set("a2:tabungan", 3)

    cache.invalidate("a1:")

    assert cache.get("a1:tabungan") is None
    assert cache.get("a1:transactions") is None
    assert cache.get("a2:tabungan") == 3


def test_clear(cache):
    cache.set("k", 1)
    cache.clear()
    assert not cache.is_fresh("k")
