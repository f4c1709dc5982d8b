"""Lookup cache TTL and eviction tests."""

from __future__ import annotations

from app.services.lookup_cache import LookupCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_miss_hit_and_cached_none() -> None:
    """A cached None poster is a hit, distinct from a miss."""
    cache = LookupCache(ttl_seconds=60, max_entries=10)

    assert cache.get_poster("tt1") is None
    cache.set_poster("tt1", None)
    entry = cache.get_poster("tt1")
    assert entry is not None
    assert entry.value is None

    cache.set_plot("tt1", "Plot")
    assert cache.get_plot("tt1").value == "Plot"


def test_entries_expire() -> None:
    clock = FakeClock()
    cache = LookupCache(ttl_seconds=60, max_entries=10, clock=clock)
    cache.set_poster("tt1", "https://img/1.jpg")

    clock.now += 59
    assert cache.get_poster("tt1") is not None
    clock.now += 1
    assert cache.get_poster("tt1") is None


def test_oldest_entry_evicted_when_full() -> None:
    cache = LookupCache(ttl_seconds=60, max_entries=2)
    cache.set_poster("tt1", "a")
    cache.set_poster("tt2", "b")
    cache.set_poster("tt3", "c")

    assert cache.get_poster("tt1") is None
    assert cache.get_poster("tt2").value == "b"
    assert cache.get_poster("tt3").value == "c"


def test_rewriting_refreshes_position() -> None:
    cache = LookupCache(ttl_seconds=60, max_entries=2)
    cache.set_poster("tt1", "a")
    cache.set_poster("tt2", "b")
    cache.set_poster("tt1", "a2")
    cache.set_poster("tt3", "c")

    assert cache.get_poster("tt1").value == "a2"
    assert cache.get_poster("tt2") is None


def test_query_terms_are_case_insensitive_and_resettable() -> None:
    cache = LookupCache(ttl_seconds=60, max_entries=10, query_ttl_seconds=30)
    cache.mark_queried("Star")

    assert cache.was_queried("star")
    cache.reset_queries()
    assert not cache.was_queried("star")


def test_sweep_expired() -> None:
    clock = FakeClock()
    cache = LookupCache(ttl_seconds=60, max_entries=10, query_ttl_seconds=10, clock=clock)
    cache.set_poster("tt1", "a")
    cache.set_plot("tt1", "plot")
    cache.mark_queried("heat")

    clock.now += 30
    assert cache.sweep_expired() == 1
    assert len(cache) == 2

    clock.now += 30
    assert cache.sweep_expired() == 2
    assert len(cache) == 0


def test_zero_ttl_disables_caching() -> None:
    cache = LookupCache(ttl_seconds=0, max_entries=10)
    cache.set_poster("tt1", "a")

    assert cache.get_poster("tt1") is None
