import pytest

from engines.caching import TTLCache


def test_set_then_get_round_trips(fake_clock):
    cache = TTLCache(60, clock=fake_clock)
    cache.set("progress|user=guest", {"level": 3})

    assert cache.get("progress|user=guest") == {"level": 3}
    assert "progress|user=guest" in cache


def test_entry_expires_once_ttl_has_elapsed(fake_clock):
    cache = TTLCache(60, clock=fake_clock)
    cache.set("k", "v")

    fake_clock.advance(59)
    assert cache.get("k") == "v"

    fake_clock.advance(1)
    assert cache.get("k") is None
    assert cache.get("k", default="missing") == "missing"
    # Stale entries stay stored until purged or overwritten.
    assert len(cache) == 1
    assert cache.purge_expired() == 1
    assert len(cache) == 0


def test_invalidate_removes_fresh_entry(fake_clock):
    cache = TTLCache(60, clock=fake_clock)
    cache.set("k", "v")
    cache.invalidate("k")
    cache.invalidate("never-set")

    assert cache.get("k") is None
    assert "k" not in cache


def test_lookup_distinguishes_cached_none_from_miss(fake_clock):
    cache = TTLCache(60, clock=fake_clock)
    cache.set("empty", None)

    assert cache.lookup("empty") == (True, None)
    assert cache.lookup("absent") == (False, None)


def test_overwrite_resets_insertion_time(fake_clock):
    cache = TTLCache(60, clock=fake_clock)
    cache.set("k", 1)
    fake_clock.advance(50)
    cache.set("k", 2)
    fake_clock.advance(50)

    assert cache.get("k") == 2


def test_size_bound_evicts_least_recently_inserted(fake_clock):
    cache = TTLCache(60, max_entries=2, clock=fake_clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")  # reads do not change eviction order
    cache.set("c", 3)

    assert "a" not in cache
    assert cache.get("b") == 2
    assert cache.get("c") == 3
    assert cache.stats()["evictions"] == 1


def test_overwrite_moves_key_to_back_of_eviction_queue(fake_clock):
    cache = TTLCache(60, max_entries=2, clock=fake_clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)
    cache.set("c", 3)

    assert cache.get("a") == 10
    assert "b" not in cache


def test_expired_entries_are_purged_before_evicting(fake_clock):
    cache = TTLCache(60, max_entries=2, clock=fake_clock)
    cache.set("old", 1)
    fake_clock.advance(61)
    cache.set("b", 2)
    cache.set("c", 3)

    assert len(cache) == 2
    assert cache.get("b") == 2
    assert cache.get("c") == 3
    assert cache.stats()["evictions"] == 0


def test_zero_max_entries_is_unbounded(fake_clock):
    cache = TTLCache(60, max_entries=0, clock=fake_clock)
    for idx in range(500):
        cache.set(f"k{idx}", idx)

    assert len(cache) == 500


def test_stats_track_hits_and_misses(fake_clock):
    cache = TTLCache(60, max_entries=10, clock=fake_clock)
    cache.set("k", "v")
    cache.get("k")
    cache.get("k")
    cache.get("other")

    stats = cache.stats()
    assert stats["hits"] == 2
    assert stats["misses"] == 1
    assert stats["entries"] == 1
    assert stats["ttl_seconds"] == 60.0
    assert stats["max_entries"] == 10


def test_clear_empties_cache(fake_clock):
    cache = TTLCache(60, clock=fake_clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.clear()

    assert len(cache) == 0


def test_make_key_sorts_and_escapes_params():
    key = TTLCache.make_key("modules", user="a|b", level="all")

    assert key == "modules|level=all|user=a%7Cb"
    assert key == TTLCache.make_key("modules", level="all", user="a|b")
    assert TTLCache.make_key("modules", user="a", level="b|user=c") != TTLCache.make_key(
        "modules", user="a|level=b", level="c"
    )


@pytest.mark.parametrize("ttl", [0, -5])
def test_rejects_non_positive_ttl(ttl):
    with pytest.raises(ValueError):
        TTLCache(ttl)


def test_rejects_negative_size_bound():
    with pytest.raises(ValueError):
        TTLCache(60, max_entries=-1)
