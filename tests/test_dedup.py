import pytest

from opportunity_agent.processors.dedup import DedupCache, entry_id


def test_add_then_has():
    cache = DedupCache()
    assert not cache.has("a")
    cache.add("a")
    assert cache.has("a")
    assert "a" in cache
    assert len(cache) == 1


def test_adding_twice_is_idempotent():
    cache = DedupCache()
    cache.add("a")
    cache.add("a")
    assert len(cache) == 1


def test_overflow_evicts_oldest_half():
    cache = DedupCache(4, evict_fraction=0.5)
    for item_id in "abcde":
        cache.add(item_id)
    assert list(cache) == ["d", "e"]
    assert not cache.has("a")
    # evicted ids are new again
    cache.add("a")
    assert cache.has("a")


def test_size_never_exceeds_capacity():
    cache = DedupCache(10)
    for i in range(100):
        cache.add(str(i))
        assert len(cache) <= 10
    assert cache.has("99")


def test_full_eviction_keeps_newest_id():
    cache = DedupCache(2, evict_fraction=1.0)
    for item_id in "abc":
        cache.add(item_id)
    assert cache.has("c")


@pytest.mark.parametrize("kwargs", [{"max_size": 0}, {"evict_fraction": 0.0}, {"evict_fraction": 1.5}])
def test_rejects_bad_settings(kwargs):
    with pytest.raises(ValueError):
        DedupCache(**kwargs)


def test_entry_id_prefers_guid_then_link():
    assert entry_id("Feed", guid="g-1", link="https://x/1", title="T") == "g-1"
    assert entry_id("Feed", guid=None, link="https://x/1", title="T") == "https://x/1"
    assert entry_id("Feed", guid="  ", link="", title="T").startswith("Feed-")


def test_synthesized_id_is_stable():
    first = entry_id("Feed", guid=None, link=None, title="Privacy Bill Passes")
    second = entry_id("Feed", guid=None, link=None, title="privacy bill passes ")
    other = entry_id("Other", guid=None, link=None, title="Privacy Bill Passes")
    assert first == second
    assert first != other
