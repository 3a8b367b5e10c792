from post_cache import CategoryCache

from conftest import make_post


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestCategoryCache:

    def test_hit_within_ttl(self):
        clock = FakeClock()
        cache = CategoryCache(ttl=300, clock=clock)
        cache.put("food", [make_post(1)])
        clock.now += 299
        assert [p.id for p in cache.get("food")] == [1]

    def test_expires_after_ttl(self):
        clock = FakeClock()
        cache = CategoryCache(ttl=300, clock=clock)
        cache.put("food", [make_post(1)])
        clock.now += 300
        assert cache.get("food") is None
        assert "food" not in cache

    def test_keys_are_case_insensitive(self):
        cache = CategoryCache()
        cache.put("Food", [make_post(1)])
        assert "food" in cache
        assert cache.get("FOOD") is not None

    def test_put_replaces_whole_entry(self):
        cache = CategoryCache()
        cache.put("food", [make_post(1), make_post(2)])
        cache.put("food", [make_post(3)])
        assert [p.id for p in cache.get("food")] == [3]

    def test_returned_list_is_a_copy(self):
        cache = CategoryCache()
        cache.put("food", [make_post(1)])
        cache.get("food").append(make_post(2))
        assert len(cache.get("food")) == 1

    def test_invalidate_one_or_all(self):
        cache = CategoryCache()
        cache.put("food", [make_post(1)])
        cache.put("travel", [make_post(2)])

        cache.invalidate("food")
        assert "food" not in cache
        assert "travel" in cache

        cache.invalidate()
        assert "travel" not in cache
