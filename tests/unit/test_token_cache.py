"""Tests for the eBay application token cache."""

from partbot.ebay import AppTokenCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestAppTokenCache:
    def test_empty_cache_has_no_token(self):
        assert AppTokenCache().get() is None

    def test_token_is_served_until_refresh_margin(self):
        clock = FakeClock()
        cache = AppTokenCache(refresh_margin=60, clock=clock)
        cache.store("token", expires_in=7200)

        clock.now += 7200 - 61
        assert cache.get() == "token"

        clock.now += 1
        assert cache.get() is None

    def test_clear_drops_token(self):
        cache = AppTokenCache()
        cache.store("token", expires_in=7200)

        cache.clear()

        assert cache.get() is None

    def test_caches_are_independent(self):
        first, second = AppTokenCache(), AppTokenCache()
        first.store("token", expires_in=7200)

        assert second.get() is None
