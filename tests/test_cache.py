"""Unit tests for PriceCache."""

from solana_portfolio.cache import PriceCache

from tests.conftest import FakeClock


class TestPriceCache:

    def test_get_unknown_key_returns_none(self, cache: PriceCache):
        assert cache.get("toptrending:1h") is None

    def test_put_then_get_is_fresh(self, cache: PriceCache):
        cache.put("toptrending:1h", ["a", "b"])

        payload, fresh = cache.get("toptrending:1h")

        assert payload == ["a", "b"]
        assert fresh is True

    def test_entry_goes_stale_at_ttl(self, cache: PriceCache, clock: FakeClock):
        """
        GIVEN an entry stored at t
        WHEN exactly TTL seconds pass
        THEN the entry is still returned but flagged stale
        """
        cache.put("k", 1)

        clock.advance(29)
        assert cache.get("k") == (1, True)

        clock.advance(1)
        assert cache.get("k") == (1, False)

    def test_put_overwrites_and_resets_timestamp(self, cache: PriceCache, clock: FakeClock):
        cache.put("k", "old")
        clock.advance(45)
        cache.put("k", "new")

        assert cache.get("k") == ("new", True)
        assert len(cache) == 1

    def test_clear_removes_everything(self, cache: PriceCache):
        cache.put("a", 1)
        cache.put("b", 2)

        cache.clear()

        assert len(cache) == 0
        assert "a" not in cache
        assert cache.get("b") is None

    def test_custom_ttl(self):
        clock = FakeClock()
        cache = PriceCache(ttl_seconds=5, clock=clock)
        cache.put("k", 1)

        clock.advance(6)

        assert cache.get("k") == (1, False)
