"""Tests for the QueryCache: freshness, dedup and write ordering."""

import asyncio

import pytest

from storefront.application.query_cache import QueryCache


class FakeClock:

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class CountingLoader:

    def __init__(self, value="v", gate: asyncio.Event | None = None) -> None:
        self.value = value
        self.gate = gate
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        return self.value


class TestReadsAndWrites:

    def test_set_and_get(self):
        cache = QueryCache()
        cache.set(("cart", "a"), 1)
        assert cache.get(("cart", "a")) == 1
        assert cache.get(("cart", "b")) is None

    def test_freshness_window(self):
        clock = FakeClock()
        cache = QueryCache(clock=clock)
        cache.set(("k",), 1, fresh_for=10)
        assert cache.is_fresh(("k",))
        clock.now = 10
        assert not cache.is_fresh(("k",))

    def test_mark_stale_hits_whole_family(self):
        cache = QueryCache()
        cache.set(("cart", "a"), 1)
        cache.set(("cart", "b"), 2)
        cache.set(("available_coupons",), [])
        marked = cache.mark_stale("cart")
        assert sorted(marked) == [("cart", "a"), ("cart", "b")]
        assert not cache.is_fresh(("cart", "a"))
        assert cache.get(("cart", "a")) == 1
        assert cache.is_fresh(("available_coupons",))

    def test_keys_by_family(self):
        cache = QueryCache()
        cache.set(("cart", "a"), 1)
        cache.set(("app_config",), 2)
        assert cache.keys("cart") == [("cart", "a")]
        assert len(cache.keys()) == 2

    def test_drop_and_clear(self):
        cache = QueryCache()
        cache.set(("a",), 1)
        cache.set(("b",), 2)
        cache.drop(("a",))
        assert cache.get(("a",)) is None
        cache.clear()
        assert cache.keys() == []


class TestFetch:

    def test_loads_when_missing(self):
        async def scenario():
            cache = QueryCache()
            loader = CountingLoader("x")
            value = await cache.fetch(("k",), loader)
            return cache, loader, value

        cache, loader, value = asyncio.run(scenario())
        assert value == "x"
        assert loader.calls == 1
        assert cache.get(("k",)) == "x"

    def test_fresh_entry_served_without_loading(self):
        async def scenario():
            cache = QueryCache()
            cache.set(("k",), "cached")
            loader = CountingLoader("x")
            value = await cache.fetch(("k",), loader)
            await cache.drain()
            return loader, value

        loader, value = asyncio.run(scenario())
        assert value == "cached"
        assert loader.calls == 0

    def test_stale_entry_served_and_refreshed_once(self):
        async def scenario():
            cache = QueryCache()
            cache.set(("k",), "old")
            cache.mark_stale("k")
            loader = CountingLoader("new")
            first = await cache.fetch(("k",), loader)
            second = await cache.fetch(("k",), loader)
            await cache.drain()
            return cache, loader, first, second

        cache, loader, first, second = asyncio.run(scenario())
        assert first == second == "old"
        assert loader.calls == 1
        assert cache.get(("k",)) == "new"
        assert cache.is_fresh(("k",))

    def test_concurrent_fetches_share_one_load(self):
        async def scenario():
            cache = QueryCache()
            gate = asyncio.Event()
            loader = CountingLoader("x", gate)
            pending = [asyncio.ensure_future(cache.fetch(("k",), loader)) for _ in range(5)]
            await asyncio.sleep(0)
            assert cache.is_loading(("k",))
            gate.set()
            return loader, await asyncio.gather(*pending)

        loader, values = asyncio.run(scenario())
        assert loader.calls == 1
        assert values == ["x"] * 5

    def test_failed_load_propagates_to_waiter(self):
        async def failing():
            raise RuntimeError("boom")

        async def scenario():
            cache = QueryCache()
            with pytest.raises(RuntimeError, match="boom"):
                await cache.fetch(("k",), failing)
            await cache.drain()
            return cache

        cache = asyncio.run(scenario())
        assert cache.get(("k",)) is None
        assert not cache.is_loading(("k",))

    def test_failed_background_refresh_keeps_old_value(self):
        async def failing():
            raise RuntimeError("boom")

        async def scenario():
            cache = QueryCache()
            cache.set(("k",), "old")
            cache.mark_stale("k")
            value = await cache.fetch(("k",), failing)
            await cache.drain()
            return cache, value

        cache, value = asyncio.run(scenario())
        assert value == "old"
        assert cache.get(("k",)) == "old"


class TestWriteOrdering:

    def test_load_started_before_set_is_discarded(self):
        async def scenario():
            cache = QueryCache()
            gate = asyncio.Event()
            cache.refresh(("k",), CountingLoader("from-load", gate))
            await asyncio.sleep(0)
            cache.set(("k",), "optimistic")
            gate.set()
            await cache.drain()
            return cache

        assert asyncio.run(scenario()).get(("k",)) == "optimistic"

    def test_load_started_after_set_overwrites(self):
        async def scenario():
            cache = QueryCache()
            cache.set(("k",), "optimistic")
            cache.refresh(("k",), CountingLoader("revalidated"))
            await cache.drain()
            return cache

        assert asyncio.run(scenario()).get(("k",)) == "revalidated"

    def test_clear_ignores_late_results(self):
        async def scenario():
            cache = QueryCache()
            gate = asyncio.Event()
            cache.refresh(("k",), CountingLoader("late", gate))
            cache.clear()
            gate.set()
            await cache.drain()
            return cache

        assert asyncio.run(scenario()).get(("k",)) is None

    def test_drop_ignores_late_results(self):
        async def scenario():
            cache = QueryCache()
            gate = asyncio.Event()
            task = cache.refresh(("cart", "a"), CountingLoader("late", gate))
            assert cache.keys("cart", loading=True) == [("cart", "a")]
            cache.drop(("cart", "a"))
            assert not cache.is_loading(("cart", "a"))
            gate.set()
            await task
            return cache

        cache = asyncio.run(scenario())
        assert cache.get(("cart", "a")) is None

    def test_fetch_after_drop_starts_a_new_load(self):
        async def scenario():
            cache = QueryCache()
            gate = asyncio.Event()
            old = cache.refresh(("k",), CountingLoader("old", gate))
            cache.drop(("k",))
            value = await cache.fetch(("k",), CountingLoader("new"))
            gate.set()
            await old
            return cache, value

        cache, value = asyncio.run(scenario())
        assert value == "new"
        assert cache.get(("k",)) == "new"
