"""Tests for the Coupon Manager."""

import asyncio

from storefront.application.coupon_manager import AVAILABLE_COUPONS_KEY, CouponManager
from storefront.application.notifier import NotificationKind
from storefront.application.query_cache import QueryCache
from storefront.application.remote_cart_sync import RemoteCartSynchronizer
from storefront.domain.exceptions import NetworkError
from storefront.domain.model.remote_cart import AvailableCoupon, Coupon
from tests.fakes import FakeCartGateway, FakeNotifier, make_cart


def _setup():
    gateway = FakeCartGateway()
    cache = QueryCache()
    sync = RemoteCartSynchronizer(gateway, cache)
    notifier = FakeNotifier()
    return CouponManager(sync, gateway, cache, notifier), sync, gateway, cache, notifier


def _run(sync, coro):
    async def scenario():
        result = await coro
        await sync.drain()
        return result

    return asyncio.run(scenario())


class TestApply:

    def test_success_updates_cache_and_notifies(self):
        manager, sync, gateway, cache, notifier = _setup()
        discounted = make_cart(total_discount=6000, coupons=[Coupon("SAVE10", "percent", 6000)])
        gateway.responses["apply_coupon"] = discounted

        result = _run(sync, manager.apply("  SAVE10 "))

        assert result is discounted
        assert ("apply_coupon", "SAVE10") in gateway.calls
        assert notifier.notifications[0].kind is NotificationKind.SUCCESS
        assert notifier.titles == ["Coupon Applied"]

    def test_blank_code_is_not_sent(self):
        manager, sync, gateway, _, notifier = _setup()
        assert _run(sync, manager.apply("   ")) is None
        assert gateway.calls == []
        assert notifier.notifications == []

    def test_rejection_shows_gateway_message(self):
        manager, sync, gateway, _, notifier = _setup()
        gateway.failures["apply_coupon"] = NetworkError(
            'Coupon "BOGUS" does not exist!', 400
        )

        assert _run(sync, manager.apply("BOGUS")) is None
        assert notifier.titles == ["Invalid Coupon"]
        assert notifier.notifications[0].message == 'Coupon "BOGUS" does not exist!'


class TestRemove:

    def test_success(self):
        manager, sync, gateway, _, notifier = _setup()
        _run(sync, manager.remove("SAVE10"))
        assert ("remove_coupon", "SAVE10") in gateway.calls
        assert notifier.notifications[0].kind is NotificationKind.INFO
        assert notifier.titles == ["Coupon Removed"]

    def test_failure_message_is_not_decoded_again(self):
        manager, sync, gateway, _, notifier = _setup()
        gateway.failures["remove_coupon"] = NetworkError("Use &lt;b&gt; tags", 404)
        assert _run(sync, manager.remove("SAVE10")) is None
        assert notifier.titles == ["Removal Failed"]
        assert notifier.notifications[0].message == "Use &lt;b&gt; tags"


class TestListAvailable:

    def test_cached_between_calls(self):
        manager, sync, gateway, cache, _ = _setup()
        gateway.coupons = [AvailableCoupon("WELCOME", "10", "percent", "10% off")]

        async def scenario():
            first = await manager.list_available()
            second = await manager.list_available()
            return first, second

        first, second = asyncio.run(scenario())
        assert [c.code for c in first] == ["WELCOME"]
        assert second == first
        assert gateway.count("list_coupons") == 1
        assert cache.is_fresh(AVAILABLE_COUPONS_KEY)

    def test_failure_returns_empty(self):
        manager, sync, gateway, _, _ = _setup()
        gateway.failures["list_coupons"] = NetworkError("down")
        assert _run(sync, manager.list_available()) == []
