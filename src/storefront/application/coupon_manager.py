"""Application service: Coupon Manager.

Applies and removes coupon codes against the remote cart session.  A
successful call writes the returned cart straight into the cache (see
``RemoteCartSynchronizer.write_cart``), so the discount shows up without
waiting for a background refresh.
"""

from __future__ import annotations

import logging

from storefront.application.notifier import Notifier
from storefront.application.query_cache import QueryCache
from storefront.application.remote_cart_sync import RemoteCartSynchronizer
from storefront.domain.exceptions import NetworkError
from storefront.domain.model.remote_cart import AvailableCoupon, RemoteCart
from storefront.domain.repository.cart_gateway import CartGateway

logger = logging.getLogger(__name__)

AVAILABLE_COUPONS_KEY = ("available_coupons",)
AVAILABLE_COUPONS_FRESH_FOR = 30 * 60.0


class CouponManager:

    def __init__(
        self,
        synchronizer: RemoteCartSynchronizer,
        gateway: CartGateway,
        cache: QueryCache,
        notifier: Notifier,
    ) -> None:
        self._synchronizer = synchronizer
        self._gateway = gateway
        self._cache = cache
        self._notifier = notifier

    async def apply(self, code: str) -> RemoteCart | None:
        code = code.strip()
        if not code:
            return None

        try:
            cart = await self._synchronizer.apply_coupon(code)
        except NetworkError as exc:
            logger.warning("Coupon %s rejected: %s", code, exc.message)
            self._notifier.error("Invalid Coupon", exc.message)
            return None

        logger.info("Coupon %s applied", code)
        self._notifier.success("Coupon Applied", code)
        return cart

    async def remove(self, code: str) -> RemoteCart | None:
        try:
            cart = await self._synchronizer.remove_coupon(code)
        except NetworkError as exc:
            logger.warning("Coupon %s removal failed: %s", code, exc.message)
            self._notifier.error("Removal Failed", exc.message)
            return None

        logger.info("Coupon %s removed", code)
        self._notifier.info("Coupon Removed", code)
        return cart

    async def list_available(self) -> list[AvailableCoupon]:
        """Promotable coupons; independent of what is in the cart."""
        try:
            return await self._cache.fetch(
                AVAILABLE_COUPONS_KEY,
                self._gateway.list_coupons,
                AVAILABLE_COUPONS_FRESH_FOR,
            )
        except NetworkError as exc:
            logger.warning("Could not load available coupons: %s", exc.message)
            return []
