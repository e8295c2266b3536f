"""Application service: Remote Cart Synchronizer.

Pushes the ledger to the remote cart session and keeps the priced result
in the query cache under ``("cart", signature, payment hint)``.

Every mutation that comes back with a fresh remote cart (rate selection,
address update, coupons) goes through ``write_cart``,
a two-phase write:

  Phase 1: overwrite the current key synchronously with the confirmed
             server response.
  Phase 2: mark the whole ``cart`` family stale and revalidate the
             current key in the background.

Phase 2 never runs before phase 1, and a revalidation that started
before phase 1 can not overwrite it.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from storefront.application.query_cache import CacheKey, QueryCache
from storefront.domain.model.cart import LineItem
from storefront.domain.model.remote_cart import PaymentMethod, RemoteCart
from storefront.domain.repository.cart_gateway import CartGateway
from storefront.domain.service.cart_signature import cart_signature

logger = logging.getLogger(__name__)

CART_FAMILY = "cart"
CART_FRESH_FOR = 5 * 60.0


class RemoteCartSynchronizer:

    def __init__(self, gateway: CartGateway, cache: QueryCache) -> None:
        self._gateway = gateway
        self._cache = cache
        self._items: list[LineItem] = []
        self._payment_method = PaymentMethod.CARD
        self._current_key: CacheKey | None = None

    @property
    def current_key(self) -> CacheKey:
        if self._current_key is None:
            return self.key_for(self._items, self._payment_method)
        return self._current_key

    @property
    def payment_method(self) -> PaymentMethod:
        return self._payment_method

    @staticmethod
    def key_for(items: list[LineItem], payment_method: PaymentMethod) -> CacheKey:
        return (CART_FAMILY, cart_signature(items), payment_method.remote_hint)

    # --- Reads ----------------------------------------------------------------

    async def sync(
        self, items: list[LineItem], payment_method: PaymentMethod
    ) -> RemoteCart:
        """Return the remote cart for *items*, syncing when not cached.

        Concurrent calls with the same signature and payment method share
        one network request.
        """
        key = self._track(items, payment_method)
        return await self._cache.fetch(
            key, self._loader(self._items, payment_method), CART_FRESH_FOR
        )

    def cached(self) -> RemoteCart | None:
        """The remote cart for the current key, if any (possibly stale)."""
        return self._cache.get(self.current_key)

    # --- Mutations ------------------------------------------------------------

    def write_cart(self, cart: RemoteCart) -> None:
        key = self.current_key
        logger.info("Updating cached cart for %s", key)
        self._cache.set(key, cart, CART_FRESH_FOR)

        self._cache.mark_stale(CART_FAMILY)
        self._cache.refresh(
            key, self._loader(self._items, self._payment_method), CART_FRESH_FOR
        )

    async def update_address(self, address: dict[str, str]) -> RemoteCart:
        cart = await self._gateway.update_customer(address)
        logger.info("Address updated, cart refreshed")
        self.write_cart(cart)
        return cart

    async def select_rate(self, rate_id: str) -> RemoteCart:
        cart = await self._gateway.select_shipping_rate(rate_id)
        logger.info("Shipping rate %s selected", rate_id)
        self.write_cart(cart)
        return cart

    async def apply_coupon(self, code: str) -> RemoteCart:
        cart = await self._gateway.apply_coupon(code)
        self.write_cart(cart)
        return cart

    async def remove_coupon(self, code: str) -> RemoteCart:
        cart = await self._gateway.remove_coupon(code)
        self.write_cart(cart)
        return cart

    async def drain(self) -> None:
        """Wait for background revalidation; nothing is cancelled."""
        await self._cache.drain()

    # --- Internal helpers -----------------------------------------------------

    def _track(self, items: list[LineItem], payment_method: PaymentMethod) -> CacheKey:
        key = self.key_for(items, payment_method)
        previous = self._current_key
        if previous is not None and previous[1] != key[1]:
            # New contents: whatever was priced for the old signature is void.
            for old in self._cache.keys(CART_FAMILY, loading=True):
                if old[1] == previous[1]:
                    self._cache.drop(old)
        # Snapshot: ledger lines are mutated in place after this call.
        self._items = [replace(line) for line in items]
        self._payment_method = payment_method
        self._current_key = key
        return key

    def _loader(self, items: list[LineItem], payment_method: PaymentMethod):
        items = list(items)
        hint = payment_method.remote_hint

        async def load() -> RemoteCart:
            if not items:
                logger.info("Fetching remote cart (hint=%s)", hint)
                return await self._gateway.get_cart(hint)
            logger.info("Syncing remote cart %s (hint=%s)", cart_signature(items), hint)
            return await self._gateway.sync_items(items, hint)

        return load
