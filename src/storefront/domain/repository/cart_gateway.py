"""Abstract gateway to the remote cart session.

One coroutine per backend endpoint.  Implementations raise
``NetworkError`` for every failed call and return parsed domain objects.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.app_config import AppConfig
from storefront.domain.model.cart import LineItem
from storefront.domain.model.remote_cart import AvailableCoupon, RemoteCart


class CartGateway(ABC):

    @abstractmethod
    async def get_cart(self, payment_hint: str | None = None) -> RemoteCart:
        """GET /store/cart."""

    @abstractmethod
    async def sync_items(
        self, items: list[LineItem], payment_hint: str | None = None
    ) -> RemoteCart:
        """POST /store/cart/sync with the minimal item payload."""

    @abstractmethod
    async def update_customer(self, address: dict[str, str]) -> RemoteCart:
        """POST /store/cart/update-customer (shipping and billing)."""

    @abstractmethod
    async def select_shipping_rate(self, rate_id: str) -> RemoteCart:
        """POST /store/cart/select-shipping-rate."""

    @abstractmethod
    async def apply_coupon(self, code: str) -> RemoteCart:
        """POST /store/cart/coupons."""

    @abstractmethod
    async def remove_coupon(self, code: str) -> RemoteCart:
        """DELETE /store/cart/coupons/{code}."""

    @abstractmethod
    async def list_coupons(self) -> list[AvailableCoupon]:
        """GET /store/coupons."""

    @abstractmethod
    async def get_config(self) -> AppConfig:
        """GET /config."""
