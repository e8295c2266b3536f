"""In-memory fakes for testing.

These implement the same abstract interfaces as the JSON repositories
and the HTTP gateway but keep everything in memory. No file I/O, no
network.
"""

from __future__ import annotations

import asyncio
import copy
from decimal import Decimal

from storefront.application.notifier import Notification, NotificationKind, Notifier
from storefront.domain.exceptions import NetworkError
from storefront.domain.model.app_config import AppConfig
from storefront.domain.model.cart import Ledger, LineItem
from storefront.domain.model.product import Product
from storefront.domain.model.remote_cart import (
    AvailableCoupon,
    CartFee,
    CartTotals,
    Coupon,
    RemoteCart,
    ShippingPackage,
    ShippingRate,
)
from storefront.domain.repository.cart_gateway import CartGateway
from storefront.domain.repository.ledger_repository import LedgerRepository
from storefront.domain.repository.product_repository import ProductRepository


class FakeLedgerRepository(LedgerRepository):

    def __init__(self, ledger: Ledger | None = None) -> None:
        self._ledger = copy.deepcopy(ledger) if ledger else Ledger()
        self.saves = 0

    def load(self) -> Ledger:
        return copy.deepcopy(self._ledger)

    def save(self, ledger: Ledger) -> None:
        self._ledger = copy.deepcopy(ledger)
        self.saves += 1


class FakeProductRepository(ProductRepository):

    def __init__(self, products: list[Product] | None = None) -> None:
        self._store: dict[int, Product] = {}
        for p in products or []:
            self._store[p.id] = p

    def get_by_id(self, product_id: int) -> Product | None:
        return self._store.get(product_id)

    def list_all(self) -> list[Product]:
        return list(self._store.values())


class FakeNotifier(Notifier):

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notifications]

    def errors(self) -> list[Notification]:
        return [n for n in self.notifications if n.kind is NotificationKind.ERROR]


class FakeCartGateway(CartGateway):
    """Scripted gateway.

    ``cart`` is returned by every cart endpoint unless a per-method
    response is set in ``responses``.  ``failures`` maps a method name to
    the NetworkError it raises.  When ``gate`` is set, calls wait on it
    before answering; ``gated`` narrows that to the named methods.
    """

    def __init__(self, cart: RemoteCart | None = None) -> None:
        self.cart = cart or make_cart()
        self.responses: dict[str, RemoteCart] = {}
        self.failures: dict[str, NetworkError] = {}
        self.calls: list[tuple] = []
        self.coupons: list[AvailableCoupon] = []
        self.config = AppConfig()
        self.gate: asyncio.Event | None = None
        self.gated: set[str] = set()

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)

    async def _answer(self, method: str, *args):
        self.calls.append((method, *args))
        if self.gate is not None and (not self.gated or method in self.gated):
            await self.gate.wait()
        if method in self.failures:
            raise self.failures[method]
        return self.responses.get(method, self.cart)

    async def get_cart(self, payment_hint: str | None = None) -> RemoteCart:
        return await self._answer("get_cart", payment_hint)

    async def sync_items(
        self, items: list[LineItem], payment_hint: str | None = None
    ) -> RemoteCart:
        return await self._answer("sync_items", list(items), payment_hint)

    async def update_customer(self, address: dict[str, str]) -> RemoteCart:
        return await self._answer("update_customer", address)

    async def select_shipping_rate(self, rate_id: str) -> RemoteCart:
        return await self._answer("select_shipping_rate", rate_id)

    async def apply_coupon(self, code: str) -> RemoteCart:
        return await self._answer("apply_coupon", code)

    async def remove_coupon(self, code: str) -> RemoteCart:
        return await self._answer("remove_coupon", code)

    async def list_coupons(self) -> list[AvailableCoupon]:
        self.calls.append(("list_coupons",))
        if "list_coupons" in self.failures:
            raise self.failures["list_coupons"]
        return list(self.coupons)

    async def get_config(self) -> AppConfig:
        self.calls.append(("get_config",))
        if "get_config" in self.failures:
            raise self.failures["get_config"]
        return self.config


# --- Builders -----------------------------------------------------------------


def make_product(
    id: int = 1,
    name: str = "T-Shirt",
    price: str = "250",
    **kwargs,
) -> Product:
    return Product(id=id, name=name, price=Decimal(price), **kwargs)


def make_rate(
    rate_id: str = "flat_rate:1", price: int = 7900, selected: bool = False, name: str = "Standard"
) -> ShippingRate:
    return ShippingRate(
        rate_id=rate_id, name=name, price=price, selected=selected, method_id="flat_rate"
    )


def make_cart(
    total_items: int = 0,
    total_price: int = 0,
    total_shipping: int = 0,
    total_fees: int = 0,
    total_discount: int = 0,
    rates: list[ShippingRate] | None = None,
    fees: list[CartFee] | None = None,
    coupons: list[Coupon] | None = None,
) -> RemoteCart:
    return RemoteCart(
        totals=CartTotals(
            total_items=total_items,
            total_price=total_price,
            total_shipping=total_shipping,
            total_fees=total_fees,
            total_discount=total_discount,
        ),
        shipping_packages=[ShippingPackage(0, "Shipment 1", list(rates or []))],
        fees=list(fees or []),
        coupons=list(coupons or []),
    )


def cod_fee(total: int = 2000) -> CartFee:
    return CartFee(id="cod-fee", name="COD Fee", total=total)
