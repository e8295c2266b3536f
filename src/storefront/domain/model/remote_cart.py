"""The remote cart: the backend's priced view of the ledger.

Everything monetary here is integer minor units.  The Store API sends
those as numeric strings; ``from_raw`` constructors parse them once so
the rest of the code only ever sees ints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from storefront.domain.model.value_objects import parse_minor

DEFAULT_CURRENCY_SYMBOL = "₹"
DEFAULT_CURRENCY_CODE = "INR"


class PaymentMethod(Enum):
    COD = "cod"
    CARD = "card"

    @property
    def remote_hint(self) -> str:
        """Payment gateway id the backend uses to calculate fees."""
        return "cod" if self is PaymentMethod.COD else "razorpay"

    @property
    def title(self) -> str:
        return "Cash on Delivery" if self is PaymentMethod.COD else "Card / UPI"


@dataclass(frozen=True)
class ShippingRate:
    rate_id: str
    name: str
    price: int
    selected: bool = False
    method_id: str = ""
    description: str = ""
    delivery_time: str = ""
    currency_code: str = DEFAULT_CURRENCY_CODE
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL

    @staticmethod
    def from_raw(raw: dict[str, Any]) -> ShippingRate:
        return ShippingRate(
            rate_id=str(raw["rate_id"]),
            name=raw.get("name", ""),
            price=parse_minor(raw.get("price")),
            selected=bool(raw.get("selected", False)),
            method_id=raw.get("method_id", ""),
            description=raw.get("description") or "",
            delivery_time=raw.get("delivery_time") or "",
            currency_code=raw.get("currency_code") or DEFAULT_CURRENCY_CODE,
            currency_symbol=raw.get("currency_symbol") or DEFAULT_CURRENCY_SYMBOL,
        )


@dataclass(frozen=True)
class ShippingPackage:
    package_id: int
    name: str
    shipping_rates: list[ShippingRate] = field(default_factory=list)

    @staticmethod
    def from_raw(raw: dict[str, Any]) -> ShippingPackage:
        return ShippingPackage(
            package_id=int(raw.get("package_id", 0)),
            name=raw.get("name", ""),
            shipping_rates=[
                ShippingRate.from_raw(r) for r in raw.get("shipping_rates") or []
            ],
        )


@dataclass(frozen=True)
class Coupon:
    code: str
    discount_type: str
    total_discount: int

    @staticmethod
    def from_raw(raw: dict[str, Any]) -> Coupon:
        totals = raw.get("totals") or {}
        return Coupon(
            code=raw["code"],
            discount_type=raw.get("discount_type", ""),
            total_discount=parse_minor(totals.get("total_discount")),
        )


@dataclass(frozen=True)
class AvailableCoupon:
    """A promotable coupon as listed by the store, not yet applied."""

    code: str
    amount: str = ""
    discount_type: str = ""
    description: str = ""

    @staticmethod
    def from_raw(raw: dict[str, Any]) -> AvailableCoupon:
        return AvailableCoupon(
            code=raw["code"],
            amount=str(raw.get("amount") or ""),
            discount_type=raw.get("discount_type", ""),
            description=raw.get("description") or "",
        )


@dataclass(frozen=True)
class CartFee:
    id: str
    name: str
    total: int

    @property
    def is_cod(self) -> bool:
        return "cod" in self.name.lower()

    @staticmethod
    def from_raw(raw: dict[str, Any]) -> CartFee:
        totals = raw.get("totals") or {}
        return CartFee(
            id=str(raw.get("id", "")),
            name=raw.get("name", ""),
            total=parse_minor(totals.get("total")),
        )


@dataclass(frozen=True)
class CartTotals:
    total_items: int = 0
    total_fees: int = 0
    total_discount: int = 0
    total_shipping: int = 0
    total_tax: int = 0
    total_price: int = 0
    currency_code: str = DEFAULT_CURRENCY_CODE
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    currency_minor_unit: int = 2

    @staticmethod
    def from_raw(raw: dict[str, Any]) -> CartTotals:
        return CartTotals(
            total_items=parse_minor(raw.get("total_items")),
            total_fees=parse_minor(raw.get("total_fees")),
            total_discount=parse_minor(raw.get("total_discount")),
            total_shipping=parse_minor(raw.get("total_shipping")),
            total_tax=parse_minor(raw.get("total_tax")),
            total_price=parse_minor(raw.get("total_price")),
            currency_code=raw.get("currency_code") or DEFAULT_CURRENCY_CODE,
            currency_symbol=raw.get("currency_symbol") or DEFAULT_CURRENCY_SYMBOL,
            currency_minor_unit=int(raw.get("currency_minor_unit", 2)),
        )


@dataclass(frozen=True)
class RemoteCart:
    """Backend cart view; authoritative for price once present."""

    totals: CartTotals
    items: list[dict[str, Any]] = field(default_factory=list)
    shipping_packages: list[ShippingPackage] = field(default_factory=list)
    coupons: list[Coupon] = field(default_factory=list)
    fees: list[CartFee] = field(default_factory=list)
    needs_shipping: bool = True

    @property
    def shipping_rates(self) -> list[ShippingRate]:
        """All rates across packages, in package order."""
        return [
            rate
            for package in self.shipping_packages
            for rate in package.shipping_rates
        ]

    @property
    def selected_rate(self) -> ShippingRate | None:
        for rate in self.shipping_rates:
            if rate.selected:
                return rate
        return None

    def cod_fee_line(self) -> CartFee | None:
        for fee in self.fees:
            if fee.is_cod:
                return fee
        return None

    @staticmethod
    def from_raw(raw: dict[str, Any]) -> RemoteCart:
        return RemoteCart(
            totals=CartTotals.from_raw(raw.get("totals") or {}),
            items=list(raw.get("items") or []),
            shipping_packages=[
                ShippingPackage.from_raw(p) for p in raw.get("shipping_rates") or []
            ],
            coupons=[Coupon.from_raw(c) for c in raw.get("coupons") or []],
            fees=[CartFee.from_raw(f) for f in raw.get("fees") or []],
            needs_shipping=bool(raw.get("needs_shipping", True)),
        )
