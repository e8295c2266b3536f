"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.  Amounts are preformatted
strings in major units.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CartLineDTO:
    product_id: int
    variation_id: int | None
    name: str  # includes selected options
    quantity: int
    customized: bool
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class CartDTO:
    lines: list[CartLineDTO]
    item_count: int
    subtotal: str
    signature: str


@dataclass(frozen=True)
class ShippingRateDTO:
    rate_id: str
    name: str
    price: str
    selected: bool


@dataclass(frozen=True)
class AppliedCouponDTO:
    code: str
    discount: str


@dataclass(frozen=True)
class CheckoutSummaryDTO:
    """Everything the checkout screen renders."""

    payment_method: str
    currency_symbol: str
    cart: CartDTO
    priced_remotely: bool
    subtotal: str
    shipping: str  # "Free" or "<symbol> 79.00"
    cod_fee: str | None  # None unless paying by COD
    discount: str
    total: str
    shipping_rates: list[ShippingRateDTO] = field(default_factory=list)
    coupons: list[AppliedCouponDTO] = field(default_factory=list)
