"""Domain service: Price Reconciliation.

Derives the shipping cost, COD fee and grand total shown at checkout from
two sources that lag behind each other:

* the remote cart, authoritative for price once it exists, and
* the local ledger subtotal plus ``AppConfig`` constants, used as
  fallbacks until it does.

When a remote cart is present its ``total_price`` is corrected by three
independent lag heuristics, always applied in this order:

1. missing COD fee: the backend has not yet recalculated after the user
   switched to COD;
2. stale COD fee: the user switched to card but the backend still
   charges the COD fee line;
3. missing shipping: the backend has not applied shipping yet, e.g.
   right after an address change.

The heuristics guess at *why* the remote total looks wrong.  Under rapid
toggling they can double- or under-apply; that limitation is accepted.

Nothing in here raises for missing data: every input has a fallback so
the result is always renderable.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal

from storefront.domain.model.app_config import AppConfig
from storefront.domain.model.remote_cart import (
    DEFAULT_CURRENCY_SYMBOL,
    PaymentMethod,
    RemoteCart,
    ShippingRate,
)
from storefront.domain.model.value_objects import (
    format_major,
    format_minor,
    to_major,
    to_minor,
)


@dataclass(frozen=True)
class FeeLine:
    """An order fee line, as the order endpoint accepts it."""

    name: str
    total: str  # major units, e.g. "-50.00"
    tax_status: str = "none"
    tax_class: str = ""

    def to_payload(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class PriceBreakdown:
    currency_symbol: str
    subtotal: Decimal
    shipping_cost: Decimal
    shipping_label: str
    cod_fee: int  # minor units; 0 unless paying by COD
    discount: int  # minor units
    total: str


class PriceReconciliation:

    def __init__(
        self,
        remote_cart: RemoteCart | None,
        local_subtotal: Decimal,
        shipping_rates: list[ShippingRate] | None,
        payment_method: PaymentMethod,
        config: AppConfig | None = None,
    ) -> None:
        self._remote = remote_cart
        self._local_subtotal = local_subtotal
        if shipping_rates is None:
            shipping_rates = remote_cart.shipping_rates if remote_cart else []
        self._rates = shipping_rates
        self._payment_method = payment_method
        self._config = config or AppConfig()

    # --- Building blocks ------------------------------------------------------

    def currency_symbol(self) -> str:
        if self._remote is not None:
            return self._remote.totals.currency_symbol
        return DEFAULT_CURRENCY_SYMBOL

    def effective_subtotal(self) -> Decimal:
        """Remote ``total_items`` when a remote cart exists, else local."""
        if self._remote is not None:
            return to_major(self._remote.totals.total_items)
        return self._local_subtotal

    def shipping_cost(self) -> Decimal:
        """Shipping in major units."""
        if self.effective_subtotal() >= self._config.free_shipping_threshold:
            return Decimal("0")

        for rate in self._rates:
            if rate.selected:
                return to_major(rate.price)

        if self._rates:
            return to_major(self._rates[0].price)
        return self._config.shipping_cost

    def shipping_label(self) -> str:
        cost = self.shipping_cost()
        if cost == 0:
            return "Free"
        return f"{self.currency_symbol()} {format_major(cost)}"

    def cod_fee(self) -> int:
        """COD fee in minor units."""
        if self._remote is not None:
            line = self._remote.cod_fee_line()
            if line is not None:
                return line.total
            # May include non-COD fees; close enough while only COD is charged.
            if self._remote.totals.total_fees > 0:
                return self._remote.totals.total_fees

        if self.effective_subtotal() < self._config.free_shipping_threshold:
            return to_minor(self._config.cod_fee)
        return 0

    def discount_total(self) -> int:
        if self._remote is None:
            return 0
        return self._remote.totals.total_discount

    # --- Grand total ----------------------------------------------------------

    def total_minor(self) -> int:
        cod_fee = self.cod_fee()
        shipping = self.shipping_cost()
        paying_cod = self._payment_method is PaymentMethod.COD

        if self._remote is None:
            total = to_minor(self._local_subtotal)
            if paying_cod and cod_fee > 0:
                total += cod_fee
            return total + to_minor(shipping)

        totals = self._remote.totals
        total = totals.total_price

        if totals.total_fees <= 0 and paying_cod and cod_fee > 0:
            total += cod_fee

        if self._payment_method is PaymentMethod.CARD and totals.total_fees > 0:
            line = self._remote.cod_fee_line()
            if line is not None:
                total -= line.total

        if totals.total_shipping <= 0 and shipping > 0:
            total += to_minor(shipping)

        return total

    def total(self) -> str:
        return format_minor(self.total_minor())

    # --- Submission helpers ---------------------------------------------------

    def coupon_fee_lines(self) -> list[FeeLine]:
        """One negative fee line per applied coupon.

        The order endpoint rejects negative coupon totals, so discounts
        travel as fee lines instead.
        """
        if self._remote is None:
            return []
        return [
            FeeLine(
                name=f"Discount ({coupon.code})",
                total=f"-{format_minor(coupon.total_discount)}",
            )
            for coupon in self._remote.coupons
        ]

    def breakdown(self) -> PriceBreakdown:
        paying_cod = self._payment_method is PaymentMethod.COD
        return PriceBreakdown(
            currency_symbol=self.currency_symbol(),
            subtotal=self.effective_subtotal(),
            shipping_cost=self.shipping_cost(),
            shipping_label=self.shipping_label(),
            cod_fee=self.cod_fee() if paying_cod else 0,
            discount=self.discount_total(),
            total=self.total(),
        )
