"""Application service: build the order submission payload.

Order creation itself belongs to the order workflow; this module only
assembles what that workflow submits, using the reconciled prices:

- ``shipping_lines`` from the selected rate
- ``fee_lines``: the COD fee (COD only) followed by one negative line per
  applied coupon, since the order endpoint does not accept negative
  coupon totals directly
"""

from __future__ import annotations

from typing import Any

from storefront.application.checkout_summary import CheckoutPricer, PricedCheckout
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.address import Address, validate_address
from storefront.domain.model.remote_cart import PaymentMethod
from storefront.domain.model.value_objects import format_minor
from storefront.domain.service.price_reconciliation import FeeLine

COD_FEE_LINE_NAME = "Cash on Delivery Fee"


def build_order_payload(
    priced: PricedCheckout,
    address: dict[str, str],
    customer_id: int | None = None,
) -> dict[str, Any]:
    if priced.ledger.is_empty:
        raise ValidationError("Cart is empty")

    paying_cod = priced.payment_method is PaymentMethod.COD
    pricing = priced.pricing

    fee_lines: list[FeeLine] = []
    cod_fee = pricing.cod_fee()
    if paying_cod and cod_fee > 0:
        fee_lines.append(FeeLine(name=COD_FEE_LINE_NAME, total=format_minor(cod_fee)))
    fee_lines.extend(pricing.coupon_fee_lines())

    rate = priced.remote_cart.selected_rate if priced.remote_cart else None
    shipping_lines = []
    if rate is not None:
        shipping_lines.append(
            {
                "method_id": rate.method_id,
                "method_title": rate.name,
                "total": format_minor(rate.price),
            }
        )

    payload: dict[str, Any] = {
        "payment_method": priced.payment_method.remote_hint,
        "payment_method_title": priced.payment_method.title,
        "set_paid": False,
        "status": "processing" if paying_cod else "pending",
        "billing": address,
        "shipping": address,
        "line_items": [
            _line_item(line.product_id, line.variation_id, line.quantity.value)
            for line in priced.ledger.items
        ],
        "shipping_lines": shipping_lines,
        "fee_lines": [fee.to_payload() for fee in fee_lines],
    }
    if customer_id is not None:
        payload["customer_id"] = customer_id
    return payload


def _line_item(product_id: int, variation_id: int | None, quantity: int) -> dict[str, int]:
    item = {"product_id": product_id, "quantity": quantity}
    if variation_id is not None:
        item["variation_id"] = variation_id
    return item


class OrderPayloadHandler:

    def __init__(self, pricer: CheckoutPricer) -> None:
        self._pricer = pricer

    async def handle(
        self,
        payment_method: PaymentMethod,
        address: Address,
        customer_id: int | None = None,
    ) -> dict[str, Any]:
        """Raises ValidationError for an incomplete address or empty cart."""
        address_payload = validate_address(address)
        priced = await self._pricer.price(payment_method)
        return build_order_payload(priced, address_payload, customer_id)
