"""Tests for the checkout summary and the order payload builder."""

import asyncio
from dataclasses import replace
from decimal import Decimal

import pytest

from storefront.application.app_config_loader import AppConfigLoader
from storefront.application.checkout_summary import CheckoutPricer, CheckoutSummaryHandler
from storefront.application.order_payload import OrderPayloadHandler
from storefront.application.query_cache import QueryCache
from storefront.application.remote_cart_sync import RemoteCartSynchronizer
from storefront.application.shipping_auto_select import ShippingRateAutoSelector
from storefront.domain.exceptions import NetworkError, ValidationError
from storefront.domain.model.address import Address
from storefront.domain.model.app_config import AppConfig
from storefront.domain.model.cart import Ledger
from storefront.domain.model.remote_cart import Coupon, PaymentMethod
from tests.fakes import (
    FakeCartGateway,
    FakeLedgerRepository,
    FakeNotifier,
    cod_fee,
    make_cart,
    make_product,
    make_rate,
)

HOME = Address(
    first_name="Asha",
    last_name="Rao",
    address_1="12 MG Road",
    city="Bengaluru",
    state="KA",
    postcode="560001",
    country="IN",
    email="asha@example.com",
    phone="9876543210",
)


def _setup(quantity=1, cart=None):
    ledger = Ledger()
    if quantity:
        ledger.add_item(make_product(1, "T-Shirt", "400"), quantity)
    gateway = FakeCartGateway(cart)
    cache = QueryCache()
    sync = RemoteCartSynchronizer(gateway, cache)
    selector = ShippingRateAutoSelector(sync, FakeNotifier())
    pricer = CheckoutPricer(
        FakeLedgerRepository(ledger), sync, selector, AppConfigLoader(gateway, cache)
    )
    return pricer, sync, gateway


def _run(sync, coro):
    async def scenario():
        result = await coro
        await sync.drain()
        return result

    return asyncio.run(scenario())


class TestCheckoutSummary:

    def test_local_fallback_when_remote_unavailable(self):
        pricer, sync, gateway = _setup()
        gateway.failures["sync_items"] = NetworkError("offline")
        gateway.failures["get_config"] = NetworkError("offline")

        dto = _run(sync, CheckoutSummaryHandler(pricer).handle(PaymentMethod.COD))

        assert not dto.priced_remotely
        assert dto.subtotal == "400.00"
        assert dto.shipping == "₹ 79.00"
        assert dto.cod_fee == "20.00"
        assert dto.total == "499.00"

    def test_remote_pricing_with_lagging_cod_fee(self):
        cart = make_cart(
            total_items=47100,
            total_shipping=7900,
            total_price=55000,
            rates=[make_rate(price=7900, selected=True)],
        )
        pricer, sync, _ = _setup(cart=cart)

        dto = _run(sync, CheckoutSummaryHandler(pricer).handle(PaymentMethod.COD))

        assert dto.priced_remotely
        assert dto.subtotal == "471.00"
        assert dto.cod_fee == "20.00"
        assert dto.total == "570.00"
        assert dto.shipping_rates[0].selected

    def test_card_hides_cod_fee(self):
        cart = make_cart(total_items=47100, total_shipping=7900, total_price=55000,
                         total_fees=2000, fees=[cod_fee(2000)])
        pricer, sync, _ = _setup(cart=cart)

        dto = _run(sync, CheckoutSummaryHandler(pricer).handle(PaymentMethod.CARD))

        assert dto.cod_fee is None
        assert dto.total == "530.00"

    def test_selects_a_rate_when_none_selected(self):
        cart = make_cart(total_items=40000, total_price=47900, total_shipping=7900,
                         rates=[make_rate("flat_rate:1"), make_rate("flat_rate:2")])
        pricer, sync, gateway = _setup(cart=cart)
        gateway.responses["select_shipping_rate"] = make_cart(
            total_items=40000, total_price=47900, total_shipping=7900,
            rates=[make_rate("flat_rate:1", selected=True), make_rate("flat_rate:2")],
        )

        dto = _run(sync, CheckoutSummaryHandler(pricer).handle(PaymentMethod.CARD))

        assert ("select_shipping_rate", "flat_rate:1") in gateway.calls
        assert [r.selected for r in dto.shipping_rates] == [True, False]

    def test_uses_remote_config(self):
        pricer, sync, gateway = _setup()
        gateway.failures["sync_items"] = NetworkError("offline")
        gateway.config = AppConfig(shipping_cost=Decimal("49"))

        dto = _run(sync, CheckoutSummaryHandler(pricer).handle(PaymentMethod.CARD))

        assert dto.shipping == "₹ 49.00"
        assert dto.total == "449.00"


class TestOrderPayload:

    def _priced_cart(self):
        return make_cart(
            total_items=60000,
            total_shipping=0,
            total_price=54000,
            total_fees=0,
            total_discount=6000,
            rates=[make_rate("free_shipping:3", price=0, selected=True, name="Free shipping")],
            coupons=[Coupon("SAVE10", "percent", 6000)],
        )

    def test_card_payload(self):
        pricer, sync, _ = _setup(quantity=2, cart=self._priced_cart())

        payload = _run(sync, OrderPayloadHandler(pricer).handle(PaymentMethod.CARD, HOME, 42))

        assert payload["payment_method"] == "razorpay"
        assert payload["status"] == "pending"
        assert payload["set_paid"] is False
        assert payload["customer_id"] == 42
        assert payload["line_items"] == [{"product_id": 1, "quantity": 2}]
        assert payload["billing"] == payload["shipping"]
        assert payload["billing"]["city"] == "Bengaluru"
        assert payload["shipping_lines"] == [
            {"method_id": "flat_rate", "method_title": "Free shipping", "total": "0.00"}
        ]
        assert payload["fee_lines"] == [
            {"name": "Discount (SAVE10)", "total": "-60.00", "tax_status": "none", "tax_class": ""}
        ]

    def test_cod_payload_has_fee_line_first(self):
        cart = make_cart(
            total_items=30000, total_shipping=7900, total_price=39900,
            total_fees=2000, fees=[cod_fee(2000)],
            rates=[make_rate(price=7900, selected=True)],
            coupons=[Coupon("FLAT5", "fixed_cart", 500)],
        )
        pricer, sync, _ = _setup(cart=cart)

        payload = _run(sync, OrderPayloadHandler(pricer).handle(PaymentMethod.COD, HOME))

        assert payload["status"] == "processing"
        assert "customer_id" not in payload
        assert [fee["name"] for fee in payload["fee_lines"]] == [
            "Cash on Delivery Fee",
            "Discount (FLAT5)",
        ]
        assert payload["fee_lines"][0]["total"] == "20.00"

    def test_empty_cart_rejected(self):
        pricer, sync, _ = _setup(quantity=0)
        with pytest.raises(ValidationError, match="Cart is empty"):
            _run(sync, OrderPayloadHandler(pricer).handle(PaymentMethod.CARD, HOME))

    def test_incomplete_address_rejected_before_pricing(self):
        pricer, sync, gateway = _setup()
        with pytest.raises(ValidationError, match="City is required"):
            address = replace(HOME, city="")
            _run(sync, OrderPayloadHandler(pricer).handle(PaymentMethod.CARD, address))
        assert gateway.calls == []
