"""Application service: Checkout Summary use case (query).

Puts the pieces together the way the checkout screen needs them:

1. load the ledger (what is being bought);
2. sync it to the remote cart (what it costs); on failure, keep going
   with fully local pricing;
3. make sure a shipping rate is selected;
4. reconcile the numbers and map them to a DTO.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from storefront.application.app_config_loader import AppConfigLoader
from storefront.application.dto import (
    AppliedCouponDTO,
    CheckoutSummaryDTO,
    ShippingRateDTO,
)
from storefront.application.remote_cart_sync import RemoteCartSynchronizer
from storefront.application.shipping_auto_select import ShippingRateAutoSelector
from storefront.application.show_cart import ShowCartHandler
from storefront.domain.exceptions import NetworkError
from storefront.domain.model.cart import Ledger
from storefront.domain.model.remote_cart import PaymentMethod, RemoteCart
from storefront.domain.model.value_objects import format_major, format_minor
from storefront.domain.repository.ledger_repository import LedgerRepository
from storefront.domain.service.price_reconciliation import PriceReconciliation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricedCheckout:
    ledger: Ledger
    remote_cart: RemoteCart | None
    payment_method: PaymentMethod
    pricing: PriceReconciliation


class CheckoutPricer:

    def __init__(
        self,
        ledger_repo: LedgerRepository,
        synchronizer: RemoteCartSynchronizer,
        auto_selector: ShippingRateAutoSelector,
        config_loader: AppConfigLoader,
    ) -> None:
        self._ledger_repo = ledger_repo
        self._synchronizer = synchronizer
        self._auto_selector = auto_selector
        self._config_loader = config_loader

    async def price(self, payment_method: PaymentMethod) -> PricedCheckout:
        ledger = self._ledger_repo.load()

        try:
            remote = await self._synchronizer.sync(ledger.items, payment_method)
        except NetworkError as exc:
            logger.warning("Remote cart unavailable, pricing locally: %s", exc.message)
            remote = None

        if remote is not None:
            remote = await self._auto_selector.evaluate(remote)

        config = await self._config_loader.load()
        pricing = PriceReconciliation(
            remote_cart=remote,
            local_subtotal=ledger.subtotal,
            shipping_rates=remote.shipping_rates if remote else [],
            payment_method=payment_method,
            config=config,
        )
        return PricedCheckout(ledger, remote, payment_method, pricing)


class CheckoutSummaryHandler:

    def __init__(self, pricer: CheckoutPricer) -> None:
        self._pricer = pricer

    async def handle(self, payment_method: PaymentMethod) -> CheckoutSummaryDTO:
        priced = await self._pricer.price(payment_method)
        return self._to_dto(priced)

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_dto(priced: PricedCheckout) -> CheckoutSummaryDTO:
        breakdown = priced.pricing.breakdown()
        remote = priced.remote_cart
        paying_cod = priced.payment_method is PaymentMethod.COD

        return CheckoutSummaryDTO(
            payment_method=priced.payment_method.value,
            currency_symbol=breakdown.currency_symbol,
            cart=ShowCartHandler.to_dto(priced.ledger),
            priced_remotely=remote is not None,
            subtotal=format_major(breakdown.subtotal),
            shipping=breakdown.shipping_label,
            cod_fee=format_minor(breakdown.cod_fee) if paying_cod else None,
            discount=format_minor(breakdown.discount),
            total=breakdown.total,
            shipping_rates=[
                ShippingRateDTO(
                    rate_id=rate.rate_id,
                    name=rate.name,
                    price=format_minor(rate.price),
                    selected=rate.selected,
                )
                for rate in (remote.shipping_rates if remote else [])
            ],
            coupons=[
                AppliedCouponDTO(
                    code=coupon.code,
                    discount=format_minor(coupon.total_discount),
                )
                for coupon in (remote.coupons if remote else [])
            ],
        )
