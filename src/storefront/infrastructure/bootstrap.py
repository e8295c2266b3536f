"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

A ``CheckoutSession`` owns the process-wide query cache: it is created
when a session starts and closed (cache cleared, HTTP client closed) on
logout or exit.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from storefront.application.address_gate import AddressGate
from storefront.application.app_config_loader import AppConfigLoader
from storefront.application.checkout_summary import CheckoutPricer
from storefront.application.coupon_manager import CouponManager
from storefront.application.notifier import Notifier
from storefront.application.query_cache import QueryCache
from storefront.application.remote_cart_sync import RemoteCartSynchronizer
from storefront.application.shipping_auto_select import ShippingRateAutoSelector
from storefront.domain.repository.cart_gateway import CartGateway
from storefront.domain.repository.ledger_repository import LedgerRepository
from storefront.infrastructure.console_notifier import ConsoleNotifier
from storefront.infrastructure.http.store_api_client import StoreApiClient
from storefront.infrastructure.persistence.json_ledger_repository import (
    JsonLedgerRepository,
)
from storefront.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from storefront.infrastructure.settings import Settings

T = TypeVar("T")


def settings() -> Settings:
    return Settings.from_env()


def ledger_repository() -> JsonLedgerRepository:
    return JsonLedgerRepository(settings().data_dir / "cart.json")


def product_repository() -> JsonProductRepository:
    return JsonProductRepository(settings().data_dir / "products.json")


def notifier() -> ConsoleNotifier:
    return ConsoleNotifier()


def store_api_client() -> StoreApiClient:
    cfg = settings()
    return StoreApiClient(
        base_url=cfg.api_url,
        api_key=cfg.api_key,
        token_provider=lambda: cfg.api_token,
        timeout=cfg.timeout,
    )


@dataclass
class CheckoutSession:
    gateway: CartGateway
    cache: QueryCache
    synchronizer: RemoteCartSynchronizer
    auto_selector: ShippingRateAutoSelector
    address_gate: AddressGate
    coupons: CouponManager
    pricer: CheckoutPricer

    async def aclose(self) -> None:
        """Let in-flight work finish, then tear the session down."""
        self.address_gate.close()
        await self.address_gate.flush()
        await self.synchronizer.drain()
        self.cache.clear()
        if isinstance(self.gateway, StoreApiClient):
            await self.gateway.aclose()


def checkout_session(
    gateway: CartGateway | None = None,
    ledger_repo: LedgerRepository | None = None,
    notifier_: Notifier | None = None,
) -> CheckoutSession:
    gateway = gateway or store_api_client()
    ledger_repo = ledger_repo or ledger_repository()
    notifier_ = notifier_ or notifier()

    cache = QueryCache()
    synchronizer = RemoteCartSynchronizer(gateway, cache)
    auto_selector = ShippingRateAutoSelector(synchronizer, notifier_)
    return CheckoutSession(
        gateway=gateway,
        cache=cache,
        synchronizer=synchronizer,
        auto_selector=auto_selector,
        address_gate=AddressGate(synchronizer, auto_selector, notifier_),
        coupons=CouponManager(synchronizer, gateway, cache, notifier_),
        pricer=CheckoutPricer(
            ledger_repo, synchronizer, auto_selector, AppConfigLoader(gateway, cache)
        ),
    )


def run_session(action: Callable[[CheckoutSession], Awaitable[T]]) -> T:
    """Run *action* inside a fresh session on a new event loop."""

    async def main() -> T:
        session = checkout_session()
        try:
            return await action(session)
        finally:
            await session.aclose()

    return asyncio.run(main())
