"""Application service: load the store's pricing fallbacks.

Fetched once and cached for an hour.  When the backend can not be
reached the built-in defaults are used; the config is only ever a
fallback, so there is nothing to report to the user.
"""

from __future__ import annotations

import logging

from storefront.application.query_cache import QueryCache
from storefront.domain.exceptions import NetworkError
from storefront.domain.model.app_config import AppConfig
from storefront.domain.repository.cart_gateway import CartGateway

logger = logging.getLogger(__name__)

APP_CONFIG_KEY = ("app_config",)
APP_CONFIG_FRESH_FOR = 60 * 60.0


class AppConfigLoader:

    def __init__(self, gateway: CartGateway, cache: QueryCache) -> None:
        self._gateway = gateway
        self._cache = cache

    async def load(self) -> AppConfig:
        try:
            return await self._cache.fetch(
                APP_CONFIG_KEY, self._gateway.get_config, APP_CONFIG_FRESH_FOR
            )
        except NetworkError as exc:
            logger.warning("Using default app config: %s", exc.message)
            return AppConfig()
