"""Store-wide pricing fallbacks published by the backend's ``/config``."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from storefront.domain.model.value_objects import parse_major


@dataclass(frozen=True)
class AppConfig:
    """Last-resort constants, all in major units.

    Only used when the remote cart has no better answer.
    """

    cod_fee: Decimal = Decimal("20")
    free_shipping_threshold: Decimal = Decimal("500")
    shipping_cost: Decimal = Decimal("79")

    @staticmethod
    def from_raw(raw: dict[str, Any] | None) -> AppConfig:
        defaults = AppConfig()
        raw = raw or {}

        def pick(key: str, default: Decimal) -> Decimal:
            if raw.get(key) in (None, ""):
                return default
            return parse_major(raw[key])

        return AppConfig(
            cod_fee=pick("cod_fee", defaults.cod_fee),
            free_shipping_threshold=pick(
                "free_shipping_threshold", defaults.free_shipping_threshold
            ),
            shipping_cost=pick("shipping_cost", defaults.shipping_cost),
        )
