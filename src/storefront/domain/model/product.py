"""Product snapshot held by cart lines.

Products are owned by the remote catalog.  The cart keeps the snapshot it
was given at add time so stock and purchase limits can be checked without
a network call.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

DEFAULT_MAX_QUANTITY = 99


@dataclass(frozen=True)
class Product:
    """A catalog product as seen by the cart."""

    id: int
    name: str
    price: Decimal  # major units
    in_stock: bool = True
    manage_stock: bool = False
    stock_quantity: int | None = None
    max_quantity: int | None = None

    @property
    def purchase_limit(self) -> int:
        return self.max_quantity or DEFAULT_MAX_QUANTITY

    @property
    def tracks_stock(self) -> bool:
        return self.manage_stock and self.stock_quantity is not None
