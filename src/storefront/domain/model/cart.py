"""Ledger aggregate: the local cart.

The Ledger is the single source of truth for *what* is being bought.  It
owns its line items and enforces stock and purchase limits.  Its subtotal
is only a fallback for display until the remote cart has priced the
same contents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from storefront.domain.exceptions import (
    EntityNotFoundError,
    OutOfStockError,
    PurchaseLimitError,
    StockLimitError,
)
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Quantity

# Flat surcharge per customized unit, in major units.
CUSTOMIZATION_SURCHARGE = Decimal("35")


@dataclass
class LineItem:
    """One product/variation/customization combination in the cart.

    Identity for merging is ``(product id, variation id, customized)``.
    """

    product: Product
    quantity: Quantity
    variation_id: int | None = None
    selected_attributes: dict[str, str] = field(default_factory=dict)
    customized: bool = False

    @property
    def product_id(self) -> int:
        return self.product.id

    @property
    def unit_price(self) -> Decimal:
        if self.customized:
            return self.product.price + CUSTOMIZATION_SURCHARGE
        return self.product.price

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity.value

    @property
    def display_name(self) -> str:
        """Product name followed by the selected options, if any."""
        if not self.selected_attributes:
            return self.product.name
        return f"{self.product.name} ({', '.join(self.selected_attributes.values())})"

    def is_same_line(
        self, product_id: int, variation_id: int | None, customized: bool
    ) -> bool:
        return (
            self.product.id == product_id
            and self.variation_id == variation_id
            and self.customized == customized
        )

    def matches(
        self,
        product_id: int,
        variation_id: int | None = None,
        customized: bool | None = None,
    ) -> bool:
        """Loose match: an unsupplied ``customized`` flag matches both."""
        return (
            self.product.id == product_id
            and self.variation_id == variation_id
            and (customized is None or self.customized == customized)
        )


@dataclass
class Ledger:
    """Aggregate root for the local cart.

    Invariants:
    - no line's quantity exceeds its product's stock (when stock is
      managed) or purchase limit
    - ``item_count`` and ``subtotal`` always reflect ``items``; they are
      recomputed after every mutation and on construction, never trusted
      from storage
    - a rejected mutation leaves the ledger untouched
    """

    items: list[LineItem] = field(default_factory=list)
    item_count: int = field(default=0, init=False)
    subtotal: Decimal = field(default=Decimal("0"), init=False)

    def __post_init__(self) -> None:
        self._recompute()

    # --- Mutations ------------------------------------------------------------

    def add_item(
        self,
        product: Product,
        quantity: int = 1,
        variation_id: int | None = None,
        selected_attributes: dict[str, str] | None = None,
        customized: bool = False,
    ) -> LineItem:
        """Add units of a product, merging into a matching line if present.

        Raises a ``CartLimitError`` subclass, without mutating, when the
        product is out of stock or the resulting quantity would exceed
        the stock or purchase limit.
        """
        added = Quantity(quantity)
        existing = self._find_line(product.id, variation_id, customized)
        current = existing.quantity.value if existing else 0

        self._check_limits(product, current + added.value, current)

        if existing is not None:
            existing.quantity = existing.quantity + added.value
            line = existing
        else:
            line = LineItem(
                product=product,
                quantity=added,
                variation_id=variation_id,
                selected_attributes=dict(selected_attributes or {}),
                customized=customized,
            )
            self.items.append(line)

        self._recompute()
        return line

    def remove_item(
        self,
        product_id: int,
        variation_id: int | None = None,
        customized: bool | None = None,
    ) -> int:
        """Remove every matching line and return how many were removed."""
        kept = [
            line
            for line in self.items
            if not line.matches(product_id, variation_id, customized)
        ]
        removed = len(self.items) - len(kept)
        self.items = kept
        self._recompute()
        return removed

    def update_quantity(
        self,
        product_id: int,
        quantity: int,
        variation_id: int | None = None,
        customized: bool | None = None,
    ) -> None:
        """Set the quantity of matching lines; ``<= 0`` removes them."""
        if quantity <= 0:
            self.remove_item(product_id, variation_id, customized)
            return

        lines = [
            line
            for line in self.items
            if line.matches(product_id, variation_id, customized)
        ]
        if not lines:
            raise EntityNotFoundError(
                f"Product ID {product_id} is not in the cart"
            )

        new_quantity = Quantity(quantity)
        for line in lines:
            self._check_limits(line.product, quantity, line.quantity.value)

        for line in lines:
            line.quantity = new_quantity
        self._recompute()

    def clear(self) -> None:
        self.items = []
        self._recompute()

    # --- Queries --------------------------------------------------------------

    def get_quantity(
        self,
        product_id: int,
        variation_id: int | None = None,
        customized: bool | None = None,
    ) -> int:
        for line in self.items:
            if line.matches(product_id, variation_id, customized):
                return line.quantity.value
        return 0

    def contains(
        self,
        product_id: int,
        variation_id: int | None = None,
        customized: bool | None = None,
    ) -> bool:
        return any(
            line.matches(product_id, variation_id, customized)
            for line in self.items
        )

    @property
    def is_empty(self) -> bool:
        return not self.items

    # --- Internal helpers -----------------------------------------------------

    def _find_line(
        self, product_id: int, variation_id: int | None, customized: bool
    ) -> LineItem | None:
        for line in self.items:
            if line.is_same_line(product_id, variation_id, customized):
                return line
        return None

    @staticmethod
    def _check_limits(product: Product, new_total: int, current: int) -> None:
        if not product.in_stock:
            raise OutOfStockError(f"{product.name} is currently unavailable")

        if product.tracks_stock and new_total > product.stock_quantity:
            raise StockLimitError(
                "You have reached the available stock limit. "
                f"You have {current} in cart."
            )

        limit = product.purchase_limit
        if new_total > limit:
            raise PurchaseLimitError(
                f"This item has a limit of {limit} per customer"
            )

    def _recompute(self) -> None:
        self.item_count = sum(line.quantity.value for line in self.items)
        self.subtotal = sum(
            (line.line_total for line in self.items), Decimal("0")
        )
