"""Domain service: cart signature.

A deterministic string derived from the ledger's contents, used as the
cache/dedup key for the remote cart.  Storage order never matters.
"""

from __future__ import annotations

from collections.abc import Iterable

from storefront.domain.model.cart import LineItem


def cart_signature(items: Iterable[LineItem]) -> str:
    """Return ``productId-variationId|0-quantity`` parts joined by ``|``.

    Lines are ordered by product id; variation id and quantity break
    ties so any permutation of the same lines yields the same string.
    """
    parts = sorted(
        (line.product_id, line.variation_id or 0, line.quantity.value)
        for line in items
    )
    return "|".join(f"{pid}-{vid}-{qty}" for pid, vid, qty in parts)
