"""Application service: Add To Cart use case.

Resolves the product snapshot, lets the Ledger enforce stock and
purchase limits, persists, and tells the user what happened.  Rule
violations become notifications; the handler reports them as ``False``.
"""

from __future__ import annotations

import logging

from storefront.application.notifier import Notifier
from storefront.domain.exceptions import CartLimitError, EntityNotFoundError
from storefront.domain.repository.ledger_repository import LedgerRepository
from storefront.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class AddToCartHandler:

    def __init__(
        self,
        ledger_repo: LedgerRepository,
        product_repo: ProductRepository,
        notifier: Notifier,
    ) -> None:
        self._ledger_repo = ledger_repo
        self._product_repo = product_repo
        self._notifier = notifier

    def handle(
        self,
        product_id: int,
        quantity: int = 1,
        variation_id: int | None = None,
        selected_attributes: dict[str, str] | None = None,
        customized: bool = False,
    ) -> bool:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product not found: {product_id}")

        ledger = self._ledger_repo.load()
        try:
            line = ledger.add_item(
                product,
                quantity=quantity,
                variation_id=variation_id,
                selected_attributes=selected_attributes,
                customized=customized,
            )
        except CartLimitError as exc:
            logger.info("Add rejected for product %s: %s", product_id, exc)
            self._notifier.error(exc.title, str(exc))
            return False

        self._ledger_repo.save(ledger)
        self._notifier.success("Added to Cart", line.display_name)
        return True
