"""Application service: Update Cart Quantity use case."""

from __future__ import annotations

import logging

from storefront.application.notifier import Notifier
from storefront.domain.exceptions import CartLimitError, EntityNotFoundError
from storefront.domain.repository.ledger_repository import LedgerRepository

logger = logging.getLogger(__name__)


class UpdateCartQuantityHandler:

    def __init__(self, ledger_repo: LedgerRepository, notifier: Notifier) -> None:
        self._ledger_repo = ledger_repo
        self._notifier = notifier

    def handle(
        self,
        product_id: int,
        quantity: int,
        variation_id: int | None = None,
        customized: bool | None = None,
    ) -> bool:
        ledger = self._ledger_repo.load()

        if quantity <= 0:
            ledger.remove_item(product_id, variation_id, customized)
            self._ledger_repo.save(ledger)
            self._notifier.info("Item Removed", "Item removed from cart")
            return True

        try:
            ledger.update_quantity(product_id, quantity, variation_id, customized)
        except EntityNotFoundError:
            logger.info("Product %s is not in the cart", product_id)
            return False
        except CartLimitError as exc:
            self._notifier.error(exc.title, str(exc))
            return False

        self._ledger_repo.save(ledger)
        return True
