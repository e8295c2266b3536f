"""Application service: Remove From Cart use case."""

from __future__ import annotations

from storefront.application.notifier import Notifier
from storefront.domain.repository.ledger_repository import LedgerRepository


class RemoveFromCartHandler:

    def __init__(self, ledger_repo: LedgerRepository, notifier: Notifier) -> None:
        self._ledger_repo = ledger_repo
        self._notifier = notifier

    def handle(
        self,
        product_id: int,
        variation_id: int | None = None,
        customized: bool | None = None,
    ) -> bool:
        """Remove matching lines.

        ``customized=None`` removes both the customized and the plain line.
        """
        ledger = self._ledger_repo.load()
        removed = ledger.remove_item(product_id, variation_id, customized)
        self._ledger_repo.save(ledger)
        self._notifier.info("Item Removed", "Item removed from cart")
        return removed > 0
