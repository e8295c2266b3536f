"""Application service: Clear Cart use case."""

from __future__ import annotations

from storefront.domain.repository.ledger_repository import LedgerRepository


class ClearCartHandler:

    def __init__(self, ledger_repo: LedgerRepository) -> None:
        self._ledger_repo = ledger_repo

    def handle(self) -> None:
        ledger = self._ledger_repo.load()
        ledger.clear()
        self._ledger_repo.save(ledger)
