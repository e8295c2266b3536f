"""Abstract repository for the Ledger aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  There is exactly one ledger per device.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.cart import Ledger


class LedgerRepository(ABC):

    @abstractmethod
    def load(self) -> Ledger:
        """Return the persisted ledger, or an empty one."""

    @abstractmethod
    def save(self, ledger: Ledger) -> None:
        """Persist the ledger's line items."""
