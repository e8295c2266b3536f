"""Application service: Show Cart use case (query)."""

from __future__ import annotations

from storefront.application.dto import CartDTO, CartLineDTO
from storefront.domain.model.cart import Ledger
from storefront.domain.model.value_objects import format_major
from storefront.domain.repository.ledger_repository import LedgerRepository
from storefront.domain.service.cart_signature import cart_signature


class ShowCartHandler:

    def __init__(self, ledger_repo: LedgerRepository) -> None:
        self._ledger_repo = ledger_repo

    def handle(self) -> CartDTO:
        return self.to_dto(self._ledger_repo.load())

    @staticmethod
    def to_dto(ledger: Ledger) -> CartDTO:
        return CartDTO(
            lines=[
                CartLineDTO(
                    product_id=line.product_id,
                    variation_id=line.variation_id,
                    name=line.display_name,
                    quantity=line.quantity.value,
                    customized=line.customized,
                    unit_price=format_major(line.unit_price),
                    line_total=format_major(line.line_total),
                )
                for line in ledger.items
            ],
            item_count=ledger.item_count,
            subtotal=format_major(ledger.subtotal),
            signature=cart_signature(ledger.items),
        )
