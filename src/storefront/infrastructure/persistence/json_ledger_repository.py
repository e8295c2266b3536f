"""JSON-file-backed implementation of LedgerRepository.

The file holds one entry per storage key.  The ledger lives under
``@cart`` with a schema version; derived fields are written for
readability but recomputed from the items on load.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import Ledger, LineItem
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Quantity, format_major, parse_major
from storefront.domain.repository.ledger_repository import LedgerRepository

logger = logging.getLogger(__name__)

STORAGE_KEY = "@cart"
SCHEMA_VERSION = 1


class JsonLedgerRepository(LedgerRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- LedgerRepository interface -------------------------------------------

    def load(self) -> Ledger:
        entry = self._load_raw().get(STORAGE_KEY)
        if entry is None:
            return Ledger()
        if entry.get("version") != SCHEMA_VERSION:
            logger.warning(
                "Discarding persisted cart with schema version %s", entry.get("version")
            )
            return Ledger()
        state = entry.get("state") or {}
        try:
            items = [self._to_domain(raw) for raw in state.get("items", [])]
        except (KeyError, TypeError, ValidationError) as exc:
            logger.warning("Discarding persisted cart with a malformed line: %r", exc)
            return Ledger()
        return Ledger(items=items)

    def save(self, ledger: Ledger) -> None:
        records = self._load_raw()
        records[STORAGE_KEY] = {
            "version": SCHEMA_VERSION,
            "state": {
                "items": [self._to_raw(line) for line in ledger.items],
                "item_count": ledger.item_count,
                "subtotal": format_major(ledger.subtotal),
            },
        }
        self._persist_raw(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(line: LineItem) -> dict[str, Any]:
        product = line.product
        return {
            "product_id": line.product_id,
            "variation_id": line.variation_id,
            "quantity": line.quantity.value,
            "selected_attributes": line.selected_attributes,
            "customized": line.customized,
            "product": {
                "id": product.id,
                "name": product.name,
                "price": str(product.price),
                "in_stock": product.in_stock,
                "manage_stock": product.manage_stock,
                "stock_quantity": product.stock_quantity,
                "max_quantity": product.max_quantity,
            },
        }

    @staticmethod
    def _to_domain(raw: dict[str, Any]) -> LineItem:
        p = raw["product"]
        return LineItem(
            product=Product(
                id=p["id"],
                name=p["name"],
                price=parse_major(p.get("price")),
                in_stock=p.get("in_stock", True),
                manage_stock=p.get("manage_stock", False),
                stock_quantity=p.get("stock_quantity"),
                max_quantity=p.get("max_quantity"),
            ),
            quantity=Quantity(raw["quantity"]),
            variation_id=raw.get("variation_id"),
            selected_attributes=raw.get("selected_attributes") or {},
            customized=raw.get("customized", False),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict[str, Any]:
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Cart storage %s is unreadable, starting empty", self._file_path)
            return {}

    def _persist_raw(self, records: dict[str, Any]) -> None:
        self._file_path.write_text(
            json.dumps(records, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("{}", encoding="utf-8")
