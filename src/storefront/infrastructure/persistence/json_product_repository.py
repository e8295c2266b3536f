"""JSON-file-backed catalog snapshot used to resolve products for the cart.

The file is a list of product records in the catalog's own shape
(``inStock``, ``manageStock``, ``stockQuantity``, ``maxQuantity``).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import parse_major
from storefront.domain.repository.product_repository import ProductRepository


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: int) -> Product | None:
        for raw in self._load_raw():
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_domain(raw: dict[str, Any]) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=parse_major(raw.get("price")),
            in_stock=raw.get("inStock", True),
            manage_stock=raw.get("manageStock", False),
            stock_quantity=raw.get("stockQuantity"),
            max_quantity=raw.get("maxQuantity") or None,
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict[str, Any]]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
