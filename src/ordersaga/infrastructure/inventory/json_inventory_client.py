"""JSON-file-backed product catalogue implementing InventoryClient.

Stands in for the product service when no remote URL is configured, and
doubles as the admin surface for seeding products and stock.

Stock decrements are two-phase (validate-then-mutate) so a multi-item
request never leaves the catalogue partially decremented.
"""

from __future__ import annotations

import json
import threading
from decimal import Decimal
from pathlib import Path

import structlog

from ordersaga.domain.exceptions import (
    InsufficientStock,
    InventoryUnavailable,
    ProductNotFound,
    ValidationError,
)
from ordersaga.domain.gateway.inventory_client import InventoryClient
from ordersaga.domain.model.product import ProductSnapshot
from ordersaga.domain.model.value_objects import Money, StockItem

logger = structlog.get_logger(__name__)


class JsonInventoryClient(InventoryClient):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        self._ensure_file()

    # --- InventoryClient interface --------------------------------------------

    def fetch_snapshots(self, product_ids: set[str]) -> list[ProductSnapshot]:
        with self._lock:
            records = self._load_raw()
        return [self._to_snapshot(raw) for raw in records if raw["id"] in product_ids]

    def decrease_stock(self, items: list[StockItem], reference: str) -> None:
        with self._lock:
            records = self._load_raw()
            by_id = {raw["id"]: raw for raw in records}

            # Phase 1: validate every item before touching anything
            for item in items:
                raw = by_id.get(item.product_id)
                if raw is None:
                    raise InsufficientStock(
                        f"Product '{item.product_id}' is not stocked",
                        product_id=item.product_id,
                    )
                if item.quantity.value > raw["stock"]:
                    raise InsufficientStock(
                        f"Insufficient stock for {raw['name']} "
                        f"(need {item.quantity.value}, have {raw['stock']})",
                        product_id=item.product_id,
                    )

            # Phase 2: mutate and persist once
            for item in items:
                by_id[item.product_id]["stock"] -= item.quantity.value
            self._persist_raw(records)

        logger.info("catalogue.stock_decreased", reference=reference, products=len(items))

    def restock(self, items: list[StockItem], reference: str) -> None:
        with self._lock:
            records = self._load_raw()
            by_id = {raw["id"]: raw for raw in records}
            unknown = [item.product_id for item in items if item.product_id not in by_id]
            if unknown:
                raise ProductNotFound(unknown)
            for item in items:
                by_id[item.product_id]["stock"] += item.quantity.value
            self._persist_raw(records)

        logger.info("catalogue.restocked", reference=reference, products=len(items))

    # --- Catalogue administration ---------------------------------------------

    def add_product(self, snapshot: ProductSnapshot) -> None:
        if snapshot.stock < 0:
            raise ValidationError("Stock cannot be negative")
        with self._lock:
            records = self._load_raw()
            if any(raw["id"] == snapshot.product_id for raw in records):
                raise ValidationError(f"Product '{snapshot.product_id}' already exists")
            records.append(self._to_raw(snapshot))
            self._persist_raw(records)

    def list_products(self) -> list[ProductSnapshot]:
        with self._lock:
            return [self._to_snapshot(raw) for raw in self._load_raw()]

    def set_stock(self, product_id: str, quantity: int) -> None:
        if quantity < 0:
            raise ValidationError("Stock cannot be negative")
        with self._lock:
            records = self._load_raw()
            for raw in records:
                if raw["id"] == product_id:
                    raw["stock"] = quantity
                    self._persist_raw(records)
                    return
        raise ValidationError(f"Product '{product_id}' not found")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(snapshot: ProductSnapshot) -> dict:
        return {
            "id": snapshot.product_id,
            "name": snapshot.name,
            "price": str(snapshot.unit_price.amount),
            "currency": snapshot.unit_price.currency,
            "description": snapshot.description,
            "icon": snapshot.icon,
            "stock": snapshot.stock,
        }

    @staticmethod
    def _to_snapshot(raw: dict) -> ProductSnapshot:
        return ProductSnapshot(
            product_id=raw["id"],
            name=raw["name"],
            unit_price=Money(Decimal(raw["price"]), raw.get("currency", "CNY")),
            description=raw.get("description", ""),
            icon=raw.get("icon", ""),
            stock=raw.get("stock", 0),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise InventoryUnavailable(f"Cannot read catalogue: {exc}") from exc

    def _persist_raw(self, records: list[dict]) -> None:
        # Write to a sibling file and rename so a failed write leaves the old stock.
        tmp = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        try:
            tmp.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
            tmp.replace(self._file_path)
        except OSError as exc:
            raise InventoryUnavailable(f"Cannot write catalogue: {exc}") from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
