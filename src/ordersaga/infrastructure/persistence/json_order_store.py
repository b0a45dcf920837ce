"""JSON-file-backed implementation of OrderStore.

Headers and lines live in two files of one data directory.  Every
read-modify-write goes through one lock, which gives ``update_status``
its compare-and-set guarantee within a process.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from ordersaga.domain.exceptions import StoreUnavailable
from ordersaga.domain.model.order import Order, OrderLine, OrderStatus, PaymentStatus
from ordersaga.domain.model.value_objects import Buyer, Money, Quantity
from ordersaga.domain.repository.order_store import OrderStore


class JsonOrderStore(OrderStore):

    def __init__(self, data_dir: Path) -> None:
        self._orders_path = data_dir / "orders.json"
        self._lines_path = data_dir / "order_lines.json"
        self._lock = threading.RLock()
        # Ids being placed right now; held in memory, like the lock.
        self._claims: set[str] = set()
        self._ensure_file(self._orders_path)
        self._ensure_file(self._lines_path)

    # --- OrderStore interface -------------------------------------------------

    def save_order(self, order: Order) -> None:
        with self._lock:
            orders = self._load_raw(self._orders_path)

            # Upsert: replace if exists, otherwise append
            replaced = False
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    orders[i] = self._order_to_raw(order)
                    replaced = True
                    break
            if not replaced:
                orders.append(self._order_to_raw(order))

            self._persist_raw(self._orders_path, orders)

    def find_order_by_id(self, order_id: str) -> Order | None:
        with self._lock:
            for raw in self._load_raw(self._orders_path):
                if raw["id"] == order_id:
                    return self._order_to_domain(raw)
        return None

    def claim_order(self, order_id: str) -> bool:
        with self._lock:
            if order_id in self._claims:
                return False
            if any(raw["id"] == order_id for raw in self._load_raw(self._orders_path)):
                return False
            self._claims.add(order_id)
            return True

    def release_order(self, order_id: str) -> None:
        with self._lock:
            self._claims.discard(order_id)

    def save_order_line(self, line: OrderLine) -> None:
        with self._lock:
            lines = [
                raw for raw in self._load_raw(self._lines_path)
                if raw["line_id"] != line.line_id
            ]
            lines.append(self._line_to_raw(line))
            self._persist_raw(self._lines_path, lines)

    def find_order_lines_by_order_id(self, order_id: str) -> list[OrderLine]:
        with self._lock:
            return [
                self._line_to_domain(raw)
                for raw in self._load_raw(self._lines_path)
                if raw["order_id"] == order_id
            ]

    def delete_order_lines(self, order_id: str) -> None:
        with self._lock:
            lines = [
                raw for raw in self._load_raw(self._lines_path)
                if raw["order_id"] != order_id
            ]
            self._persist_raw(self._lines_path, lines)

    def update_status(
        self,
        order_id: str,
        expected: OrderStatus,
        new: OrderStatus,
        updated_at: datetime,
    ) -> bool:
        with self._lock:
            orders = self._load_raw(self._orders_path)
            for raw in orders:
                if raw["id"] == order_id:
                    if raw["status"] != expected.value:
                        return False
                    raw["status"] = new.value
                    raw["updated_at"] = updated_at.isoformat()
                    self._persist_raw(self._orders_path, orders)
                    return True
        return False

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _order_to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "buyer": {
                "name": order.buyer.name,
                "phone": order.buyer.phone,
                "address": order.buyer.address,
                "openid": order.buyer.openid,
            },
            "total": str(order.total.amount),
            "currency": order.total.currency,
            "status": order.status.value,
            "payment_status": order.payment_status.value,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
        }

    @staticmethod
    def _order_to_domain(raw: dict) -> Order:
        buyer = raw["buyer"]
        return Order(
            id=raw["id"],
            buyer=Buyer(
                name=buyer["name"],
                phone=buyer.get("phone", ""),
                address=buyer.get("address", ""),
                openid=buyer.get("openid", ""),
            ),
            total=Money(Decimal(raw["total"]), raw["currency"]),
            status=OrderStatus(raw["status"]),
            payment_status=PaymentStatus(raw["payment_status"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )

    @staticmethod
    def _line_to_raw(line: OrderLine) -> dict:
        return {
            "order_id": line.order_id,
            "line_id": line.line_id,
            "product_id": line.product_id,
            "product_name": line.product_name,
            "product_icon": line.product_icon,
            "quantity": line.quantity.value,
            "unit_price": str(line.unit_price.amount),
            "currency": line.unit_price.currency,
        }

    @staticmethod
    def _line_to_domain(raw: dict) -> OrderLine:
        return OrderLine(
            order_id=raw["order_id"],
            line_id=raw["line_id"],
            product_id=raw["product_id"],
            product_name=raw["product_name"],
            product_icon=raw.get("product_icon", ""),
            quantity=Quantity(raw["quantity"]),
            unit_price=Money(Decimal(raw["unit_price"]), raw["currency"]),
        )

    # --- File helpers ---------------------------------------------------------

    @staticmethod
    def _load_raw(path: Path) -> list[dict]:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreUnavailable(f"Cannot read {path.name}: {exc}") from exc

    @staticmethod
    def _persist_raw(path: Path, records: list[dict]) -> None:
        # Write to a sibling file and rename so a failed write leaves the old data.
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            tmp.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            raise StoreUnavailable(f"Cannot write {path.name}: {exc}") from exc

    @staticmethod
    def _ensure_file(path: Path) -> None:
        try:
            if not path.exists():
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text("[]", encoding="utf-8")
        except OSError as exc:
            raise StoreUnavailable(f"Cannot create {path}: {exc}") from exc
