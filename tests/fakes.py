"""In-memory fakes for testing.

These implement the same abstract interfaces as the JSON and HTTP
adapters but keep everything in dicts.  No file I/O, no network.
Failures can be injected to drive the saga down its error paths.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime

from ordersaga.domain.exceptions import (
    InsufficientStock,
    InventoryUnavailable,
    StoreUnavailable,
)
from ordersaga.domain.gateway.inventory_client import InventoryClient
from ordersaga.domain.model.order import Order, OrderLine, OrderStatus
from ordersaga.domain.model.product import ProductSnapshot
from ordersaga.domain.model.value_objects import Money, StockItem
from ordersaga.domain.repository.order_store import OrderStore
from ordersaga.domain.service.identifier_generator import IdentifierGenerator


class SequentialIdGenerator(IdentifierGenerator):

    def __init__(self, prefix: str = "L") -> None:
        self._prefix = prefix
        self._counter = 0
        self._lock = threading.Lock()

    def next(self) -> str:
        with self._lock:
            self._counter += 1
            return f"{self._prefix}{self._counter}"


class FakeOrderStore(OrderStore):

    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}
        self._lines: list[OrderLine] = []
        self._claims: set[str] = set()
        self._lock = threading.Lock()
        self.fail_save_order = False
        self.fail_save_line_after: int | None = None
        self.fail_update_status = False
        self.delete_failures = 0
        self.lines_saved = 0

    def save_order(self, order: Order) -> None:
        if self.fail_save_order:
            raise StoreUnavailable("orders table rejected the write")
        with self._lock:
            self._orders[order.id] = order.header()

    def find_order_by_id(self, order_id: str) -> Order | None:
        with self._lock:
            order = self._orders.get(order_id)
            return replace(order) if order is not None else None

    def claim_order(self, order_id: str) -> bool:
        with self._lock:
            if order_id in self._claims or order_id in self._orders:
                return False
            self._claims.add(order_id)
            return True

    def release_order(self, order_id: str) -> None:
        with self._lock:
            self._claims.discard(order_id)

    def save_order_line(self, line: OrderLine) -> None:
        if self.fail_save_line_after is not None and self.lines_saved >= self.fail_save_line_after:
            raise StoreUnavailable("order_lines table rejected the write")
        with self._lock:
            self._lines.append(line)
            self.lines_saved += 1

    def find_order_lines_by_order_id(self, order_id: str) -> list[OrderLine]:
        with self._lock:
            return [line for line in self._lines if line.order_id == order_id]

    def delete_order_lines(self, order_id: str) -> None:
        if self.delete_failures > 0:
            self.delete_failures -= 1
            raise StoreUnavailable("order_lines table is locked")
        with self._lock:
            self._lines = [line for line in self._lines if line.order_id != order_id]

    def update_status(
        self,
        order_id: str,
        expected: OrderStatus,
        new: OrderStatus,
        updated_at: datetime,
    ) -> bool:
        if self.fail_update_status:
            raise StoreUnavailable("orders table rejected the write")
        with self._lock:
            order = self._orders.get(order_id)
            if order is None or order.status != expected:
                return False
            self._orders[order_id] = replace(order, status=new, updated_at=updated_at)
            return True

    # --- Test helpers ---------------------------------------------------------

    def all_orders(self) -> list[Order]:
        return list(self._orders.values())

    def all_lines(self) -> list[OrderLine]:
        return list(self._lines)

    def claimed(self) -> set[str]:
        return set(self._claims)


class FakeInventoryClient(InventoryClient):
    """Catalogue held in memory, recording every call it receives."""

    def __init__(self, products: list[tuple[str, str, str, int]] | None = None) -> None:
        self._products: dict[str, ProductSnapshot] = {}
        for product_id, name, price, stock in products or []:
            self._products[product_id] = ProductSnapshot(
                product_id=product_id,
                name=name,
                unit_price=Money.of(price),
                icon=f"https://img.example/{product_id}.png",
                stock=stock,
            )
        self.fetch_calls: list[set[str]] = []
        self.decrease_calls: list[tuple[list[StockItem], str]] = []
        self.restock_calls: list[tuple[list[StockItem], str]] = []
        self.fetch_error: Exception | None = None
        self.decrease_error: Exception | None = None
        self.restock_errors: list[Exception] = []

    def fetch_snapshots(self, product_ids: set[str]) -> list[ProductSnapshot]:
        self.fetch_calls.append(set(product_ids))
        if self.fetch_error is not None:
            raise self.fetch_error
        return [p for pid, p in self._products.items() if pid in product_ids]

    def decrease_stock(self, items: list[StockItem], reference: str) -> None:
        self.decrease_calls.append((list(items), reference))
        if self.decrease_error is not None:
            raise self.decrease_error
        for item in items:
            product = self._products[item.product_id]
            if item.quantity.value > product.stock:
                raise InsufficientStock(
                    f"Insufficient stock for {product.name}", product_id=product.product_id
                )
        for item in items:
            product = self._products[item.product_id]
            self._products[item.product_id] = replace(
                product, stock=product.stock - item.quantity.value
            )

    def restock(self, items: list[StockItem], reference: str) -> None:
        self.restock_calls.append((list(items), reference))
        if self.restock_errors:
            raise self.restock_errors.pop(0)
        for item in items:
            product = self._products[item.product_id]
            self._products[item.product_id] = replace(
                product, stock=product.stock + item.quantity.value
            )

    # --- Test helpers ---------------------------------------------------------

    def stock_of(self, product_id: str) -> int:
        return self._products[product_id].stock

    def set_price(self, product_id: str, price: str) -> None:
        self._products[product_id] = replace(
            self._products[product_id], unit_price=Money.of(price)
        )


def unavailable(message: str = "connection reset") -> InventoryUnavailable:
    return InventoryUnavailable(message)
