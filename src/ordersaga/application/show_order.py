"""Application service: Show Order use case (query)."""

from __future__ import annotations

from ordersaga.domain.exceptions import OrderNotFound
from ordersaga.domain.model.order import Order
from ordersaga.domain.repository.order_store import OrderStore


class ShowOrderHandler:

    def __init__(self, order_store: OrderStore) -> None:
        self._order_store = order_store

    def handle(self, order_id: str) -> Order:
        order = self._order_store.find_order_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order.with_lines(self._order_store.find_order_lines_by_order_id(order_id))
