"""Application service: Order lifecycle transitions.

Only ``finish`` (NEW -> FINISHED) exists today.  The status check and
the write are a single compare-and-set in the store, so two concurrent
``finish`` calls on one order cannot both succeed.
"""

from __future__ import annotations

import structlog

from ordersaga.domain.exceptions import (
    InvalidStateTransition,
    OrderLinesMissing,
    OrderNotFound,
)
from ordersaga.domain.model.order import Order, OrderStatus
from ordersaga.domain.repository.order_store import OrderStore

logger = structlog.get_logger(__name__)


class OrderLifecycle:

    def __init__(self, order_store: OrderStore) -> None:
        self._order_store = order_store

    def finish(self, order_id: str) -> Order:
        """Mark an order as finished and return it with its lines."""
        log = logger.bind(order_id=order_id)

        order = self._order_store.find_order_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)

        previous = order.status
        try:
            order.finish()
        except InvalidStateTransition:
            log.warning("order.finish.rejected", status=previous.value)
            raise

        lines = self._order_store.find_order_lines_by_order_id(order_id)
        if not lines:
            log.error("order.lines_missing")
            raise OrderLinesMissing(order_id)

        won = self._order_store.update_status(
            order_id,
            expected=previous,
            new=order.status,
            updated_at=order.updated_at,
        )
        if not won:
            log.warning("order.finish.lost_race")
            raise InvalidStateTransition(
                f"Cannot finish order #{order_id}: status changed concurrently"
            )

        log.info("order.finished")
        return order.with_lines(lines)
