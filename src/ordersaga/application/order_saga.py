"""Application service: Place Order saga.

Converts a cart into a persisted order while the product service takes
the stock.  The two sides fail independently and share no transaction,
so the flow is a saga:

1. Look the order id up: a retried request whose order already exists
   gets the stored order back and touches nothing.  Otherwise claim the
   id in the store, so a concurrent call with the same id cannot take
   stock a second time (it gets OrderInProgress or the stored order).
2. Fetch product snapshots for the distinct product ids in the cart.
3. Price the cart (fails on any unknown product).
4. Decrement stock for the whole cart in one atomic remote call.
5. Persist every line, then the header (NEW / WAITING).

Steps 1 to 3 have no visible side effects.  If step 5 fails after step 4
succeeded, the stock is given back (restock with the same items) before
the error is surfaced.  If the restock cannot be confirmed the saga
raises CompensationFailed, which needs a human.
"""

from __future__ import annotations

import time
from typing import Callable

import structlog

from ordersaga.domain.exceptions import (
    CompensationFailed,
    InventoryUnavailable,
    OrderInProgress,
    StoreUnavailable,
    ValidationError,
)
from ordersaga.domain.gateway.inventory_client import InventoryClient
from ordersaga.domain.model.order import Order
from ordersaga.domain.model.value_objects import Buyer, StockItem, merge_items
from ordersaga.domain.repository.order_store import OrderStore
from ordersaga.domain.service.identifier_generator import IdentifierGenerator
from ordersaga.domain.service.price_calculator import PriceCalculator

logger = structlog.get_logger(__name__)

DEFAULT_COMPENSATION_ATTEMPTS = 3
DEFAULT_COMPENSATION_BACKOFF = 0.2  # seconds, doubled after every attempt


class OrderSaga:

    def __init__(
        self,
        inventory: InventoryClient,
        order_store: OrderStore,
        id_generator: IdentifierGenerator,
        compensation_attempts: int = DEFAULT_COMPENSATION_ATTEMPTS,
        compensation_backoff: float = DEFAULT_COMPENSATION_BACKOFF,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if compensation_attempts < 1:
            raise ValidationError("compensation_attempts must be at least 1")
        self._inventory = inventory
        self._order_store = order_store
        self._price_calculator = PriceCalculator(id_generator)
        self._compensation_attempts = compensation_attempts
        self._compensation_backoff = compensation_backoff
        self._sleep = sleep

    def create(self, order_id: str, buyer: Buyer, cart_lines: list[StockItem]) -> Order:
        """Place an order for *cart_lines* under the caller-supplied *order_id*.

        Retrying with the same *order_id* after an unknown outcome never
        takes stock twice for an order that was stored.
        """
        if not order_id or not order_id.strip():
            raise ValidationError("Order id is required")
        if not cart_lines:
            raise ValidationError("Cart must contain at least one item")

        log = logger.bind(order_id=order_id)

        existing = self._order_store.find_order_by_id(order_id)
        if existing is not None:
            return self._replay(existing, log)

        if not self._order_store.claim_order(order_id):
            # Lost to a concurrent call; it may have stored the order meanwhile.
            existing = self._order_store.find_order_by_id(order_id)
            if existing is not None:
                return self._replay(existing, log)
            log.warning("order.create.in_progress")
            raise OrderInProgress(order_id)

        try:
            return self._place(order_id, buyer, cart_lines, log)
        finally:
            self._release(order_id, log)

    def _replay(self, existing: Order, log) -> Order:
        log.info("order.create.replayed", status=existing.status.value)
        return existing.with_lines(
            self._order_store.find_order_lines_by_order_id(existing.id)
        )

    def _release(self, order_id: str, log) -> None:
        try:
            self._order_store.release_order(order_id)
        except StoreUnavailable as exc:
            log.error("order.claim_release_failed", error=str(exc))

    def _place(self, order_id: str, buyer: Buyer, cart_lines: list[StockItem], log) -> Order:
        items = merge_items(cart_lines)
        log.info("order.create.started", products=len(items))

        snapshots = self._inventory.fetch_snapshots({item.product_id for item in items})
        priced = self._price_calculator.price(order_id, items, snapshots)
        order = Order.place(order_id, buyer, priced.lines, priced.total)

        self._inventory.decrease_stock(items, reference=order_id)
        log.info("stock.decreased", products=len(items))

        try:
            for line in order.lines:
                self._order_store.save_order_line(line)
            self._order_store.save_order(order.header())
        except BaseException as exc:
            # Includes KeyboardInterrupt: the stock is already taken.
            log.error("order.persist_failed", error=str(exc))
            self._compensate(order_id, cart_lines, items, exc)
            raise

        log.info("order.persisted", total=str(order.total), lines=len(order.lines))
        return order

    # --- Compensation ---------------------------------------------------------

    def _compensate(
        self,
        order_id: str,
        cart_lines: list[StockItem],
        items: list[StockItem],
        cause: BaseException,
    ) -> None:
        log = logger.bind(order_id=order_id)

        restocked = self._retry(
            lambda: self._inventory.restock(items, reference=order_id),
            InventoryUnavailable,
            "compensation.restock",
            log,
        )
        if not restocked:
            log.critical(
                "compensation.failed",
                items=[(i.product_id, i.quantity.value) for i in items],
            )
            raise CompensationFailed(order_id, cart_lines, items) from cause
        log.info("compensation.completed")

        discarded = self._retry(
            lambda: self._order_store.delete_order_lines(order_id),
            StoreUnavailable,
            "compensation.discard_lines",
            log,
        )
        if not discarded:
            log.error("order.lines_orphaned")

    def _retry(self, action: Callable[[], None], transient: type, step: str, log) -> bool:
        """Run *action* up to the configured attempts with exponential backoff.

        Only *transient* errors are retried.  Returns True on success.
        """
        for attempt in range(1, self._compensation_attempts + 1):
            try:
                action()
            except transient as exc:
                log.warning(f"{step}.retry", attempt=attempt, error=str(exc))
                if attempt < self._compensation_attempts:
                    self._sleep(self._compensation_backoff * 2 ** (attempt - 1))
                continue
            except Exception as exc:
                log.error(f"{step}.error", attempt=attempt, error=str(exc))
                return False
            return True
        return False
