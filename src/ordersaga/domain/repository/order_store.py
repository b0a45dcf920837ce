"""Abstract store for Order headers and their lines.

Defined in the domain layer so the domain never depends on
infrastructure.  Every method raises StoreUnavailable when the backend
cannot complete the call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ordersaga.domain.model.order import Order, OrderLine, OrderStatus


class OrderStore(ABC):

    @abstractmethod
    def save_order(self, order: Order) -> None:
        """Persist an order header (lines are saved separately)."""

    @abstractmethod
    def find_order_by_id(self, order_id: str) -> Order | None:
        """Return the order header, or None if not found."""

    @abstractmethod
    def claim_order(self, order_id: str) -> bool:
        """Reserve *order_id* for one placement attempt.

        Returns False if the id is already claimed or a header with that
        id exists.  Concurrent calls for one id get True at most once
        until ``release_order`` is called.
        """

    @abstractmethod
    def release_order(self, order_id: str) -> None:
        """Drop the claim taken by ``claim_order``.  Headers are untouched."""

    @abstractmethod
    def save_order_line(self, line: OrderLine) -> None:
        """Persist one order line."""

    @abstractmethod
    def find_order_lines_by_order_id(self, order_id: str) -> list[OrderLine]:
        """Return every line of an order, in insertion order."""

    @abstractmethod
    def delete_order_lines(self, order_id: str) -> None:
        """Remove lines written for an order whose header never got stored.

        Only used when placing an order is rolled back.
        """

    @abstractmethod
    def update_status(
        self,
        order_id: str,
        expected: OrderStatus,
        new: OrderStatus,
        updated_at: datetime,
    ) -> bool:
        """Set the status only if it currently equals *expected*.

        Returns False without writing when the stored status differs or
        the order is missing.  Conflicting calls on one order id are
        serialised so only one of them can see *expected*.
        """
