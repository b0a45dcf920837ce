"""Order aggregate: the core of the domain.

The Order is an aggregate root that owns its lines.  Lines are written
once, when the order is placed, and never change afterwards.  The order
total is fixed at the same moment: later catalogue price changes do not
touch it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from ordersaga.domain.exceptions import InvalidStateTransition, ValidationError
from ordersaga.domain.model.value_objects import Buyer, Money, Quantity


class OrderStatus(Enum):
    NEW = "NEW"
    FINISHED = "FINISHED"


class PaymentStatus(Enum):
    WAITING = "WAITING"
    PAID = "PAID"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OrderLine:
    """Captures the product snapshot at order-creation time.

    Immutable: quantity, price and the copied product fields are locked
    once the order is placed.
    """

    order_id: str
    line_id: str
    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    product_icon: str = ""

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass
class Order:
    """Aggregate root for buyer orders.

    Use ``Order.place()`` for new orders.  The ``__init__`` is
    intentionally simple so a store can reconstitute persisted orders
    without re-validating.
    """

    id: str
    buyer: Buyer
    total: Money
    status: OrderStatus = OrderStatus.NEW
    payment_status: PaymentStatus = PaymentStatus.WAITING
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    lines: list[OrderLine] = field(default_factory=list)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(
        order_id: str,
        buyer: Buyer,
        lines: list[OrderLine],
        total: Money,
    ) -> Order:
        """Create a new order in status NEW, awaiting payment."""
        if not order_id:
            raise ValidationError("Order id is required")
        if not lines:
            raise ValidationError("Order must contain at least one line")
        for line in lines:
            if line.order_id != order_id:
                raise ValidationError(
                    f"Line {line.line_id} belongs to order #{line.order_id}, "
                    f"not #{order_id}"
                )

        now = utcnow()
        return Order(
            id=order_id,
            buyer=buyer,
            total=total,
            status=OrderStatus.NEW,
            payment_status=PaymentStatus.WAITING,
            created_at=now,
            updated_at=now,
            lines=list(lines),
        )

    # --- State transitions ----------------------------------------------------

    def finish(self) -> None:
        """Transition NEW -> FINISHED.

        Marks fulfilment only; payment status is left untouched.
        """
        if self.status != OrderStatus.NEW:
            raise InvalidStateTransition(
                f"Cannot finish order #{self.id}: current status is "
                f"{self.status.value}, expected {OrderStatus.NEW.value}"
            )
        self.status = OrderStatus.FINISHED
        self.updated_at = utcnow()

    # --- Helpers --------------------------------------------------------------

    def header(self) -> Order:
        """Copy of this order without its lines, as the store keeps it."""
        return replace(self, lines=[])

    def with_lines(self, lines: list[OrderLine]) -> Order:
        return replace(self, lines=list(lines))
