"""Domain-level exceptions.

All failures the order core can report are subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly
messages.  Each kind stays distinct so callers can tell a missing product
from an unreachable inventory service.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ProductNotFound(EntityNotFoundError):
    """A cart line references a product the catalogue did not return."""

    def __init__(self, product_ids: list[str]) -> None:
        self.product_ids = list(product_ids)
        super().__init__(f"Product not found: {', '.join(self.product_ids)}")


class OrderNotFound(EntityNotFoundError):
    """No order header exists for the given id."""

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"Order #{order_id} not found")


class OrderLinesMissing(DomainException):
    """An order header exists but has no persisted lines."""

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"Order #{order_id} has no order lines")


class OrderInProgress(DomainException):
    """Another call is still placing an order under the same id."""

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"Order #{order_id} is already being placed; retry later")


class InvalidStateTransition(ValidationError):
    """The requested status change is not allowed from the current status."""


class InsufficientStock(DomainException):
    """The inventory service refused to decrement stock."""

    def __init__(self, message: str, product_id: str | None = None) -> None:
        self.product_id = product_id
        super().__init__(message)


class InventoryUnavailable(DomainException):
    """The inventory service could not be reached or timed out."""


class StoreUnavailable(DomainException):
    """The order store rejected a read or write."""


class CompensationFailed(DomainException):
    """Stock was decremented but could not be restored after a failure.

    Inventory is left decremented with no matching order.  This needs
    manual reconciliation and must not be retried automatically.
    """

    def __init__(self, order_id: str, cart_lines: list, items: list) -> None:
        self.order_id = order_id
        self.cart_lines = list(cart_lines)
        self.items = list(items)
        super().__init__(
            f"Compensation failed for order #{order_id}: stock for "
            + ", ".join(f"{i.product_id}x{i.quantity.value}" for i in self.items)
            + " remains decremented"
        )
