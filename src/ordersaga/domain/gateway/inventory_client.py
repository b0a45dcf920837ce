"""Abstract gateway to the product service that owns stock.

Defined in the domain layer so the domain never depends on transport.
Concrete clients (HTTP, local JSON catalogue) live in the
infrastructure layer and must bound every call with a timeout.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordersaga.domain.model.product import ProductSnapshot
from ordersaga.domain.model.value_objects import StockItem


class InventoryClient(ABC):

    @abstractmethod
    def fetch_snapshots(self, product_ids: set[str]) -> list[ProductSnapshot]:
        """Return snapshots for the known ids among *product_ids*.

        Unknown ids are simply missing from the result.
        Raises InventoryUnavailable if the call cannot complete.
        """

    @abstractmethod
    def decrease_stock(self, items: list[StockItem], reference: str) -> None:
        """Decrement stock for every item, or for none of them.

        *reference* is the order id, so a retried request can be
        recognised remotely.  Raises InsufficientStock or
        InventoryUnavailable.
        """

    @abstractmethod
    def restock(self, items: list[StockItem], reference: str) -> None:
        """Give back stock taken by ``decrease_stock`` (compensation only).

        Raises InventoryUnavailable when the outcome is unknown and the call
        may be retried.  Any other DomainException (ProductNotFound for an
        id the service does not know) is final.
        """

    def close(self) -> None:
        """Release transport resources.  Clients without any keep the default."""

    def __enter__(self) -> InventoryClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
