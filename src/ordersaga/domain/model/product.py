"""Product snapshot: what the catalogue told us about a product.

Products are owned by the product service, not by this core.  A
snapshot is a point-in-time copy fetched while placing an order; it is
never persisted and never refreshed.
"""

from __future__ import annotations

from dataclasses import dataclass

from ordersaga.domain.model.value_objects import Money


@dataclass(frozen=True)
class ProductSnapshot:
    """Immutable view of a catalogue product at fetch time."""

    product_id: str
    name: str
    unit_price: Money
    description: str = ""
    icon: str = ""
    stock: int = 0
