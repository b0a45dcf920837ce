"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from ordersaga.domain.model.order import Order


@dataclass(frozen=True)
class OrderLineDTO:
    """Output: a single order line as displayed to the user."""

    line_id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "10.00 CNY"
    subtotal: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    buyer_name: str
    buyer_phone: str
    buyer_address: str
    status: str
    payment_status: str
    lines: list[OrderLineDTO]
    total: str
    created_at: str
    updated_at: str

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,
            buyer_name=order.buyer.name,
            buyer_phone=order.buyer.phone,
            buyer_address=order.buyer.address,
            status=order.status.value,
            payment_status=order.payment_status.value,
            lines=[
                OrderLineDTO(
                    line_id=line.line_id,
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity.value,
                    unit_price=str(line.unit_price),
                    subtotal=str(line.subtotal),
                )
                for line in order.lines
            ],
            total=str(order.total),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
            updated_at=order.updated_at.strftime("%Y-%m-%d %H:%M UTC"),
        )
