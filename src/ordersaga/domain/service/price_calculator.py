"""Domain service: Price Calculator.

Turns cart lines into order lines priced from product snapshots.  It
lives in the domain layer because pricing is a core business rule.

Every cart line must match a snapshot.  A line without one fails the
whole calculation instead of being skipped, otherwise the order total
would disagree with the lines that get persisted.
"""

from __future__ import annotations

from dataclasses import dataclass

from ordersaga.domain.exceptions import ProductNotFound
from ordersaga.domain.model.order import OrderLine
from ordersaga.domain.model.product import ProductSnapshot
from ordersaga.domain.model.value_objects import Money, StockItem
from ordersaga.domain.service.identifier_generator import IdentifierGenerator


@dataclass(frozen=True)
class PricedCart:
    lines: list[OrderLine]
    total: Money


class PriceCalculator:

    def __init__(self, id_generator: IdentifierGenerator) -> None:
        self._id_generator = id_generator

    def price(
        self,
        order_id: str,
        cart_lines: list[StockItem],
        snapshots: list[ProductSnapshot],
    ) -> PricedCart:
        """Build one OrderLine per cart line and sum their subtotals.

        Raises ProductNotFound listing every unmatched product id.
        """
        by_id = {snapshot.product_id: snapshot for snapshot in snapshots}

        missing = [item.product_id for item in cart_lines if item.product_id not in by_id]
        if missing:
            raise ProductNotFound(missing)

        lines: list[OrderLine] = []
        total: Money | None = None
        for item in cart_lines:
            snapshot = by_id[item.product_id]
            line = OrderLine(
                order_id=order_id,
                line_id=self._id_generator.next(),
                product_id=snapshot.product_id,
                product_name=snapshot.name,
                quantity=item.quantity,
                unit_price=snapshot.unit_price,  # <-- price snapshot
                product_icon=snapshot.icon,
            )
            lines.append(line)
            total = line.subtotal if total is None else total + line.subtotal

        if total is None:
            total = Money.zero()
        return PricedCart(lines=lines, total=total)
