"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from ordersaga.application.dto import OrderDTO
from ordersaga.domain.exceptions import CompensationFailed, DomainException
from ordersaga.domain.model.value_objects import Buyer, StockItem
from ordersaga.infrastructure import bootstrap

# Exit code reserved for orders that need manual stock reconciliation.
EXIT_COMPENSATION_FAILED = 2


def _parse_items(raw: str) -> list[StockItem]:
    """Parse 'P1:2,P2:1' into a StockItem list."""
    items: list[StockItem] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        try:
            items.append(StockItem.of(product_id, qty))
        except DomainException as exc:
            raise click.BadParameter(str(exc))
    return items


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"Buyer:    {dto.buyer_name}")
    if dto.buyer_phone:
        click.echo(f"Phone:    {dto.buyer_phone}")
    if dto.buyer_address:
        click.echo(f"Address:  {dto.buyer_address}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Updated:  {dto.updated_at}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>14} {'Subtotal':>14}")
    click.echo(f"  {'-'*55}")
    for line in dto.lines:
        click.echo(
            f"  {line.product_name:<20} {line.quantity:>5} {line.unit_price:>14} {line.subtotal:>14}"
        )
    click.echo(f"  {'-'*55}")
    click.echo(f"  {'Order Total':<27} {dto.total:>28}")


@click.command("create")
@click.option("--id", "order_id", default=None, help="Order id; reuse it when retrying.")
@click.option("--buyer", required=True, help="Buyer name.")
@click.option("--phone", default="", help="Buyer phone.")
@click.option("--address", default="", help="Delivery address.")
@click.option("--openid", default="", help="Buyer account id.")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
def order_create(
    order_id: str | None,
    buyer: str,
    phone: str,
    address: str,
    openid: str,
    items: str,
) -> None:
    """Place a new order (takes stock from the catalogue)."""
    cart = _parse_items(items)

    if order_id is None:
        order_id = bootstrap.id_generator().next()
        click.echo(f"Using order id {order_id}")

    try:
        config = bootstrap.settings()
        with bootstrap.inventory_client(config) as inventory:
            order = bootstrap.order_saga(config, inventory).create(
                order_id,
                Buyer(name=buyer, phone=phone, address=address, openid=openid),
                cart,
            )
    except CompensationFailed as exc:
        click.echo(f"Error: {exc}", err=True)
        click.echo("Stock must be restored manually for:", err=True)
        for item in exc.items:
            click.echo(f"  {item.product_id}: {item.quantity.value}", err=True)
        raise SystemExit(EXIT_COMPENSATION_FAILED)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(OrderDTO.from_order(order))


@click.command("finish")
@click.option("--id", "order_id", required=True, help="Order id to finish.")
def order_finish(order_id: str) -> None:
    """Mark a NEW order as finished."""
    try:
        order = bootstrap.order_lifecycle(bootstrap.settings()).finish(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order.id} finished.")


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order id to display.")
def order_show(order_id: str) -> None:
    """Show details of an existing order."""
    try:
        order = bootstrap.show_order(bootstrap.settings()).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(OrderDTO.from_order(order))
