"""CLI commands for the local product catalogue."""

from __future__ import annotations

import click

from ordersaga.domain.exceptions import DomainException
from ordersaga.domain.model.product import ProductSnapshot
from ordersaga.domain.model.value_objects import Money
from ordersaga.infrastructure import bootstrap


@click.command("add")
@click.option("--id", "product_id", required=True, help="Product id.")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, type=int, help="Units in stock.")
@click.option("--description", default="", help="Short description.")
@click.option("--icon", default="", help="Icon URL.")
def product_add(
    product_id: str,
    name: str,
    price: str,
    stock: int,
    description: str,
    icon: str,
) -> None:
    """Add a new product to the catalogue."""
    try:
        catalogue = bootstrap.local_catalogue(bootstrap.settings())
        snapshot = ProductSnapshot(
            product_id=product_id,
            name=name.strip(),
            unit_price=Money.of(price),
            description=description,
            icon=icon,
            stock=stock,
        )
        catalogue.add_product(snapshot)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{snapshot.product_id} '{snapshot.name}' added at {snapshot.unit_price}")


@click.command("list")
def product_list() -> None:
    """List all products in the catalogue."""
    try:
        products = bootstrap.local_catalogue(bootstrap.settings()).list_products()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<10} {'Name':<20} {'Price':>14} {'Stock':>7}")
    click.echo("-" * 54)
    for p in products:
        click.echo(f"{p.product_id:<10} {p.name:<20} {str(p.unit_price):>14} {p.stock:>7}")


@click.command("stock")
@click.option("--id", "product_id", required=True, help="Product id.")
@click.option("--quantity", required=True, type=int, help="Units in stock.")
def product_stock(product_id: str, quantity: int) -> None:
    """Set the stock level of a product."""
    try:
        bootstrap.local_catalogue(bootstrap.settings()).set_stock(product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for '{product_id}' set to {quantity}")
