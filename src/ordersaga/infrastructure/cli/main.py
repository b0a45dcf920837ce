import click

from ordersaga.infrastructure.cli.order_commands import (
    order_create,
    order_finish,
    order_show,
)
from ordersaga.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_stock,
)
from ordersaga.infrastructure.logging import configure_logging


@click.group()
@click.option(
    "--log-level",
    envvar="ORDERSAGA_LOG_LEVEL",
    default="INFO",
    show_default=True,
    help="Minimum level of log lines written to stderr.",
)
@click.option("--json-logs", is_flag=True, default=False, help="Emit logs as JSON lines.")
def cli(log_level: str, json_logs: bool) -> None:
    """Order placement with stock reservation"""
    configure_logging(log_level, json=json_logs)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage the local product catalogue."""


# Register subcommands
order.add_command(order_create)
order.add_command(order_finish)
order.add_command(order_show)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_stock)
