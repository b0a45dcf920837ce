"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from ordersaga.application.order_lifecycle import OrderLifecycle
from ordersaga.application.order_saga import OrderSaga
from ordersaga.application.show_order import ShowOrderHandler
from ordersaga.domain.exceptions import ValidationError
from ordersaga.domain.gateway.inventory_client import InventoryClient
from ordersaga.domain.service.identifier_generator import UuidIdentifierGenerator
from ordersaga.infrastructure.inventory.http_inventory_client import (
    HttpInventoryClient,
)
from ordersaga.infrastructure.inventory.json_inventory_client import (
    JsonInventoryClient,
)
from ordersaga.infrastructure.persistence.json_order_store import JsonOrderStore
from ordersaga.infrastructure.settings import Settings


def settings() -> Settings:
    return Settings.from_env()


def order_store(config: Settings) -> JsonOrderStore:
    return JsonOrderStore(config.data_dir)


def local_catalogue(config: Settings) -> JsonInventoryClient:
    if config.inventory_url:
        raise ValidationError(
            "Catalogue commands only work without ORDERSAGA_INVENTORY_URL set"
        )
    return JsonInventoryClient(config.data_dir / "products.json")


def inventory_client(config: Settings) -> InventoryClient:
    if config.inventory_url:
        return HttpInventoryClient(config.inventory_url, timeout=config.inventory_timeout)
    return JsonInventoryClient(config.data_dir / "products.json")


def id_generator() -> UuidIdentifierGenerator:
    return UuidIdentifierGenerator()


def order_saga(config: Settings, inventory: InventoryClient) -> OrderSaga:
    """Build the saga over *inventory*; the caller owns and closes the client."""
    return OrderSaga(
        inventory=inventory,
        order_store=order_store(config),
        id_generator=id_generator(),
        compensation_attempts=config.compensation_attempts,
        compensation_backoff=config.compensation_backoff,
    )


def order_lifecycle(config: Settings) -> OrderLifecycle:
    return OrderLifecycle(order_store(config))


def show_order(config: Settings) -> ShowOrderHandler:
    return ShowOrderHandler(order_store(config))
