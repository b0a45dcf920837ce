"""HTTP client for the remote product service.

Every request carries the configured timeout; transport failures and
timeouts surface as InventoryUnavailable so the saga never blocks
indefinitely on the product service.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

import httpx
import structlog

from ordersaga.domain.exceptions import (
    InsufficientStock,
    InventoryUnavailable,
    ValidationError,
)
from ordersaga.domain.gateway.inventory_client import InventoryClient
from ordersaga.domain.model.product import ProductSnapshot
from ordersaga.domain.model.value_objects import Money, StockItem

logger = structlog.get_logger(__name__)


class HttpInventoryClient(InventoryClient):

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    # --- InventoryClient interface --------------------------------------------

    def fetch_snapshots(self, product_ids: set[str]) -> list[ProductSnapshot]:
        resp = self._post("/product/listForOrder", sorted(product_ids))
        if resp.status_code == 404:
            return []
        self._raise_unavailable(resp)
        try:
            return [self._to_snapshot(raw) for raw in resp.json()]
        except (ValueError, KeyError, TypeError, InvalidOperation, ValidationError) as exc:
            raise InventoryUnavailable(f"Malformed product list: {exc}") from exc

    def decrease_stock(self, items: list[StockItem], reference: str) -> None:
        resp = self._post("/product/decreaseStock", self._stock_body(items, reference))
        if resp.status_code == 409:
            product_id = self._conflicting_product(resp)
            raise InsufficientStock(
                f"Insufficient stock for product '{product_id}'" if product_id
                else "Insufficient stock",
                product_id=product_id,
            )
        self._raise_unavailable(resp)

    def restock(self, items: list[StockItem], reference: str) -> None:
        resp = self._post("/product/increaseStock", self._stock_body(items, reference))
        self._raise_unavailable(resp)

    # --- Helpers --------------------------------------------------------------

    def _post(self, path: str, body) -> httpx.Response:
        try:
            return self._client.post(path, json=body)
        except httpx.TimeoutException as exc:
            logger.warning("inventory.timeout", path=path)
            raise InventoryUnavailable(f"Product service timed out on {path}") from exc
        except httpx.HTTPError as exc:
            logger.warning("inventory.transport_error", path=path, error=str(exc))
            raise InventoryUnavailable(f"Product service unreachable: {exc}") from exc

    @staticmethod
    def _raise_unavailable(resp: httpx.Response) -> None:
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise InventoryUnavailable(
                f"Product service answered {resp.status_code} on {resp.request.url.path}"
            ) from exc

    @staticmethod
    def _stock_body(items: list[StockItem], reference: str) -> dict:
        return {
            "reference": reference,
            "items": [
                {"productId": item.product_id, "productQuantity": item.quantity.value}
                for item in items
            ],
        }

    @staticmethod
    def _conflicting_product(resp: httpx.Response) -> str | None:
        try:
            return resp.json().get("productId")
        except (ValueError, AttributeError):
            return None

    @staticmethod
    def _to_snapshot(raw: dict) -> ProductSnapshot:
        return ProductSnapshot(
            product_id=raw["productId"],
            name=raw["productName"],
            unit_price=Money(Decimal(str(raw["productPrice"]))),
            description=raw.get("productDescription") or "",
            icon=raw.get("productIcon") or "",
            stock=raw.get("productStock") or 0,
        )
