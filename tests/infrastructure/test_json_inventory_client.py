"""Tests for the local JSON product catalogue."""

from pathlib import Path

import pytest

from ordersaga.domain.exceptions import (
    InsufficientStock,
    InventoryUnavailable,
    ProductNotFound,
    ValidationError,
)
from ordersaga.domain.model.product import ProductSnapshot
from ordersaga.domain.model.value_objects import Money, StockItem
from ordersaga.infrastructure.inventory.json_inventory_client import JsonInventoryClient


def _catalogue(tmp_path) -> JsonInventoryClient:
    client = JsonInventoryClient(tmp_path / "products.json")
    client.add_product(ProductSnapshot("P1", "Widget", Money.of("10.00"), "A widget", "w.png", 10))
    client.add_product(ProductSnapshot("P2", "Gadget", Money.of("5.50"), stock=3))
    return client


def _stock(client: JsonInventoryClient) -> dict[str, int]:
    return {p.product_id: p.stock for p in client.list_products()}


class TestSnapshots:

    def test_fetch_returns_only_known_ids(self, tmp_path):
        snapshots = _catalogue(tmp_path).fetch_snapshots({"P1", "NOPE"})
        assert [s.product_id for s in snapshots] == ["P1"]
        assert snapshots[0].unit_price == Money.of("10.00")
        assert snapshots[0].icon == "w.png"

    def test_duplicate_product_rejected(self, tmp_path):
        client = _catalogue(tmp_path)
        with pytest.raises(ValidationError, match="already exists"):
            client.add_product(ProductSnapshot("P1", "Again", Money.of("1")))


class TestDecreaseStock:

    def test_decrements_every_item(self, tmp_path):
        client = _catalogue(tmp_path)
        client.decrease_stock([StockItem.of("P1", 4), StockItem.of("P2", 3)], reference="O1")
        assert _stock(client) == {"P1": 6, "P2": 0}

    def test_all_or_nothing_on_insufficient_stock(self, tmp_path):
        client = _catalogue(tmp_path)
        with pytest.raises(InsufficientStock, match="Gadget") as exc_info:
            client.decrease_stock([StockItem.of("P1", 4), StockItem.of("P2", 4)], reference="O1")

        assert exc_info.value.product_id == "P2"
        assert _stock(client) == {"P1": 10, "P2": 3}

    def test_unknown_product_refused(self, tmp_path):
        client = _catalogue(tmp_path)
        with pytest.raises(InsufficientStock, match="not stocked"):
            client.decrease_stock([StockItem.of("NOPE", 1)], reference="O1")


class TestRestock:

    def test_restock_reverses_decrease(self, tmp_path):
        client = _catalogue(tmp_path)
        items = [StockItem.of("P1", 4), StockItem.of("P2", 1)]
        client.decrease_stock(items, reference="O1")
        client.restock(items, reference="O1")
        assert _stock(client) == {"P1": 10, "P2": 3}

    def test_unknown_product_is_not_found(self, tmp_path):
        client = _catalogue(tmp_path)
        with pytest.raises(ProductNotFound, match="NOPE"):
            client.restock([StockItem.of("NOPE", 1)], reference="O1")


class TestAdministration:

    def test_set_stock(self, tmp_path):
        client = _catalogue(tmp_path)
        client.set_stock("P2", 40)
        assert _stock(client)["P2"] == 40

    def test_set_stock_unknown_product(self, tmp_path):
        with pytest.raises(ValidationError, match="not found"):
            _catalogue(tmp_path).set_stock("NOPE", 1)

    def test_negative_stock_rejected(self, tmp_path):
        with pytest.raises(ValidationError, match="negative"):
            _catalogue(tmp_path).set_stock("P1", -1)


class TestFailedWrites:

    @staticmethod
    def _tear_writes(monkeypatch):
        """Make every write stop after a few bytes, like a full disk."""
        real_write = Path.write_text

        def torn_write(self, data, *args, **kwargs):
            real_write(self, data[:10], *args, **kwargs)
            raise OSError("No space left on device")

        monkeypatch.setattr(Path, "write_text", torn_write)

    def test_failed_decrease_keeps_previous_stock(self, tmp_path, monkeypatch):
        client = _catalogue(tmp_path)
        self._tear_writes(monkeypatch)

        with pytest.raises(InventoryUnavailable, match="Cannot write catalogue"):
            client.decrease_stock([StockItem.of("P1", 4)], reference="O1")

        monkeypatch.undo()
        assert _stock(client) == {"P1": 10, "P2": 3}

    def test_failed_restock_leaves_catalogue_readable(self, tmp_path, monkeypatch):
        client = _catalogue(tmp_path)
        client.decrease_stock([StockItem.of("P1", 4)], reference="O1")
        self._tear_writes(monkeypatch)

        with pytest.raises(InventoryUnavailable):
            client.restock([StockItem.of("P1", 4)], reference="O1")

        monkeypatch.undo()
        assert _stock(client) == {"P1": 6, "P2": 3}
        client.restock([StockItem.of("P1", 4)], reference="O1")
        assert _stock(client) == {"P1": 10, "P2": 3}
