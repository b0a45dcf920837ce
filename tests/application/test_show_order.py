"""Tests for the ShowOrder query."""

import pytest

from ordersaga.application.dto import OrderDTO
from ordersaga.application.order_saga import OrderSaga
from ordersaga.application.show_order import ShowOrderHandler
from ordersaga.domain.exceptions import OrderNotFound
from ordersaga.domain.model.value_objects import Buyer, StockItem
from tests.fakes import FakeInventoryClient, FakeOrderStore, SequentialIdGenerator


def _store_with_order() -> FakeOrderStore:
    inventory = FakeInventoryClient([("P1", "Widget", "10.00", 5), ("P2", "Gadget", "5.00", 5)])
    store = FakeOrderStore()
    OrderSaga(inventory, store, SequentialIdGenerator()).create(
        "O1",
        Buyer(name="Alice", phone="555"),
        [StockItem.of("P1", 2), StockItem.of("P2", 1)],
    )
    return store


class TestShowOrder:

    def test_reconstructs_header_and_lines(self):
        order = ShowOrderHandler(_store_with_order()).handle("O1")
        assert [line.product_id for line in order.lines] == ["P1", "P2"]

    def test_unknown_order(self):
        with pytest.raises(OrderNotFound):
            ShowOrderHandler(FakeOrderStore()).handle("nope")

    def test_dto_formatting(self):
        dto = OrderDTO.from_order(ShowOrderHandler(_store_with_order()).handle("O1"))
        assert dto.total == "25.00 CNY"
        assert dto.status == "NEW"
        assert dto.payment_status == "WAITING"
        assert dto.buyer_phone == "555"
        assert [(line.quantity, line.unit_price, line.subtotal) for line in dto.lines] == [
            (2, "10.00 CNY", "20.00 CNY"),
            (1, "5.00 CNY", "5.00 CNY"),
        ]
