"""
Tests for the order payload normalizer.
"""

import pytest
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from cart.selection import SelectionEngine
from cart.services import CartService
from orders.checkout import Customer, FulfillmentMethod, OrderContext
from orders.exceptions import OrderTotalMismatchError, OrderValidationError
from orders.services import OrderPayloadService


def walk_total_amounts(node):
    """Yield every total_price.amount anywhere in a cart item."""
    if isinstance(node, dict):
        if "total_price" in node:
            yield node["total_price"]["amount"]
        for value in node.values():
            yield from walk_total_amounts(value)
    elif isinstance(node, list):
        for value in node:
            yield from walk_total_amounts(value)


@pytest.fixture
def order_context():
    return OrderContext(
        order_id=1001,
        store_ref="resto-1",
        store_name="Resto One",
        kiosk_id="kiosk_1",
        payment_method="cash",
        customer=Customer(first_name="Ada", last_name="Lovelace", email="ada@example.com"),
        created_at=datetime(2026, 1, 2, 12, 30, tzinfo=dt_timezone.utc),
    )


class TestCartItem:
    def test_combo_scenario(self, make_combo_line):
        line = make_combo_line(drink="Cola", extras=("Cheddar sauce",), instructions="no ice")
        item = OrderPayloadService.build_cart_item(line, "EUR")

        assert item["ref"] == 42
        assert item["title"] == "Combo"
        assert item["special_instructions"] == "no ice"
        assert item["quantity"] == "1"
        assert item["price"]["total_price"]["amount"] == 800

        (addon,) = item["addons"]
        assert addon["title"] == "Cheddar sauce"
        assert addon["ref"] == 301
        assert addon["price"]["total_price"]["amount"] == 100

        (entry,) = item["categoryEntries"]
        assert entry["title"] == "Cola"
        assert entry["category_title"] == "BOISSON"
        assert entry["category_ref"] == "20"
        assert entry["ref"] == "201"

        (component,) = item["components"]
        assert component["title"] == "Combo"
        assert component["extra"] == 0

    def test_nested_quantities_multiplied_by_line_quantity(self, combo_item):
        engine = SelectionEngine(combo_item, quantity=3)
        engine.select("BOISSON", "Fanta")
        engine.increment("Sauces", "Mayo")
        engine.increment("Sauces", "Mayo")
        item = OrderPayloadService.build_cart_item(engine.commit(), "EUR")

        (sauce,) = item["addons"]
        assert sauce["quantity"] == 6
        assert sauce["price"]["unit_price"]["amount"] == 30
        assert sauce["price"]["total_price"]["amount"] == 180
        assert item["categoryEntries"][0]["quantity"] == 3
        assert item["price"]["total_price"]["amount"] == 2400

    def test_item_without_options(self, plain_item):
        item = OrderPayloadService.build_cart_item(SelectionEngine(plain_item).commit(), "EUR")
        assert item["components"] == item["categoryEntries"] == item["addons"] == []
        assert item["special_instructions"] == ""
        assert OrderPayloadService.item_total_minor(item) == 250


class TestOrderDocument:
    def test_document_shape(self, make_combo_line, order_context):
        document = OrderPayloadService.build_order_document([make_combo_line()], order_context)

        assert document["id"] == 1001
        assert document["current_state"] == "CREATED"
        assert document["created_at"] == "2026-01-02T12:30:00+00:00"
        assert document["store"] == {"ref": "resto-1", "name": "Resto One"}
        assert document["kiosk_id"] == "kiosk_1"
        assert document["eater"]["first_name"] == "Ada"
        assert document["eater"]["email_address"] == "ada@example.com"
        assert document["type"] == "eatin"
        assert document["requested_order_time"]["delivery_method"] == "eatin"
        assert document["payment"]["payment_type"] == "cash"
        assert document["payment"]["charges"]["total"] == {
            "amount": 900,
            "currency_code": "EUR",
            "formatted_amount": "9 EUR",
        }
        assert document["payment"]["charges"]["delivery_fee"] == {
            "amount": 0,
            "currency_code": "EUR",
            "formatted_amount": None,
        }

    def test_sum_of_totals_matches_cart_total(self, combo_item, make_combo_line, plain_item, order_context):
        cart = CartService()
        cart.add(make_combo_line(quantity=2))
        cart.add(make_combo_line(drink="Fanta", extras=("Bacon", "Onions"), instructions=""))
        engine = SelectionEngine(combo_item, quantity=4)
        engine.select("BOISSON", "Cola")
        engine.increment("Sauces", "Ketchup")
        engine.increment("Sauces", "Mayo")
        engine.increment("Sauces", "Mayo")
        cart.add(engine.commit())
        cart.add(SelectionEngine(plain_item, quantity=3).commit())

        document = OrderPayloadService.build_order_document(cart.lines, order_context, cart_total=cart.total())

        emitted = sum(walk_total_amounts(document["cart"]["items"]))
        assert emitted == round(cart.total() * 100)
        assert OrderPayloadService.document_total_minor(document) == emitted

    def test_total_mismatch_raises(self, make_combo_line, order_context):
        with pytest.raises(OrderTotalMismatchError) as exc_info:
            OrderPayloadService.build_order_document(
                [make_combo_line()], order_context, cart_total=Decimal("9.01")
            )
        assert exc_info.value.expected_minor == 901
        assert exc_info.value.actual_minor == 900
        assert isinstance(exc_info.value, OrderValidationError)

    def test_delivery_fee_only_for_delivery(self, make_combo_line, order_context):
        from dataclasses import replace

        pickup = replace(order_context, fulfillment_method=FulfillmentMethod.PICKUP, delivery_fee=Decimal("2.50"))
        delivery = replace(pickup, fulfillment_method=FulfillmentMethod.DELIVERY)

        pickup_doc = OrderPayloadService.build_order_document([make_combo_line()], pickup)
        delivery_doc = OrderPayloadService.build_order_document([make_combo_line()], delivery)

        assert pickup_doc["payment"]["charges"]["delivery_fee"]["amount"] == 0
        assert delivery_doc["payment"]["charges"]["delivery_fee"]["amount"] == 250
        assert delivery_doc["type"] == "delivery"

    def test_empty_cart_document(self, order_context):
        document = OrderPayloadService.build_order_document([], order_context, cart_total=Decimal("0"))
        assert document["cart"]["items"] == []
        assert OrderPayloadService.document_total_minor(document) == 0
