"""
Root conftest.py for all backend tests.

This file makes menu fixtures available to all test files across all apps.
"""
import pytest
from decimal import Decimal

from products.catalog import Choice, MenuItem, OptionGroup, SelectionMode, SourceKind


# ============================================================================
# MENU FIXTURES
# ============================================================================

@pytest.fixture
def combo_item():
    """
    Combo menu: base price 8.00 with

    - "Combo" component (required, single, auto-selected)
    - "BOISSON" drink category (required, single)
    - "Extras" add-ons (multi, at most 2)
    - "Sauces" add-ons (multi, per-choice quantity, at most 3)
    """
    return MenuItem(
        id=42,
        name="Combo",
        base_price=Decimal("8.00"),
        description="Burger, fries and a drink",
        option_groups=(
            OptionGroup(
                name="Combo",
                source_kind=SourceKind.COMPONENT,
                mode=SelectionMode.SINGLE,
                required=True,
                choices=(Choice("Combo", Decimal("0.00"), ref=101),),
            ),
            OptionGroup(
                name="BOISSON",
                source_kind=SourceKind.CATEGORY,
                mode=SelectionMode.SINGLE,
                required=True,
                choices=(
                    Choice("Cola", Decimal("0.00"), ref=201, category_ref=20),
                    Choice("Fanta", Decimal("0.50"), ref=202, category_ref=20),
                ),
            ),
            OptionGroup(
                name="Extras",
                source_kind=SourceKind.ADDON,
                mode=SelectionMode.MULTI,
                choices=(
                    Choice("Cheddar sauce", Decimal("1.00"), ref=301),
                    Choice("Bacon", Decimal("1.50"), ref=302),
                    Choice("Onions", Decimal("0.50"), ref=303),
                ),
                max_selection=2,
            ),
            OptionGroup(
                name="Sauces",
                source_kind=SourceKind.ADDON,
                mode=SelectionMode.MULTI,
                choices=(
                    Choice("Ketchup", Decimal("0.20"), ref=401),
                    Choice("Mayo", Decimal("0.30"), ref=402),
                ),
                max_selection=3,
                allow_per_choice_quantity=True,
            ),
        ),
    )


@pytest.fixture
def plain_item():
    """An item without options."""
    return MenuItem(id=7, name="Water", base_price=Decimal("2.50"))


@pytest.fixture
def make_combo_line(combo_item):
    """
    Factory for committed Combo lines.

    Usage:
        line = make_combo_line(drink="Cola", extras=("Cheddar sauce",), instructions="no ice")
    """
    from cart.selection import SelectionEngine

    def _make(drink="Cola", extras=("Cheddar sauce",), instructions="no ice", quantity=1):
        engine = SelectionEngine(combo_item, quantity=quantity, special_instructions=instructions)
        engine.select("BOISSON", drink)
        for extra in extras:
            engine.toggle("Extras", extra)
        return engine.commit()

    return _make


@pytest.fixture
def catalog_payload():
    """Catalog JSON for the Combo as the catalog service sends it."""
    return [
        {
            "id": 42,
            "name": "Combo",
            "description": "Burger, fries and a drink",
            "price": "8.00",
            "options": [
                {
                    "name": "Combo",
                    "type": "radio",
                    "required": True,
                    "sourceType": "menuItem",
                    "choices": [{"id": 101, "name": "Combo", "price": 0}],
                },
                {
                    "name": "BOISSON",
                    "type": "radio",
                    "required": True,
                    "sourceType": "menuCategory",
                    "choices": [
                        {"id": 201, "name": "Cola", "price": 0, "categoryId": 20},
                        {"id": 202, "name": "Fanta", "price": "0.50", "categoryId": 20},
                    ],
                },
                {
                    "name": "Extras",
                    "type": "checkbox",
                    "sourceType": "addition",
                    "maxSelection": 2,
                    "choices": [
                        {"id": 301, "name": "Cheddar sauce", "price": "1.00"},
                        {"id": 302, "name": "Bacon", "price": "1.50"},
                        {"id": 303, "name": "Onions", "price": "0.50"},
                    ],
                },
            ],
        }
    ]
