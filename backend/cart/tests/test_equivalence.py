"""
Tests for cart line equivalence.
"""

import itertools

import pytest
from decimal import Decimal

from cart.equivalence import are_equivalent, line_signature, normalize_instructions
from cart.lines import CartLine, SelectedChoice, SelectedGroup
from products.catalog import SourceKind


def make_line(line_id="a", menu_item_id=1, instructions=None, groups=(), quantity=1):
    selections = tuple(
        SelectedGroup(
            name=name,
            source_kind=SourceKind.ADDON,
            choices=tuple(SelectedChoice(c, q, Decimal(p)) for c, q, p in choices),
        )
        for name, choices in groups
    )
    options = sum((g.additional_price for g in selections), Decimal("0.00"))
    return CartLine(
        id=line_id,
        menu_item_id=menu_item_id,
        name="Burger",
        quantity=quantity,
        base_price=Decimal("5.00"),
        final_unit_price=Decimal("5.00") + options,
        selections=selections,
        special_instructions=instructions,
    )


SAMPLE_LINES = [
    make_line("1"),
    make_line("2", instructions="No onions"),
    make_line("3", instructions="  no ONIONS "),
    make_line("4", groups=[("Sauce", [("Mayo", 1, "0.30"), ("Ketchup", 2, "0.20")])]),
    make_line("5", groups=[("sauce", [("ketchup", 2, "0.20"), ("mayo", 1, "0.30")])]),
    make_line("6", groups=[("Sauce", [("Mayo", 2, "0.30")])]),
    make_line("7", menu_item_id=2),
    make_line("8", groups=[("Sauce", [])]),
]


class TestEquivalenceRelation:
    @pytest.mark.parametrize("line", SAMPLE_LINES, ids=lambda line: line.id)
    def test_reflexive(self, line):
        assert are_equivalent(line, line)

    def test_symmetric(self):
        for first, second in itertools.product(SAMPLE_LINES, repeat=2):
            assert are_equivalent(first, second) == are_equivalent(second, first)

    def test_transitive(self):
        for a, b, c in itertools.product(SAMPLE_LINES, repeat=3):
            if are_equivalent(a, b) and are_equivalent(b, c):
                assert are_equivalent(a, c)


class TestEquivalenceRules:
    def test_instructions_ignore_case_and_whitespace(self):
        assert are_equivalent(SAMPLE_LINES[1], SAMPLE_LINES[2])
        assert normalize_instructions("  No ICE ") == "no ice"
        assert normalize_instructions(None) == ""

    def test_different_instructions(self):
        assert not are_equivalent(make_line(instructions="no ice"), make_line(instructions="extra ice"))

    def test_choice_order_and_case_do_not_matter(self):
        assert are_equivalent(SAMPLE_LINES[3], SAMPLE_LINES[4])

    def test_quantities_matter(self):
        assert not are_equivalent(
            make_line(groups=[("Sauce", [("Mayo", 1, "0.30")])]),
            make_line(groups=[("Sauce", [("Mayo", 2, "0.30")])]),
        )

    def test_empty_group_is_ignored(self):
        assert are_equivalent(SAMPLE_LINES[0], SAMPLE_LINES[7])

    def test_menu_item_matters(self):
        assert not are_equivalent(SAMPLE_LINES[0], SAMPLE_LINES[6])

    def test_line_quantity_and_id_do_not_matter(self):
        assert are_equivalent(make_line("x", quantity=1), make_line("y", quantity=5))

    def test_signature_is_hashable(self):
        assert len({line_signature(line) for line in SAMPLE_LINES}) == 5

    def test_combo_scenarios(self, make_combo_line):
        assert are_equivalent(make_combo_line(), make_combo_line())
        assert not are_equivalent(
            make_combo_line(instructions="no ice"), make_combo_line(instructions="extra ice")
        )
