"""
Finalized cart lines.

A CartLine is a snapshot: everything the order document needs (choice names,
refs, unit prices, category tags) is copied out of the catalog at commit
time, so later catalog changes never alter a line already in the cart.
"""

import uuid
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional, Tuple

from products.catalog import Ref, SourceKind


def generate_line_id(menu_item_id) -> str:
    return f"{menu_item_id}-{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class SelectedChoice:
    name: str
    quantity: int
    unit_price: Decimal
    ref: Optional[Ref] = None
    category_ref: Optional[Ref] = None
    category_title: Optional[str] = None

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class SelectedGroup:
    """The non-empty selection of one option group, frozen at commit."""

    name: str
    source_kind: SourceKind
    choices: Tuple[SelectedChoice, ...]

    @property
    def additional_price(self) -> Decimal:
        return sum((choice.total_price for choice in self.choices), Decimal("0.00"))


@dataclass(frozen=True)
class CartLine:
    id: str
    menu_item_id: int
    name: str
    quantity: int
    base_price: Decimal
    final_unit_price: Decimal
    selections: Tuple[SelectedGroup, ...] = ()
    special_instructions: Optional[str] = None

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"Cart line quantity must be at least 1, got {self.quantity}")

    @property
    def total_price(self) -> Decimal:
        return self.final_unit_price * self.quantity

    def _choices_of_kind(self, kind: SourceKind) -> Tuple[SelectedChoice, ...]:
        return tuple(
            choice
            for group in self.selections
            if group.source_kind == kind
            for choice in group.choices
        )

    @property
    def components(self) -> Tuple[SelectedChoice, ...]:
        return self._choices_of_kind(SourceKind.COMPONENT)

    @property
    def category_entries(self) -> Tuple[SelectedChoice, ...]:
        return self._choices_of_kind(SourceKind.CATEGORY)

    @property
    def addons(self) -> Tuple[SelectedChoice, ...]:
        return self._choices_of_kind(SourceKind.ADDON)

    def with_quantity(self, quantity: int) -> "CartLine":
        return replace(self, quantity=quantity)

    def with_id(self, line_id: str) -> "CartLine":
        return replace(self, id=line_id)
