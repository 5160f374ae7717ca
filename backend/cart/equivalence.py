"""
When are two cart lines "the same order line"?

Two lines are equivalent when a customer could not tell them apart on the
receipt: same product, same notes (ignoring surrounding whitespace and case),
and the same choices in the same quantities in every option group, in any
order. Equivalent lines are merged when added and grouped when displayed.

The relation is defined as equality of a hashable signature, which makes it
an equivalence relation without any pairwise special cases.
"""

from decimal import Decimal
from typing import FrozenSet, Hashable, Optional, Tuple

from .lines import CartLine, SelectedGroup


def normalize_instructions(text: Optional[str]) -> str:
    return (text or "").strip().casefold()


def group_signature(group: SelectedGroup) -> Tuple[str, Decimal, Tuple[Tuple[str, int], ...]]:
    # Sorted (name, quantity) pairs compare as a multiset regardless of pick order
    pairs = tuple(sorted(
        (choice.name.casefold(), choice.quantity)
        for choice in group.choices
        if choice.quantity > 0
    ))
    return group.name.casefold(), group.additional_price, pairs


def line_signature(line: CartLine) -> Hashable:
    groups: FrozenSet = frozenset(
        group_signature(group)
        for group in line.selections
        if any(choice.quantity > 0 for choice in group.choices)
    )
    return line.menu_item_id, normalize_instructions(line.special_instructions), groups


def are_equivalent(first: CartLine, second: CartLine) -> bool:
    return line_signature(first) == line_signature(second)
