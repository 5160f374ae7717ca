"""
Cart service layer for the kiosk session.

This service handles:
- Adding lines (merging into an equivalent line when one exists)
- Replacing a line after "edit and save"
- Removing single lines and whole display groups (atomically)
- Grouping equivalent lines for display
- Running totals for the order summary

The cart is owned by the single interaction thread of the kiosk, so it is a
plain in-memory list with no locking.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from .equivalence import are_equivalent, line_signature
from .exceptions import CartLineNotFoundError, GroupedLineEditError
from .lines import CartLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartLineGroup:
    """Display-only projection of one equivalence class; never stored."""

    representative_line: CartLine
    total_quantity: int
    member_ids: Tuple[str, ...]

    @property
    def is_grouped(self) -> bool:
        return len(self.member_ids) > 1

    @property
    def total_price(self) -> Decimal:
        return self.representative_line.final_unit_price * self.total_quantity


@dataclass(frozen=True)
class OrderSummary:
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    item_count: int


class CartService:
    """Service for managing the lines of one kiosk cart."""

    def __init__(self, lines: Optional[Iterable[CartLine]] = None):
        # Restoring an existing cart keeps its lines as they were, unmerged
        self._lines: List[CartLine] = list(lines or [])

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    def __len__(self):
        return len(self._lines)

    def __iter__(self):
        return iter(self.lines)

    def is_empty(self) -> bool:
        return not self._lines

    def get(self, line_id: str) -> CartLine:
        return self._lines[self._index_of(line_id)]

    def _index_of(self, line_id: str) -> int:
        for index, line in enumerate(self._lines):
            if line.id == line_id:
                return index
        raise CartLineNotFoundError(line_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, line: CartLine) -> CartLine:
        """
        Add a line to the cart.

        If an equivalent line already exists its quantity grows by
        line.quantity and the merged line is returned; otherwise the line is
        appended as-is.
        """
        for index, existing in enumerate(self._lines):
            if are_equivalent(existing, line):
                merged = existing.with_quantity(existing.quantity + line.quantity)
                self._lines[index] = merged
                logger.info(f"Merged '{line.name}' into line {existing.id} (quantity {merged.quantity})")
                return merged

        self._lines.append(line)
        logger.info(f"Added line {line.id} for '{line.name}' x{line.quantity}")
        return line

    def edit(self, line_id: str, new_line: CartLine) -> CartLine:
        """
        Replace a line in place, keeping its id and position.

        Never merges, even when the new configuration is equivalent to another
        line already in the cart.
        """
        index = self._index_of(line_id)
        replaced = new_line if new_line.id == line_id else new_line.with_id(line_id)
        self._lines[index] = replaced
        logger.info(f"Edited line {line_id} ('{replaced.name}' x{replaced.quantity})")
        return replaced

    def update_quantity(self, line_id: str, quantity: int) -> Optional[CartLine]:
        """Set a line's quantity; zero or less removes the line."""
        index = self._index_of(line_id)
        if quantity <= 0:
            self.remove(line_id)
            return None
        self._lines[index] = self._lines[index].with_quantity(quantity)
        return self._lines[index]

    def remove(self, line_id: str) -> CartLine:
        index = self._index_of(line_id)
        removed = self._lines.pop(index)
        logger.info(f"Removed line {line_id} ('{removed.name}')")
        return removed

    def remove_group(self, line_ids: Iterable[str]) -> List[CartLine]:
        """
        Remove every listed line, or none of them.

        Raises:
            CartLineNotFoundError: If any id is not in the cart (cart unchanged)
        """
        ids = list(dict.fromkeys(line_ids))
        present = {line.id for line in self._lines}
        missing = [line_id for line_id in ids if line_id not in present]
        if missing:
            raise CartLineNotFoundError(missing)

        wanted = set(ids)
        removed = [line for line in self._lines if line.id in wanted]
        self._lines = [line for line in self._lines if line.id not in wanted]
        logger.info(f"Removed group of {len(removed)} line(s): {', '.join(ids)}")
        return removed

    def clear(self) -> None:
        self._lines = []

    # ------------------------------------------------------------------
    # Display groups
    # ------------------------------------------------------------------

    def group_for_display(self) -> List[CartLineGroup]:
        """Partition the cart into equivalence classes, in first-seen order."""
        buckets = {}
        for line in self._lines:
            buckets.setdefault(line_signature(line), []).append(line)

        return [
            CartLineGroup(
                representative_line=members[0],
                total_quantity=sum(member.quantity for member in members),
                member_ids=tuple(member.id for member in members),
            )
            for members in buckets.values()
        ]

    def line_for_edit(self, group: CartLineGroup) -> CartLine:
        """
        Return the single line behind a display group so it can be reopened.

        Raises:
            GroupedLineEditError: If the group is backed by more than one line
        """
        if group.is_grouped:
            raise GroupedLineEditError(group.member_ids)
        return self.get(group.member_ids[0])

    def adjust_group_quantity(self, group: CartLineGroup, delta: int) -> None:
        """
        Step a display group's quantity up or down by one.

        Increases go to the first member line. Decreases drop the last member
        line while the group has several, then count the last line down
        (never below 1; removal goes through remove_group).
        """
        if delta == 0:
            return
        if delta > 0:
            first = self.get(group.member_ids[0])
            self.update_quantity(first.id, first.quantity + delta)
            return

        if group.is_grouped:
            self.remove(group.member_ids[-1])
            return
        line = self.get(group.member_ids[0])
        if line.quantity + delta >= 1:
            self.update_quantity(line.id, line.quantity + delta)

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def total(self) -> Decimal:
        return sum((line.total_price for line in self._lines), Decimal("0.00"))

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def summary(self) -> OrderSummary:
        subtotal = self.total()
        tax = Decimal("0.00")
        return OrderSummary(
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
            item_count=self.item_count(),
        )
