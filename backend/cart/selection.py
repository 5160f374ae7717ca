"""
Item configurator: the option-selection state machine for one menu item.

A SelectionEngine is opened when the customer taps a product and lives until
the line is committed to the cart or the configuration is cancelled (in which
case the engine is simply dropped; nothing has touched the cart yet).

Constraint violations are never exceptions here. Picking a fourth add-on in a
group limited to three, or picking the same choice twice, is a rejected
transition: the mutator returns False and the state is left as it was. The UI
turns that into a disabled button or a blocked "Next", not an error message.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterator, List, Optional, Tuple

from django.db import models
from django.utils.translation import gettext_lazy as _

from products.catalog import SOURCE_KIND_ORDER, MenuItem, OptionGroup, SourceKind

from .exceptions import SelectionIncompleteError
from .lines import CartLine, SelectedChoice, SelectedGroup, generate_line_id

logger = logging.getLogger(__name__)


class StepKind(models.TextChoices):
    OVERVIEW = "overview", _("Overview")
    OPTION = "option", _("Option Group")
    CUSTOMIZE = "customize", _("Quantity & Notes")
    REVIEW = "review", _("Review")


@dataclass(frozen=True)
class Step:
    kind: StepKind
    group: Optional[OptionGroup] = None

    @property
    def key(self) -> str:
        if self.group is None:
            return str(self.kind.value)
        return f"{self.group.source_kind.value}:{self.group.name}"


def derive_steps(menu_item: MenuItem) -> Tuple[Step, ...]:
    """
    Build the configurator's step sequence for a menu item.

    [overview, component groups..., category groups..., addon groups...,
    customize, review]. Empty groups get no step. Within a kind the catalog
    order is kept; across kinds the order above always wins.
    """
    steps = [Step(StepKind.OVERVIEW)]
    for kind in SOURCE_KIND_ORDER:
        steps.extend(Step(StepKind.OPTION, group) for group in menu_item.groups_of_kind(kind))
    steps.append(Step(StepKind.CUSTOMIZE))
    steps.append(Step(StepKind.REVIEW))
    return tuple(steps)


class SelectionState:
    """
    Selected quantities per option group, keyed by group name then choice name.

    Both levels keep insertion order, which is the order the customer picked
    things in. Only SelectionEngine writes to it.
    """

    def __init__(self):
        self._groups: Dict[str, Dict[str, int]] = {}

    def quantities(self, group_name: str) -> Dict[str, int]:
        return dict(self._groups.get(group_name, {}))

    def quantity_of(self, group_name: str, choice_name: str) -> int:
        return self._groups.get(group_name, {}).get(choice_name, 0)

    def total(self, group_name: str) -> int:
        return sum(self._groups.get(group_name, {}).values())

    def has_selection(self, group_name: str) -> bool:
        return self.total(group_name) > 0

    def items(self) -> Iterator[Tuple[str, str, int]]:
        for group_name, choices in self._groups.items():
            for choice_name, quantity in choices.items():
                yield group_name, choice_name, quantity

    def as_dict(self) -> Dict[str, Dict[str, int]]:
        return {name: dict(choices) for name, choices in self._groups.items() if choices}

    def _replace(self, group_name: str, choices: Dict[str, int]) -> None:
        self._groups[group_name] = choices

    def _put(self, group_name: str, choice_name: str, quantity: int) -> None:
        choices = self._groups.setdefault(group_name, {})
        if quantity > 0:
            choices[choice_name] = quantity
        else:
            choices.pop(choice_name, None)


class SelectionEngine:
    """
    Drives the configuration of a single MenuItem instance.

    Usage:
        engine = SelectionEngine(menu_item)
        engine.select("BOISSON", "Cola")
        if engine.advance():
            ...
        line = engine.commit()
        cart.add(line)
    """

    def __init__(
        self,
        menu_item: MenuItem,
        quantity: int = 1,
        special_instructions: str = "",
        line_id: Optional[str] = None,
        preselect_components: bool = True,
    ):
        self.menu_item = menu_item
        self.steps = derive_steps(menu_item)
        self.current_step = 0
        self.state = SelectionState()
        self.quantity = 1
        self.special_instructions = special_instructions or ""
        self.line_id = line_id
        self.set_quantity(quantity)

        if preselect_components:
            self._preselect_components()

    @classmethod
    def for_edit(cls, menu_item: MenuItem, line: CartLine) -> "SelectionEngine":
        """Reopen a committed line; committing the engine again keeps the line id."""
        if line.menu_item_id != menu_item.id:
            raise ValueError(
                f"Cart line {line.id} belongs to menu item {line.menu_item_id}, not {menu_item.id}"
            )
        engine = cls(
            menu_item,
            quantity=line.quantity,
            special_instructions=line.special_instructions or "",
            line_id=line.id,
            preselect_components=False,
        )
        for selected in line.selections:
            engine._restore_group(selected)
        return engine

    @property
    def is_editing(self) -> bool:
        return self.line_id is not None

    # ------------------------------------------------------------------
    # Selection transitions
    # ------------------------------------------------------------------

    def select(self, group_name: str, choice_name: str) -> bool:
        """
        Pick a choice with quantity 1.

        Single groups swap their selection. Multi groups add the choice unless
        it is already picked or the group is at its limit.
        """
        group = self.menu_item.get_group(group_name)
        group.get_choice(choice_name)

        if group.is_single:
            if self.state.quantities(group_name) == {choice_name: 1}:
                return False
            self.state._replace(group_name, {choice_name: 1})
            return True

        if self.state.quantity_of(group_name, choice_name) > 0:
            return False
        if self._at_limit(group):
            logger.debug(f"Rejected '{choice_name}' in '{group_name}': limit of {group.max_selection} reached")
            return False
        self.state._put(group_name, choice_name, 1)
        return True

    def toggle(self, group_name: str, choice_name: str) -> bool:
        """Remove a picked multi-group choice, otherwise behave like select()."""
        group = self.menu_item.get_group(group_name)
        group.get_choice(choice_name)

        if not group.is_single and self.state.quantity_of(group_name, choice_name) > 0:
            self.state._put(group_name, choice_name, 0)
            return True
        return self.select(group_name, choice_name)

    def increment(self, group_name: str, choice_name: str) -> bool:
        group = self.menu_item.get_group(group_name)
        group.get_choice(choice_name)

        if not group.allow_per_choice_quantity or group.is_single:
            return False
        if self._at_limit(group):
            return False
        current = self.state.quantity_of(group_name, choice_name)
        self.state._put(group_name, choice_name, current + 1)
        return True

    def decrement(self, group_name: str, choice_name: str) -> bool:
        group = self.menu_item.get_group(group_name)
        group.get_choice(choice_name)

        if not group.allow_per_choice_quantity or group.is_single:
            return False
        current = self.state.quantity_of(group_name, choice_name)
        if current == 0:
            return False
        # Going below 1 drops the choice altogether
        self.state._put(group_name, choice_name, current - 1)
        return True

    def _at_limit(self, group: OptionGroup) -> bool:
        limit = group.selection_limit
        return limit is not None and self.state.total(group.name) >= limit

    # ------------------------------------------------------------------
    # Customize step
    # ------------------------------------------------------------------

    def set_quantity(self, quantity: int) -> bool:
        if quantity < 1:
            return False
        self.quantity = quantity
        return True

    def set_special_instructions(self, text: Optional[str]) -> None:
        self.special_instructions = text or ""

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def can_advance(self, step_index: Optional[int] = None) -> bool:
        """False only when the step's option group is required and still empty."""
        index = self.current_step if step_index is None else step_index
        group = self.steps[index].group
        if group is None or not group.required:
            return True
        return self.state.has_selection(group.name)

    def advance(self) -> bool:
        if self.current_step >= len(self.steps) - 1 or not self.can_advance():
            return False
        self.current_step += 1
        return True

    def back(self) -> bool:
        if self.current_step == 0:
            return False
        self.current_step -= 1
        return True

    def go_to(self, step_index: int) -> bool:
        """Jump back to an already visited step; forward jumps must go through advance()."""
        if step_index < 0 or step_index > self.current_step:
            return False
        self.current_step = step_index
        return True

    # ------------------------------------------------------------------
    # Pricing & commit
    # ------------------------------------------------------------------

    def price(self) -> Decimal:
        """Unit price: base price plus every selected choice price times its quantity."""
        options_price = Decimal("0.00")
        for group_name, choice_name, quantity in self.state.items():
            choice = self.menu_item.get_group(group_name).get_choice(choice_name)
            options_price += choice.unit_price * quantity
        return self.menu_item.base_price + options_price

    def total_price(self) -> Decimal:
        return self.price() * self.quantity

    def missing_required_groups(self) -> List[str]:
        return [
            step.group.name
            for step in self.steps
            if step.group is not None and step.group.required
            and not self.state.has_selection(step.group.name)
        ]

    def commit(self) -> CartLine:
        """
        Freeze the configuration into a CartLine.

        Raises:
            SelectionIncompleteError: If a required option group has no selection
        """
        missing = self.missing_required_groups()
        if missing:
            raise SelectionIncompleteError(missing)

        selections = []
        for group in self.menu_item.option_groups:
            quantities = self.state.quantities(group.name)
            if not quantities:
                continue
            selections.append(
                SelectedGroup(
                    name=group.name,
                    source_kind=group.source_kind,
                    choices=tuple(
                        self._snapshot_choice(group, choice_name, quantity)
                        for choice_name, quantity in quantities.items()
                    ),
                )
            )

        line = CartLine(
            id=self.line_id or generate_line_id(self.menu_item.id),
            menu_item_id=self.menu_item.id,
            name=self.menu_item.name,
            quantity=self.quantity,
            base_price=self.menu_item.base_price,
            final_unit_price=self.price(),
            selections=tuple(selections),
            special_instructions=self.special_instructions or None,
        )
        logger.info(f"Committed line {line.id} for '{line.name}' x{line.quantity} at {line.final_unit_price}")
        return line

    @staticmethod
    def _snapshot_choice(group: OptionGroup, choice_name: str, quantity: int) -> SelectedChoice:
        choice = group.get_choice(choice_name)
        is_category = group.source_kind == SourceKind.CATEGORY
        return SelectedChoice(
            name=choice.name,
            quantity=quantity,
            unit_price=choice.unit_price,
            ref=choice.ref,
            category_ref=(choice.category_ref if choice.category_ref is not None else group.name) if is_category else None,
            category_title=group.name if is_category else None,
        )

    # ------------------------------------------------------------------
    # Initial state
    # ------------------------------------------------------------------

    def _preselect_components(self) -> None:
        """Main components come selected: the first choice of single groups, all of multi groups."""
        for group in self.menu_item.groups_of_kind(SourceKind.COMPONENT):
            if group.is_single:
                self.select(group.name, group.choices[0].name)
                continue
            for choice in group.choices:
                self.select(group.name, choice.name)

    def _restore_group(self, selected: SelectedGroup) -> None:
        try:
            group = self.menu_item.get_group(selected.name)
        except ValueError:
            logger.warning(f"Option group '{selected.name}' no longer exists on '{self.menu_item.name}', dropping it")
            return

        limit = group.selection_limit
        restored: Dict[str, int] = {}
        for choice in selected.choices:
            if not any(c.name == choice.name for c in group.choices):
                logger.warning(f"Choice '{choice.name}' no longer exists in '{group.name}', dropping it")
                continue
            quantity = 1 if group.is_single else choice.quantity
            if limit is not None:
                quantity = min(quantity, limit - sum(restored.values()))
            if quantity <= 0:
                break
            restored[choice.name] = quantity
        self.state._replace(group.name, restored)
