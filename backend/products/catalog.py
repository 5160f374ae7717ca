"""
Read-only option model for purchasable menu items.

The catalog service owns these objects; the kiosk only reads them. Instances
are immutable so a SelectionEngine can hold a reference for the whole
configuration session without copying.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple, Union

from django.db import models
from django.utils.translation import gettext_lazy as _

Ref = Union[int, str]


class SelectionMode(models.TextChoices):
    SINGLE = "single", _("Single Choice")
    MULTI = "multi", _("Multiple Choices")


class SourceKind(models.TextChoices):
    """
    Where an option group came from in the catalog.

    Determines the step order in the configurator and how selected choices
    are flattened into the order document.
    """

    COMPONENT = "component", _("Menu Component")
    CATEGORY = "category", _("Menu Category")
    ADDON = "addon", _("Addition")


# Step order within the configurator: components, then categories, then add-ons.
SOURCE_KIND_ORDER = (SourceKind.COMPONENT, SourceKind.CATEGORY, SourceKind.ADDON)


@dataclass(frozen=True)
class Choice:
    name: str
    unit_price: Decimal = Decimal("0.00")
    ref: Optional[Ref] = None
    category_ref: Optional[Ref] = None

    def __post_init__(self):
        if self.unit_price < 0:
            raise ValueError(f"Choice '{self.name}' has a negative price: {self.unit_price}")


@dataclass(frozen=True)
class OptionGroup:
    name: str
    source_kind: SourceKind = SourceKind.COMPONENT
    mode: SelectionMode = SelectionMode.SINGLE
    required: bool = False
    choices: Tuple[Choice, ...] = ()
    min_selection: Optional[int] = None
    max_selection: Optional[int] = None
    allow_per_choice_quantity: bool = False

    @property
    def is_single(self) -> bool:
        return self.mode == SelectionMode.SINGLE

    @property
    def selection_limit(self) -> Optional[int]:
        """Upper bound on the summed quantity of a multi group, None if unbounded."""
        if self.is_single:
            return 1
        return self.max_selection or None

    def get_choice(self, name: str) -> Choice:
        for choice in self.choices:
            if choice.name == name:
                return choice
        raise ValueError(f"Option group '{self.name}' has no choice named '{name}'")


@dataclass(frozen=True)
class MenuItem:
    id: int
    name: str
    base_price: Decimal
    option_groups: Tuple[OptionGroup, ...] = field(default_factory=tuple)
    description: str = ""

    @property
    def has_options(self) -> bool:
        return any(group.choices for group in self.option_groups)

    def get_group(self, name: str) -> OptionGroup:
        for group in self.option_groups:
            if group.name == name:
                return group
        raise ValueError(f"Menu item '{self.name}' has no option group named '{name}'")

    def groups_of_kind(self, kind: SourceKind) -> Tuple[OptionGroup, ...]:
        """Groups of one source kind that offer at least one choice, in catalog order."""
        return tuple(g for g in self.option_groups if g.source_kind == kind and g.choices)
