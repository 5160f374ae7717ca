"""
Serializers that turn catalog-service JSON into the read-only option model.

The catalog payload is produced by an external service and is not always
clean: choices without a name, null prices and unknown selection types all
show up in practice. Parsing sanitizes those instead of rejecting the item,
so one bad choice never hides a whole product from the kiosk.
"""

import logging
from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from payments.money import DEFAULT_CURRENCY, quantize

from .catalog import Choice, MenuItem, OptionGroup, SelectionMode, SourceKind

logger = logging.getLogger(__name__)

# Catalog vocabulary -> option model
SELECTION_MODE_ALIASES = {
    "radio": SelectionMode.SINGLE,
    "single": SelectionMode.SINGLE,
    "checkbox": SelectionMode.MULTI,
    "multi": SelectionMode.MULTI,
}

SOURCE_KIND_ALIASES = {
    "menuItem": SourceKind.COMPONENT,
    "component": SourceKind.COMPONENT,
    "menuCategory": SourceKind.CATEGORY,
    "category": SourceKind.CATEGORY,
    "addition": SourceKind.ADDON,
    "addon": SourceKind.ADDON,
}


class RefField(serializers.Field):
    """Catalog references are either integers or strings; keep whichever we get."""

    def to_internal_value(self, data):
        if isinstance(data, bool) or not isinstance(data, (int, str)):
            raise serializers.ValidationError("Reference must be an integer or a string.")
        return data

    def to_representation(self, value):
        return value


class OptionChoiceSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    price = serializers.DecimalField(
        max_digits=None,
        decimal_places=None,
        min_value=0,
        required=False,
        allow_null=True,
    )
    id = RefField(required=False, allow_null=True)
    ref = RefField(required=False, allow_null=True)
    categoryId = RefField(source="category_id", required=False, allow_null=True)
    categoryRef = RefField(source="category_ref", required=False, allow_null=True)


class ItemOptionSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    type = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    required = serializers.BooleanField(required=False, default=False)
    choices = OptionChoiceSerializer(many=True, required=False, allow_null=True)
    minSelection = serializers.IntegerField(
        source="min_selection", required=False, allow_null=True, min_value=0
    )
    maxSelection = serializers.IntegerField(
        source="max_selection", required=False, allow_null=True, min_value=0
    )
    sourceType = serializers.CharField(
        source="source_type", required=False, allow_blank=True, allow_null=True
    )
    allowPerChoiceQuantity = serializers.BooleanField(
        source="allow_per_choice_quantity", required=False, default=False
    )


class MenuItemSerializer(serializers.Serializer):
    """
    Parse one catalog menu item.

    Usage:
        serializer = MenuItemSerializer(data=payload)
        serializer.is_valid(raise_exception=True)
        menu_item = serializer.save()
    """

    id = serializers.IntegerField()
    name = serializers.CharField()
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    price = serializers.DecimalField(max_digits=None, decimal_places=None, min_value=0)
    options = ItemOptionSerializer(many=True, required=False, allow_null=True)

    def create(self, validated_data):
        groups = []
        for option in validated_data.get("options") or []:
            group = build_option_group(option)
            if not group.choices:
                logger.debug(f"Dropping option group '{group.name}' of item {validated_data['id']}: no choices")
                continue
            groups.append(group)

        return MenuItem(
            id=validated_data["id"],
            name=validated_data["name"].strip(),
            base_price=catalog_price(validated_data["price"]),
            option_groups=tuple(groups),
            description=(validated_data.get("description") or "").strip(),
        )


def catalog_price(value) -> Decimal:
    """
    Round a price to the kiosk currency's minor unit.

    Prices are held in whole cents from the moment they are parsed, so the
    cart total and the per-line minor-unit totals can never disagree.
    """
    return quantize(getattr(settings, "KIOSK_CURRENCY", DEFAULT_CURRENCY), value)


def build_choice(data) -> Choice:
    ref = data.get("ref")
    if ref is None:
        ref = data.get("id")
    category_ref = data.get("category_ref")
    if category_ref is None:
        category_ref = data.get("category_id")
    price = data.get("price")
    return Choice(
        name=data["name"].strip(),
        unit_price=catalog_price(price if price is not None else Decimal("0.00")),
        ref=ref,
        category_ref=category_ref,
    )


def build_option_group(data) -> OptionGroup:
    choices = tuple(
        build_choice(choice)
        for choice in (data.get("choices") or [])
        if (choice.get("name") or "").strip()
    )
    mode = SELECTION_MODE_ALIASES.get((data.get("type") or "").strip(), SelectionMode.SINGLE)
    is_multi = mode == SelectionMode.MULTI
    return OptionGroup(
        name=(data.get("name") or "").strip() or "Unnamed Option",
        source_kind=SOURCE_KIND_ALIASES.get(data.get("source_type") or "", SourceKind.COMPONENT),
        mode=mode,
        required=data.get("required", False),
        choices=choices,
        min_selection=data.get("min_selection") if is_multi else None,
        max_selection=data.get("max_selection") if is_multi else None,
        allow_per_choice_quantity=data.get("allow_per_choice_quantity", False),
    )


def parse_menu_items(payload) -> list:
    """
    Parse a list of catalog items, skipping (and logging) the invalid ones.

    Returns:
        List of MenuItem in catalog order.
    """
    items = []
    for raw in payload or []:
        serializer = MenuItemSerializer(data=raw)
        if not serializer.is_valid():
            logger.warning(f"Skipping invalid catalog item {raw.get('id') if isinstance(raw, dict) else raw!r}: {serializer.errors}")
            continue
        items.append(serializer.save())
    return items
