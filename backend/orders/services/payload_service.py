"""
Order payload normalizer: cart lines -> canonical order document.

The document is the nested JSON the order backend consumes. All amounts are
integer minor units computed as unit price x effective quantity, so the sum
of the emitted totals always matches the cart to the cent.

Each selected choice is flattened according to the source kind of its option
group:
- component -> cart item "components" (with extra = 0)
- category  -> cart item "categoryEntries", one entry per choice, tagged with
               the originating group as category_ref/category_title
- addon     -> cart item "addons"
Nested quantities are multiplied by the parent line quantity.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from django.utils import timezone

from cart.lines import CartLine, SelectedChoice
from payments.money import money_field, price_field, to_minor, validate_minor_sum
from products.catalog import SourceKind

from ..checkout import FulfillmentMethod, OrderContext
from ..exceptions import OrderTotalMismatchError

logger = logging.getLogger(__name__)

ORDER_STATE_CREATED = "CREATED"


def _choice_ref(choice: SelectedChoice):
    return choice.ref if choice.ref is not None else choice.name


def _component_entry(choice: SelectedChoice, line_quantity: int, currency: str) -> Dict[str, Any]:
    quantity = choice.quantity * line_quantity
    return {
        "ref": _choice_ref(choice),
        "title": choice.name,
        "extra": 0,
        "quantity": quantity,
        "price": price_field(currency, to_minor(currency, choice.unit_price), quantity),
    }


def _category_entry(choice: SelectedChoice, line_quantity: int, currency: str) -> Dict[str, Any]:
    quantity = choice.quantity * line_quantity
    return {
        "ref": str(_choice_ref(choice)),
        "title": choice.name,
        "category_ref": str(choice.category_ref) if choice.category_ref is not None else "",
        "category_title": choice.category_title or "",
        "quantity": quantity,
        "price": price_field(currency, to_minor(currency, choice.unit_price), quantity),
    }


def _addon_entry(choice: SelectedChoice, line_quantity: int, currency: str) -> Dict[str, Any]:
    quantity = choice.quantity * line_quantity
    return {
        "ref": _choice_ref(choice),
        "title": choice.name,
        "quantity": quantity,
        "price": price_field(currency, to_minor(currency, choice.unit_price), quantity),
    }


# Source kind -> (cart item key, entry builder)
FLATTENERS = {
    SourceKind.COMPONENT: ("components", _component_entry),
    SourceKind.CATEGORY: ("categoryEntries", _category_entry),
    SourceKind.ADDON: ("addons", _addon_entry),
}


class OrderPayloadService:
    """Pure transforms from cart lines to the order backend's wire format."""

    @staticmethod
    def build_cart_item(line: CartLine, currency: str) -> Dict[str, Any]:
        item = {
            "ref": line.menu_item_id,
            "title": line.name,
            "special_instructions": (line.special_instructions or "").strip(),
            # The backend expects the line quantity as a string
            "quantity": str(line.quantity),
            "price": price_field(currency, to_minor(currency, line.base_price), line.quantity),
            "components": [],
            "categoryEntries": [],
            "addons": [],
        }
        for group in line.selections:
            key, build_entry = FLATTENERS[SourceKind(group.source_kind)]
            item[key].extend(
                build_entry(choice, line.quantity, currency)
                for choice in group.choices
                if choice.quantity > 0
            )
        return item

    @staticmethod
    def item_total_minor(item: Dict[str, Any]) -> int:
        """Sum of a cart item's own total and every nested entry total."""
        total = item["price"]["total_price"]["amount"]
        for key, _ in FLATTENERS.values():
            total += sum(entry["price"]["total_price"]["amount"] for entry in item[key])
        return total

    @staticmethod
    def build_order_document(
        lines: Iterable[CartLine],
        context: OrderContext,
        cart_total: Optional[Decimal] = None,
    ) -> Dict[str, Any]:
        """
        Build the full order document.

        Args:
            lines: Cart lines in cart order
            context: Store, kiosk, customer and fulfillment data
            cart_total: The cart's running total. When given, it must match the
                        sum of the normalized line items to the cent.

        Raises:
            OrderTotalMismatchError: If cart_total disagrees with the line items
        """
        currency = context.currency
        items = [OrderPayloadService.build_cart_item(line, currency) for line in lines]
        item_totals = [OrderPayloadService.item_total_minor(item) for item in items]
        total_minor = sum(item_totals)

        if cart_total is not None:
            expected_minor = to_minor(currency, cart_total)
            try:
                validate_minor_sum(item_totals, expected_minor, context=f"for order {context.order_id}")
            except ValueError as exc:
                logger.error(str(exc))
                raise OrderTotalMismatchError(expected_minor, total_minor, currency) from exc

        fulfillment = FulfillmentMethod(context.fulfillment_method)
        delivery_fee_minor = (
            to_minor(currency, context.delivery_fee) if fulfillment == FulfillmentMethod.DELIVERY else 0
        )
        created_at = context.created_at or timezone.now()
        customer = context.customer
        special_instructions = (context.special_instructions or "").strip()

        return {
            "id": context.order_id,
            "current_state": ORDER_STATE_CREATED,
            "created_at": created_at.isoformat(),
            "store": {
                "ref": context.store_ref,
                "name": context.store_name or context.store_ref,
            },
            "kiosk_id": context.kiosk_id,
            "eater": {
                "id": "",
                "first_name": customer.first_name,
                "last_name": customer.last_name,
                "phone_number": customer.phone or None,
                "postal_code": None,
                "city": "",
                "extra_address_info": None,
                "email_address": customer.email or None,
                "street": None,
                "house_number": None,
                "message": customer.message or "",
            },
            "cart": {
                "items": items,
                "additional_options": None,
                "points_redeemed": "0",
                "loyalty_discount": "0",
                "special_instructions": special_instructions,
                "additional_address_information": None,
            },
            "payment": {
                "charges": {
                    "total": money_field(currency, total_minor),
                    "tax": {
                        "amount": None,
                        "currency_code": currency,
                        "formatted_amount": None,
                    },
                    "delivery_fee": {
                        "amount": delivery_fee_minor,
                        "currency_code": currency,
                        "formatted_amount": None,
                    },
                },
                "payment_type": context.payment_method,
            },
            "requested_order_time": {
                "delivery_method": fulfillment.value,
                "order_time": None,
                "day": None,
                "time_of_day": None,
            },
            "type": fulfillment.value,
            "table_name": None,
            "delivery_location": {
                "postal_code": None,
                "city": "",
                "extra_address_info": None,
                "street": None,
                "house_number": None,
            },
            "special_instructions": special_instructions,
        }

    @staticmethod
    def document_total_minor(document: Dict[str, Any]) -> int:
        return document["payment"]["charges"]["total"]["amount"]
