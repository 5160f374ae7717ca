from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from cart.lines import CartLine, SelectedChoice, SelectedGroup, generate_line_id
from cart.services import CartService
from payments.strategies import PaymentMethod
from products.catalog import SourceKind
from products.serializers import RefField, catalog_price

from ..checkout import Customer, FulfillmentMethod, OrderContext


class SelectedChoiceSerializer(serializers.Serializer):
    name = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    unit_price = serializers.DecimalField(max_digits=None, decimal_places=None, min_value=0)
    ref = RefField(required=False, allow_null=True)
    category_ref = RefField(required=False, allow_null=True)
    category_title = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class SelectedGroupSerializer(serializers.Serializer):
    name = serializers.CharField()
    source_kind = serializers.ChoiceField(choices=SourceKind.choices, default=SourceKind.COMPONENT)
    choices = SelectedChoiceSerializer(many=True)


class CartLineSerializer(serializers.Serializer):
    """
    A finalized cart line as the kiosk front end holds it.

    The final unit price is always recomputed from the base price and the
    selections, never taken from the client. Prices are rounded to cents
    before the recomputation.
    """

    id = serializers.CharField(required=False, allow_blank=True)
    menu_item_id = serializers.IntegerField()
    name = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1)
    base_price = serializers.DecimalField(max_digits=None, decimal_places=None, min_value=0)
    special_instructions = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    selections = SelectedGroupSerializer(many=True, required=False, default=list)


class CustomerSerializer(serializers.Serializer):
    first_name = serializers.CharField(required=False, allow_blank=True, default="")
    last_name = serializers.CharField(required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    message = serializers.CharField(required=False, allow_blank=True, default="")


class CheckoutRequestSerializer(serializers.Serializer):
    """
    Checkout request posted by the kiosk front end.

    Usage:
        serializer = CheckoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart, context = serializer.save()
    """

    order_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    store_ref = serializers.CharField(required=False, allow_blank=True, default="")
    store_name = serializers.CharField(required=False, allow_blank=True, default="")
    kiosk_id = serializers.CharField(required=False, allow_blank=True, default="")
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    fulfillment_method = serializers.ChoiceField(
        choices=FulfillmentMethod.choices, default=FulfillmentMethod.EAT_IN
    )
    delivery_fee = serializers.DecimalField(
        max_digits=None, decimal_places=None, min_value=0, default=Decimal("0.00")
    )
    special_instructions = serializers.CharField(required=False, allow_blank=True, default="")
    customer = CustomerSerializer(required=False)
    total_price = serializers.DecimalField(
        max_digits=None, decimal_places=None, min_value=0, required=False, allow_null=True
    )
    lines = CartLineSerializer(many=True, allow_empty=True)

    def create(self, validated_data):
        cart = CartService(build_cart_line(line) for line in validated_data["lines"])
        customer = validated_data.get("customer") or {}
        context = OrderContext(
            order_id=validated_data.get("order_id") or 0,
            store_ref=validated_data["store_ref"].strip(),
            store_name=validated_data["store_name"].strip(),
            kiosk_id=validated_data["kiosk_id"].strip()
            or getattr(settings, "KIOSK_DEFAULT_ID", "kiosk_default"),
            payment_method=validated_data["payment_method"],
            fulfillment_method=FulfillmentMethod(validated_data["fulfillment_method"]),
            customer=Customer(
                first_name=customer.get("first_name", "").strip(),
                last_name=customer.get("last_name", "").strip(),
                email=customer.get("email") or None,
                phone=customer.get("phone") or None,
                message=customer.get("message", ""),
            ),
            special_instructions=validated_data["special_instructions"],
            currency=getattr(settings, "KIOSK_CURRENCY", "EUR"),
            delivery_fee=validated_data["delivery_fee"],
        )
        return cart, context


class CardCallbackSerializer(serializers.Serializer):
    """
    Callback posted by the card gateway once the customer has paid.

    Only the identifying fields are checked; the whole payload is forwarded
    to the order backend as received.
    """

    transactionId = serializers.CharField()
    status = serializers.CharField()
    orderCode = serializers.CharField(required=False, allow_blank=True, allow_null=True)


def build_cart_line(data) -> CartLine:
    selections = tuple(
        SelectedGroup(
            name=group["name"],
            source_kind=SourceKind(group["source_kind"]),
            choices=tuple(
                SelectedChoice(
                    name=choice["name"],
                    quantity=choice["quantity"],
                    unit_price=catalog_price(choice["unit_price"]),
                    ref=choice.get("ref"),
                    category_ref=choice.get("category_ref"),
                    category_title=choice.get("category_title"),
                )
                for choice in group["choices"]
            ),
        )
        for group in data.get("selections") or []
        if group["choices"]
    )
    base_price = catalog_price(data["base_price"])
    final_unit_price = base_price + sum(
        (group.additional_price for group in selections), Decimal("0.00")
    )
    return CartLine(
        id=data.get("id") or generate_line_id(data["menu_item_id"]),
        menu_item_id=data["menu_item_id"],
        name=data["name"],
        quantity=data["quantity"],
        base_price=base_price,
        final_unit_price=final_unit_price,
        selections=selections,
        special_instructions=data.get("special_instructions") or None,
    )
