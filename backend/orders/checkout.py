"""
Checkout context: everything about an order that is not a cart line.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db import models
from django.utils.translation import gettext_lazy as _

from payments.money import DEFAULT_CURRENCY


class FulfillmentMethod(models.TextChoices):
    EAT_IN = "eatin", _("Eat In")
    PICKUP = "pickup", _("Pickup")
    DELIVERY = "delivery", _("Delivery")


@dataclass(frozen=True)
class Customer:
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    message: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class OrderContext:
    order_id: int
    store_ref: str
    kiosk_id: str
    payment_method: str
    fulfillment_method: FulfillmentMethod = FulfillmentMethod.EAT_IN
    customer: Customer = field(default_factory=Customer)
    store_name: str = ""
    special_instructions: str = ""
    currency: str = DEFAULT_CURRENCY
    delivery_fee: Decimal = Decimal("0.00")
    created_at: Optional[datetime] = None
