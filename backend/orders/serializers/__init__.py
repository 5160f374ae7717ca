"""
Orders serializers package.
"""

# Checkout request serializers
from .checkout_serializers import (
    SelectedChoiceSerializer,
    SelectedGroupSerializer,
    CartLineSerializer,
    CustomerSerializer,
    CheckoutRequestSerializer,
    CardCallbackSerializer,
    build_cart_line,
)

__all__ = [
    'SelectedChoiceSerializer',
    'SelectedGroupSerializer',
    'CartLineSerializer',
    'CustomerSerializer',
    'CheckoutRequestSerializer',
    'CardCallbackSerializer',
    'build_cart_line',
]
