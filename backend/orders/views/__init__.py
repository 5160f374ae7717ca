"""
Orders views package.
"""

from .checkout_views import (
    CreditCardCallbackView,
    NextOrderIdView,
    PaymentMethodsView,
    SubmitOrderView,
)

__all__ = [
    'SubmitOrderView',
    'NextOrderIdView',
    'CreditCardCallbackView',
    'PaymentMethodsView',
]
