from django.urls import path

from .views import CreditCardCallbackView, NextOrderIdView, PaymentMethodsView, SubmitOrderView

app_name = "orders"

urlpatterns = [
    path("submit/", SubmitOrderView.as_view(), name="submit"),
    path("next-order-id/", NextOrderIdView.as_view(), name="next-order-id"),
    path("credit-card-callback/", CreditCardCallbackView.as_view(), name="credit-card-callback"),
    path("payment-methods/", PaymentMethodsView.as_view(), name="payment-methods"),
]
