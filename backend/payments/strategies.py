from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from django.db import models
from django.utils.translation import gettext_lazy as _

from .client import INIT_PAYMENT_ENDPOINT, PROCESS_PAYMENT_ENDPOINT, OrderApiClient
import logging

logger = logging.getLogger(__name__)


class PaymentMethod(models.TextChoices):
    CASH = "cash", _("Cash")
    BANCONTACT = "bancontact", _("Bancontact")
    CREDIT_CARD = "credit_card", _("Credit Card")
    VIVAWALLET = "vivawallet", _("Viva Wallet")
    CCV = "ccv", _("CCV")
    COUNTER = "counter", _("Counter Payment")


@dataclass(frozen=True)
class SubmissionResult:
    """Interpreted response of the order backend for one submission."""

    order_id: int
    status: str
    paid: bool = False
    message: str = ""
    requires_redirect: bool = False
    redirect_url: Optional[str] = None
    order_code: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        data = {
            "success": True,
            "orderId": self.order_id,
            "status": self.status,
            "paid": self.paid,
            "message": self.message,
        }
        if self.requires_redirect:
            data.update(
                {
                    "requiresRedirect": True,
                    "redirectUrl": self.redirect_url,
                    "orderCode": self.order_code,
                }
            )
        return data


@dataclass(frozen=True)
class CallbackResult:
    """Order state reported back after a card gateway callback."""

    order_status: Optional[str]
    message: str = ""

    def as_dict(self) -> Dict[str, Any]:
        return {"success": True, "message": self.message, "orderStatus": self.order_status}


def available_payment_methods() -> List[Dict[str, str]]:
    """Payment methods the kiosk can offer, as `{id, name}` pairs."""
    return [{"id": value, "name": str(label)} for value, label in PaymentMethod.choices]


class PaymentStrategy(ABC):
    """
    The Abstract Base Class for a payment strategy.
    Decides where an order document goes and how the backend's answer is read.
    """

    endpoint = PROCESS_PAYMENT_ENDPOINT
    default_status = "Processing"
    default_message = "Order created successfully. Payment pending."

    def __init__(self, method: str):
        self.method = method

    @abstractmethod
    def process(self, client: OrderApiClient, document: Dict[str, Any]) -> SubmissionResult:
        """
        Submit the order document and interpret the backend response.
        Must be implemented by all concrete strategies.
        """
        pass

    def _submit(self, client: OrderApiClient, document: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Submitting order {document['id']} via {self.method} to {self.endpoint}")
        return client.submit_order(self.endpoint, document)

    def _result_from_body(self, body: Dict[str, Any], fallback_order_id: int) -> SubmissionResult:
        return SubmissionResult(
            order_id=body.get("orderId") or fallback_order_id,
            status=body.get("status") or self.default_status,
            paid=bool(body.get("paid", False)),
            message=body.get("message") or self.default_message,
        )


class LocalPaymentStrategy(PaymentStrategy):
    """
    Payment settled at the kiosk itself (cash slot, Bancontact or a local
    card terminal). The order backend records the order and payment status.
    """

    def process(self, client: OrderApiClient, document: Dict[str, Any]) -> SubmissionResult:
        body = self._submit(client, document)
        result = self._result_from_body(body, document["id"])
        logger.info(f"Order {result.order_id} processed: {result.status} (paid={result.paid})")
        return result


class CounterPaymentStrategy(LocalPaymentStrategy):
    """The customer pays at the counter; the order is created unpaid."""

    default_status = "Awaiting Counter Payment"
    default_message = "Please pay at the counter."


class RedirectPaymentStrategy(PaymentStrategy):
    """
    Online card payment. The backend opens a payment session and the kiosk
    sends the customer to the returned URL.
    """

    endpoint = INIT_PAYMENT_ENDPOINT
    default_status = "Pending Payment"
    default_message = "Proceed to payment gateway"

    def process(self, client: OrderApiClient, document: Dict[str, Any]) -> SubmissionResult:
        body = self._submit(client, document)
        if not body.get("requiresRedirect"):
            # Some gateways settle immediately and answer like a local payment
            return self._result_from_body(body, document["id"])

        result = SubmissionResult(
            order_id=body.get("orderId") or document["id"],
            status=body.get("status") or self.default_status,
            paid=False,
            message=body.get("message") or self.default_message,
            requires_redirect=True,
            redirect_url=body.get("redirectUrl"),
            order_code=body.get("orderCode"),
        )
        logger.info(f"Order {result.order_id} awaiting redirect payment ({result.order_code})")
        return result

    def resume(self, client: OrderApiClient, callback_data: Dict[str, Any]) -> CallbackResult:
        """
        Resume a redirected order once the gateway calls back.

        The order was already sent during `process`; only the callback goes
        to the backend here.
        """
        body = client.submit_callback(callback_data)
        result = CallbackResult(order_status=body.get("orderStatus"), message=body.get("message") or "")
        logger.info(f"Card callback {callback_data.get('transactionId')} processed: {result.order_status}")
        return result


class PaymentStrategyFactory:
    """
    A factory for creating payment strategy instances.
    """

    @staticmethod
    def get_strategy(method: str) -> PaymentStrategy:
        """
        Returns an instance of the appropriate payment strategy based on the
        payment method string.
        """
        if method in (
            PaymentMethod.CASH,
            PaymentMethod.BANCONTACT,
            PaymentMethod.VIVAWALLET,
            PaymentMethod.CCV,
        ):
            return LocalPaymentStrategy(method)
        elif method == PaymentMethod.COUNTER:
            return CounterPaymentStrategy(method)
        elif method == PaymentMethod.CREDIT_CARD:
            return RedirectPaymentStrategy(method)
        else:
            raise ValueError(f"Unknown payment method: {method}")
