from dataclasses import replace
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from cart.services import CartService
from payments.client import OrderApiClient
from payments.strategies import (
    CallbackResult,
    PaymentMethod,
    PaymentStrategyFactory,
    RedirectPaymentStrategy,
    SubmissionResult,
    available_payment_methods,
)

from ..checkout import FulfillmentMethod, OrderContext
from ..exceptions import OrderValidationError
from .payload_service import OrderPayloadService

logger = logging.getLogger(__name__)


class OrderSubmissionService:
    """
    Service for submitting a finished cart to the order backend.

    Validation happens before any network call. The order id is fixed
    before the document is built, so a customer-triggered retry resends
    the same document under the same id.
    """

    def __init__(self, client: Optional[OrderApiClient] = None):
        self.client = client or OrderApiClient()

    @staticmethod
    def validate(cart: CartService, context: OrderContext) -> None:
        """
        Check that a checkout carries everything the backend needs.

        Raises:
            OrderValidationError: Listing every problem found
        """
        errors: List[str] = []

        if not context.store_ref:
            errors.append("Missing store reference")
        if not context.payment_method:
            errors.append("Missing payment method")
        elif context.payment_method not in PaymentMethod.values:
            errors.append(f"Unknown payment method: {context.payment_method}")
        if context.fulfillment_method not in FulfillmentMethod.values:
            errors.append(f"Unknown fulfillment method: {context.fulfillment_method}")
        if cart.is_empty():
            errors.append("Cart is empty")
        elif cart.total() <= Decimal("0.00"):
            errors.append("Order total must be greater than zero")
        if not context.customer.full_name:
            errors.append("Missing customer name")
        if not context.customer.email:
            errors.append("Missing customer email")

        if errors:
            logger.warning(f"Checkout validation failed: {errors}")
            raise OrderValidationError(errors)

    def next_order_id(self) -> int:
        return self.client.fetch_next_order_id()

    def submit(
        self,
        cart: CartService,
        context: OrderContext,
        expected_total: Optional[Decimal] = None,
    ) -> SubmissionResult:
        """
        Validate, normalize and submit one order.

        Args:
            cart: The finished cart
            context: Store, customer and payment data
            expected_total: The total the customer was shown. Defaults to the
                            cart's own running total.

        Raises:
            OrderValidationError: Missing data or a cart/line total mismatch
            BackendUnavailableError: The backend could not be reached
            OrderRejectedError: The backend refused the order
        """
        self.validate(cart, context)

        if not context.order_id:
            context = replace(context, order_id=self.next_order_id())

        if expected_total is None:
            expected_total = cart.total()

        document = OrderPayloadService.build_order_document(
            cart.lines, context, cart_total=expected_total
        )
        strategy = PaymentStrategyFactory.get_strategy(context.payment_method)
        result = strategy.process(self.client, document)

        logger.info(
            f"Order {result.order_id} submitted for store {context.store_ref} "
            f"({len(cart)} line(s), {context.payment_method})"
        )
        return result

    def resume_card_payment(self, callback_data: Dict[str, Any]) -> CallbackResult:
        """
        Hand a card gateway callback to the backend and report the order status.

        Raises:
            BackendUnavailableError: The backend could not be reached
            OrderRejectedError: The backend refused the callback
        """
        strategy = RedirectPaymentStrategy(PaymentMethod.CREDIT_CARD)
        return strategy.resume(self.client, callback_data)

    @staticmethod
    def payment_methods() -> List[Dict[str, str]]:
        return available_payment_methods()
