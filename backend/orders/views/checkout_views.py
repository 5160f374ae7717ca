"""
Kiosk checkout views.

The kiosk front end posts its finished cart here; the views validate it,
hand it to OrderSubmissionService and translate failures into JSON the
front end can show. No failure is fatal: every error response leaves the
cart untouched so the customer can retry.
"""

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from rest_framework import status
import logging

from ..exceptions import (
    BackendUnavailableError,
    OrderRejectedError,
    OrderSubmissionError,
    OrderValidationError,
)
from ..serializers import CardCallbackSerializer, CheckoutRequestSerializer
from ..services import OrderSubmissionService

logger = logging.getLogger(__name__)


class BaseKioskView(APIView):
    """
    Base class for kiosk views with common functionality.
    """

    permission_classes = [AllowAny]

    def create_error_response(self, message, details=None, status_code=status.HTTP_400_BAD_REQUEST):
        """
        Creates a standardized error response.
        """
        data = {"success": False, "error": message}
        if details is not None:
            data["details"] = details
        return Response(data, status=status_code)

    def get_submission_service(self):
        return OrderSubmissionService()


class SubmitOrderView(BaseKioskView):
    """
    Submits a kiosk order to the order backend.

    Error mapping:
    - invalid request or checkout data -> 400
    - order backend unreachable -> 503
    - order backend rejected the order -> 502
    """

    def post(self, request, *args, **kwargs):
        serializer = CheckoutRequestSerializer(data=request.data)
        if not serializer.is_valid():
            logger.warning(f"[SubmitOrder] Invalid checkout request: {serializer.errors}")
            return self.create_error_response("Invalid checkout request", details=serializer.errors)

        cart, context = serializer.save()
        expected_total = serializer.validated_data.get("total_price")

        try:
            result = self.get_submission_service().submit(cart, context, expected_total=expected_total)
        except OrderValidationError as e:
            return self.create_error_response(e.message, details=e.errors)
        except BackendUnavailableError as e:
            return self.create_error_response(
                e.message, details=e.details, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        except OrderRejectedError as e:
            return self.create_error_response(
                e.message, details=e.details, status_code=status.HTTP_502_BAD_GATEWAY
            )
        except OrderSubmissionError as e:
            logger.error(f"[SubmitOrder] Submission failed: {e}")
            return self.create_error_response(
                e.message, details=e.details, status_code=status.HTTP_502_BAD_GATEWAY
            )

        return Response(result.as_dict(), status=status.HTTP_201_CREATED)


class NextOrderIdView(BaseKioskView):
    """Prefetches the next order id (falls back to a timestamp)."""

    def get(self, request, *args, **kwargs):
        return Response({"nextOrderId": self.get_submission_service().next_order_id()})


class CreditCardCallbackView(BaseKioskView):
    """
    Resumes a card order after the customer comes back from the gateway.

    Error mapping matches SubmitOrderView.
    """

    def post(self, request, *args, **kwargs):
        serializer = CardCallbackSerializer(data=request.data)
        if not serializer.is_valid():
            logger.warning(f"[CardCallback] Invalid callback: {serializer.errors}")
            return self.create_error_response("Invalid payment callback", details=serializer.errors)

        try:
            result = self.get_submission_service().resume_card_payment(dict(request.data))
        except BackendUnavailableError as e:
            return self.create_error_response(
                e.message, details=e.details, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        except OrderSubmissionError as e:
            logger.error(f"[CardCallback] Callback {serializer.validated_data['transactionId']} failed: {e}")
            return self.create_error_response(
                e.message, details=e.details, status_code=status.HTTP_502_BAD_GATEWAY
            )

        return Response(result.as_dict())


class PaymentMethodsView(BaseKioskView):
    """Lists the payment methods the kiosk accepts."""

    def get(self, request, *args, **kwargs):
        methods = OrderSubmissionService.payment_methods()
        return Response({"success": True, "methods": methods, "count": len(methods)})
