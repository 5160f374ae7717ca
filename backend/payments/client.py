import logging
import time
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from orders.exceptions import BackendUnavailableError, OrderRejectedError

logger = logging.getLogger(__name__)

PROCESS_PAYMENT_ENDPOINT = "/api/kiosk/payment/process"
INIT_PAYMENT_ENDPOINT = "/api/kiosk/payment/init"
NEXT_ORDER_ID_ENDPOINT = "/api/kiosk/payment/next-order-id"
CREDIT_CARD_CALLBACK_ENDPOINT = "/api/kiosk/payment/credit-card-callback"


class OrderApiClient:
    """
    Client for the external order-processing backend.

    Every call is a single bounded attempt: no automatic retries. Callers
    surface failures to the customer, who can trigger the same submission
    again.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or getattr(settings, "ORDER_API_BASE_URL", "http://localhost:8000")).rstrip("/")
        self.timeout = timeout or getattr(settings, "ORDER_API_TIMEOUT_SECONDS", 15)

    def _get_headers(self, idempotency_key: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        return headers

    def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Dict[str, Any] = None,
        idempotency_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Make one request to the order backend and return the decoded JSON body.

        Raises:
            BackendUnavailableError: Connection failure or timeout
            OrderRejectedError: Non-2xx response (error/details taken from the body)
        """
        url = f"{self.base_url}{endpoint}"

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=self._get_headers(idempotency_key),
                json=data,
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.error(f"Order backend unavailable: {method} {url} - {e}")
            raise BackendUnavailableError("Order backend is unavailable", details=str(e)) from e
        except requests.RequestException as e:
            logger.error(f"Order backend request failed: {method} {url} - {e}")
            raise BackendUnavailableError(f"Order backend request failed: {e}") from e

        body = self._decode(response)

        if not response.ok:
            logger.error(f"Order backend rejected {method} {url}: {response.status_code} {body}")
            raise OrderRejectedError(
                body.get("error") or f"Order backend returned HTTP {response.status_code}",
                details=body.get("details"),
                status_code=response.status_code,
            )

        return body

    @staticmethod
    def _decode(response) -> Dict[str, Any]:
        if response.status_code == 204 or not response.content:
            return {}
        try:
            body = response.json()
        except ValueError:
            return {"error": response.text[:500]} if not response.ok else {}
        return body if isinstance(body, dict) else {}

    def submit_order(self, endpoint: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """POST an order document; the order id doubles as the idempotency key."""
        return self._make_request("POST", endpoint, document, idempotency_key=str(document.get("id", "")))

    def fetch_next_order_id(self) -> int:
        """
        Ask the backend for the next order id.

        Falls back to the current Unix timestamp when the backend is
        unreachable or answers without an id, so checkout never blocks on it.
        """
        try:
            body = self._make_request("GET", NEXT_ORDER_ID_ENDPOINT)
            next_id = body.get("nextOrderId")
            if next_id:
                return int(next_id)
        except (BackendUnavailableError, OrderRejectedError, TypeError, ValueError) as e:
            logger.debug(f"Next order id unavailable, using timestamp fallback: {e}")
        return int(time.time())

    def submit_callback(self, callback_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Forward a card gateway callback so the backend can settle the order.

        The payload is passed through untouched; the backend answers with
        `{message, orderStatus}`.
        """
        logger.info(
            f"Forwarding card callback: transaction {callback_data.get('transactionId')} "
            f"status {callback_data.get('status')}"
        )
        return self._make_request("POST", CREDIT_CARD_CALLBACK_ENDPOINT, callback_data)
