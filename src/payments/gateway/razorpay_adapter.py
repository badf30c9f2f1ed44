"""Razorpay payment gateway adapter (production).

Talks to the Razorpay REST API with ``httpx``:
- ``POST /orders`` registers a payment intent (a Razorpay "order")
- ``GET /payments/{id}`` reads back what was actually captured

Callback signatures are checked locally with the key secret; Razorpay signs
``"{razorpay_order_id}|{razorpay_payment_id}"`` with HMAC-SHA256.

Transport errors, timeouts and 5xx responses surface as
``GatewayUnavailableError``; other non-2xx responses as ``GatewayError``.
"""

from datetime import UTC, datetime

import httpx
import structlog

from payments.gateway.port import (
    DEFAULT_TIMEOUT_SECONDS,
    GatewayError,
    GatewayUnavailableError,
    PaymentGateway,
    PaymentIntent,
    VerifiedPayment,
    validate_intent_request,
)
from payments.gateway.signature import verify_callback

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.razorpay.com/v1"


class RazorpayGateway(PaymentGateway):
    """Production Razorpay adapter."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            auth=(self.key_id, self.key_secret),
            timeout=self.timeout,
            transport=self._transport,
        )

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            with self._client() as client:
                response = client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("Gateway request timed out", path=path, timeout=self.timeout)
            raise GatewayUnavailableError(f"Gateway timed out after {self.timeout}s") from exc
        except httpx.RequestError as exc:
            logger.warning("Gateway transport error", path=path, error=str(exc))
            raise GatewayUnavailableError(f"Gateway unreachable: {exc}") from exc

        if response.status_code >= 500:
            logger.warning("Gateway server error", path=path, status_code=response.status_code)
            raise GatewayUnavailableError(
                f"Gateway returned {response.status_code}",
                status_code=response.status_code,
            )
        return response

    def create_intent(self, amount, currency: str) -> PaymentIntent:
        minor_units = validate_intent_request(amount, currency)
        response = self._send("POST", "/orders", json={"amount": minor_units, "currency": currency})
        if response.status_code != 200:
            raise GatewayError(
                f"Gateway rejected intent: {response.text}",
                status_code=response.status_code,
            )

        body = response.json()
        created_at = body.get("created_at")
        return PaymentIntent(
            gateway_order_id=body["id"],
            amount_minor_units=int(body["amount"]),
            currency=body.get("currency", currency),
            created_at=datetime.fromtimestamp(created_at, UTC) if created_at else datetime.now(UTC),
        )

    def fetch_payment(self, gateway_order_id: str, gateway_payment_id: str) -> VerifiedPayment | None:
        response = self._send("GET", f"/payments/{gateway_payment_id}")
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise GatewayError(
                f"Gateway rejected payment lookup: {response.text}",
                status_code=response.status_code,
            )

        body = response.json()
        return VerifiedPayment(
            gateway_order_id=body.get("order_id") or "",
            gateway_payment_id=body["id"],
            amount_minor_units=int(body["amount"]),
            currency=body.get("currency", ""),
            status=body.get("status", ""),
        )

    def verify_callback(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        return verify_callback(gateway_order_id, gateway_payment_id, signature, self.key_secret)

    def health(self) -> dict:
        return {
            "gateway": "razorpay",
            "configured": bool(self.key_id and self.key_secret),
            "base_url": self.base_url,
        }
