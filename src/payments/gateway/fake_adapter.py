"""Configurable fake payment gateway for development and testing.

This adapter simulates a Razorpay-style gateway without any external calls.
It keeps intents and captured payments in memory and can simulate an outage,
making it useful for:
- Manual API testing of the checkout flow
- Automated tests with predictable outcomes
- Development without real gateway credentials

``complete_payment()`` plays the part of the customer's browser: it captures
a payment against an intent and returns the signed callback ids.
"""

from datetime import UTC, datetime
from uuid import uuid4

from payments.gateway.port import (
    GatewayUnavailableError,
    PaymentGateway,
    PaymentIntent,
    VerifiedPayment,
    validate_intent_request,
)
from payments.gateway.signature import sign_callback, verify_callback

DEFAULT_FAKE_SECRET = "fake-secret"


class FakeGateway(PaymentGateway):
    """Configurable in-memory payment gateway."""

    def __init__(self, shared_secret: str = DEFAULT_FAKE_SECRET) -> None:
        self.shared_secret = shared_secret
        self.available: bool = True
        self.intents: dict[str, PaymentIntent] = {}
        self.payments: dict[str, VerifiedPayment] = {}
        self.calls: list[dict] = []

    def configure(self, available: bool = True) -> None:
        """Toggle a simulated gateway outage."""
        self.available = available

    def _ensure_available(self) -> None:
        if not self.available:
            raise GatewayUnavailableError("Fake gateway is configured as unavailable", status_code=503)

    def create_intent(self, amount, currency: str) -> PaymentIntent:
        self.calls.append({"method": "create_intent", "amount": amount, "currency": currency})
        minor_units = validate_intent_request(amount, currency)
        self._ensure_available()

        intent = PaymentIntent(
            gateway_order_id=f"order_fake_{uuid4().hex[:14]}",
            amount_minor_units=minor_units,
            currency=currency,
            created_at=datetime.now(UTC),
        )
        self.intents[intent.gateway_order_id] = intent
        return intent

    def complete_payment(self, gateway_order_id: str, amount_minor_units: int | None = None) -> tuple[str, str]:
        """Capture a payment against an intent. Returns ``(payment_id, signature)``.

        Passing ``amount_minor_units`` captures a different amount than the
        intent asked for, which is how tests provoke a payment mismatch.
        """
        intent = self.intents[gateway_order_id]
        payment_id = f"pay_fake_{uuid4().hex[:14]}"
        self.payments[payment_id] = VerifiedPayment(
            gateway_order_id=gateway_order_id,
            gateway_payment_id=payment_id,
            amount_minor_units=intent.amount_minor_units if amount_minor_units is None else amount_minor_units,
            currency=intent.currency,
            status="captured",
        )
        return payment_id, sign_callback(gateway_order_id, payment_id, self.shared_secret)

    def fetch_payment(self, gateway_order_id: str, gateway_payment_id: str) -> VerifiedPayment | None:
        self.calls.append(
            {
                "method": "fetch_payment",
                "gateway_order_id": gateway_order_id,
                "gateway_payment_id": gateway_payment_id,
            }
        )
        self._ensure_available()
        return self.payments.get(gateway_payment_id)

    def verify_callback(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        return verify_callback(gateway_order_id, gateway_payment_id, signature, self.shared_secret)

    def health(self) -> dict:
        return {"gateway": "fake", "configured": True, "available": self.available}
