"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing (PAYMENT_GATEWAY=fake, default)
- RazorpayGateway for production (PAYMENT_GATEWAY=razorpay)
"""

import os

from payments.gateway.fake_adapter import DEFAULT_FAKE_SECRET, FakeGateway
from payments.gateway.port import DEFAULT_TIMEOUT_SECONDS, PaymentGateway
from payments.gateway.razorpay_adapter import DEFAULT_BASE_URL, RazorpayGateway

_current_gateway: PaymentGateway | None = None


def _build_gateway() -> PaymentGateway:
    adapter = os.environ.get("PAYMENT_GATEWAY", "fake").lower()
    if adapter == "razorpay":
        return RazorpayGateway(
            key_id=os.environ.get("RAZORPAY_KEY_ID", ""),
            key_secret=os.environ.get("RAZORPAY_KEY_SECRET", ""),
            base_url=os.environ.get("RAZORPAY_BASE_URL", DEFAULT_BASE_URL),
            timeout=float(os.environ.get("PAYMENT_GATEWAY_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)),
        )
    return FakeGateway(shared_secret=os.environ.get("FAKE_GATEWAY_SECRET", DEFAULT_FAKE_SECRET))


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, built from the environment on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
