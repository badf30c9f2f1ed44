"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
This enables swapping between FakeGateway (dev/test) and RazorpayGateway
(production) without changing any ordering code.

Amounts cross this boundary in major units (rupees) as ``Decimal`` and are
converted to the gateway's minor units (paise) here, so adapters never
deal with floating-point money.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError

SUPPORTED_CURRENCIES = {"INR"}
MIN_INTENT_MINOR_UNITS = 100
DEFAULT_TIMEOUT_SECONDS = 10.0


class GatewayError(Exception):
    """The gateway rejected a request or returned something unusable."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class GatewayUnavailableError(GatewayError):
    """Transport failure, timeout, or 5xx from the gateway."""


def to_minor_units(amount) -> int:
    """Convert a major-unit amount (e.g. 1020.00) to minor units (102000)."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor_units: int) -> Decimal:
    return (Decimal(minor_units) / 100).quantize(Decimal("0.01"))


def validate_intent_request(amount, currency: str) -> int:
    """Validate an intent request and return the amount in minor units."""
    errors = {}
    if currency not in SUPPORTED_CURRENCIES:
        errors["currency"] = [f"Unsupported currency {currency}"]

    minor_units = to_minor_units(amount)
    if minor_units <= 0:
        errors["amount"] = ["Amount must be positive"]
    elif minor_units < MIN_INTENT_MINOR_UNITS:
        errors["amount"] = [f"Amount must be at least {MIN_INTENT_MINOR_UNITS} minor units"]

    if errors:
        raise ValidationError(errors)
    return minor_units


@dataclass(frozen=True)
class PaymentIntent:
    """A gateway-side order the client pays against. Never persisted."""

    gateway_order_id: str
    amount_minor_units: int
    currency: str
    created_at: datetime

    @property
    def amount(self) -> Decimal:
        return from_minor_units(self.amount_minor_units)


@dataclass(frozen=True)
class VerifiedPayment:
    """What the gateway reports it actually captured for a payment."""

    gateway_order_id: str
    gateway_payment_id: str
    amount_minor_units: int
    currency: str
    status: str

    @property
    def amount(self) -> Decimal:
        return from_minor_units(self.amount_minor_units)

    @property
    def is_settled(self) -> bool:
        return self.status in ("captured", "authorized")


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_intent(self, amount, currency: str) -> PaymentIntent:
        """Register an intent to collect ``amount`` (major units) with the gateway."""
        ...

    @abstractmethod
    def fetch_payment(self, gateway_order_id: str, gateway_payment_id: str) -> VerifiedPayment | None:
        """Return the captured payment, or None when the gateway does not know it."""
        ...

    @abstractmethod
    def verify_callback(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        """Verify that a checkout callback is authentically from the gateway."""
        ...

    @abstractmethod
    def health(self) -> dict:
        """Report whether the adapter is configured to talk to its gateway."""
        ...
