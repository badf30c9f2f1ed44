"""Checkout and reconciliation errors.

Every error carries a short ``reference`` so that a customer quoting it to
support can be matched to the audit log entry. ``user_message`` is what the
HTTP layer shows; for payment and consistency failures it is deliberately
generic.
"""

from uuid import uuid4

from protean.exceptions import ValidationError


def new_reference() -> str:
    return uuid4().hex[:12]


SUPPORT_MESSAGE = "We could not complete your order. Please contact support and quote reference {reference}."


class CheckoutError(Exception):
    """Base class for failures of the cart → order flow."""

    user_message = "Checkout failed"

    def __init__(self, message: str | None = None) -> None:
        self.reference = new_reference()
        self.message = message or self.user_message
        super().__init__(self.message)

    @property
    def support_message(self) -> str:
        return SUPPORT_MESSAGE.format(reference=self.reference)


class InvalidCartError(CheckoutError):
    user_message = "Your cart has no items that can be ordered. Please review your cart and try again."


class AddressRequiredError(CheckoutError):
    user_message = "Please select a delivery address before placing your order."


class PaymentVerificationError(CheckoutError):
    """The gateway callback could not be proven authentic."""

    user_message = "Payment verification failed"

    def __init__(self, message: str | None = None, gateway_order_id: str = "", gateway_payment_id: str = "") -> None:
        super().__init__(message)
        self.gateway_order_id = gateway_order_id
        self.gateway_payment_id = gateway_payment_id


class PaymentMismatchError(CheckoutError):
    """The verified amount differs from what the order requires by more than a cent."""

    user_message = "Payment amount mismatch"

    def __init__(self, expected, received, gateway_payment_id: str = "") -> None:
        self.expected = expected
        self.received = received
        self.gateway_payment_id = gateway_payment_id
        super().__init__(f"Expected payment of {expected}, gateway reported {received}")


class ReconciliationError(CheckoutError):
    """An order's monetary fields violate an invariant."""

    user_message = "Order totals are inconsistent"

    def __init__(self, order_id, field: str, detail: str) -> None:
        self.order_id = str(order_id) if order_id is not None else None
        self.field = field
        self.detail = detail
        super().__init__(f"Order {self.order_id}: {field}: {detail}")


class InvalidTransitionError(ValidationError):
    """A status change the order state machine does not allow."""

    def __init__(self, current: str, target: str, reason: str | None = None) -> None:
        self.current = current
        self.target = target
        message = reason or f"Cannot transition from {current} to {target}"
        super().__init__({"status": [message]})
