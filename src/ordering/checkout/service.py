"""Checkout service: coordinates cart pricing, the payment gateway and order placement.

Two steps, mirroring what the storefront client does:

1. ``create_checkout_intent`` prices the cart server-side and opens a gateway
   intent for the amount due now (grand total, or the COD advance).
2. ``verify_and_place_order`` runs when the client returns from the gateway
   with the callback ids and signature. The signature is checked first, then
   the dedup key, then the amount the gateway actually captured, and only
   then is the order written.

No order exists before step 2 succeeds, so an abandoned intent leaves
nothing to clean up.
"""

import json
from dataclasses import dataclass

import structlog
from payments.gateway import get_gateway
from payments.gateway.port import PaymentIntent
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.addresses import get_address_book
from ordering.cart.pricing import PricedCart, price_cart
from ordering.catalog import get_catalog
from ordering.errors import AddressRequiredError, PaymentVerificationError
from ordering.order.assembly import Settlement, compute_settlement
from ordering.order.order import Order, PaymentType
from ordering.order.placement import PlaceOrder
from ordering.utils.logging import audit_logger

logger = structlog.get_logger(__name__)

CURRENCY = "INR"


@dataclass(frozen=True)
class CheckoutIntent:
    intent: PaymentIntent
    cart: PricedCart
    settlement: Settlement


@dataclass(frozen=True)
class CallbackData:
    gateway_order_id: str
    gateway_payment_id: str
    signature: str


def resolve_address(customer_id, address: dict | None = None, address_id: str | None = None) -> dict:
    """Use the inline address if given, else the customer's saved address."""
    if address:
        return {key: value for key, value in address.items() if value is not None}
    if address_id:
        saved = get_address_book().get_address(str(customer_id), address_id)
        if saved:
            return saved
    raise AddressRequiredError()


def create_checkout_intent(cart: dict, payment_type: PaymentType) -> CheckoutIntent:
    priced = price_cart(cart, get_catalog())
    settlement = compute_settlement(priced, payment_type)
    intent = get_gateway().create_intent(settlement.expected_payment, CURRENCY)

    logger.info(
        "Checkout intent created",
        gateway_order_id=intent.gateway_order_id,
        payment_type=payment_type.value,
        amount=str(settlement.expected_payment),
    )
    return CheckoutIntent(intent=intent, cart=priced, settlement=settlement)


def _reject_callback(customer_id, callback: CallbackData, reason: str):
    error = PaymentVerificationError(
        reason,
        gateway_order_id=callback.gateway_order_id,
        gateway_payment_id=callback.gateway_payment_id,
    )
    audit_logger.error(
        "Payment verification failed",
        reference=error.reference,
        reason=reason,
        customer_id=str(customer_id),
        gateway_order_id=callback.gateway_order_id,
        gateway_payment_id=callback.gateway_payment_id,
    )
    raise error


def _replayed(customer_id, callback: CallbackData, order: Order) -> tuple[Order, bool]:
    """Return the order an earlier callback created, if it belongs to this customer."""
    if str(order.customer_id) != str(customer_id):
        _reject_callback(customer_id, callback, "Payment already belongs to another customer's order")

    logger.info(
        "Replayed payment callback",
        order_id=str(order.id),
        gateway_payment_id=callback.gateway_payment_id,
    )
    return order, False


def _is_duplicate_payment(exc: ValidationError) -> bool:
    return "gateway_payment_id" in (getattr(exc, "messages", None) or {})


def verify_and_place_order(
    customer_id,
    cart: dict,
    payment_type: PaymentType,
    callback: CallbackData,
    address: dict | None = None,
    address_id: str | None = None,
) -> tuple[Order, bool]:
    """Turn a verified gateway callback into an order.

    Returns ``(order, created)``; ``created`` is False when the payment had
    already been turned into an order.
    """
    gateway = get_gateway()
    if not gateway.verify_callback(callback.gateway_order_id, callback.gateway_payment_id, callback.signature):
        _reject_callback(customer_id, callback, "Invalid callback signature")

    repo = current_domain.repository_for(Order)
    existing = repo.find_by_gateway_payment_id(callback.gateway_payment_id)
    if existing is not None:
        return _replayed(customer_id, callback, existing)

    priced = price_cart(cart, get_catalog())
    resolved_address = resolve_address(customer_id, address, address_id)

    payment = gateway.fetch_payment(callback.gateway_order_id, callback.gateway_payment_id)
    if payment is None:
        _reject_callback(customer_id, callback, "Gateway has no record of the payment")
    if payment.gateway_order_id != callback.gateway_order_id:
        _reject_callback(customer_id, callback, "Payment belongs to a different gateway order")
    if not payment.is_settled:
        _reject_callback(customer_id, callback, f"Payment is {payment.status}")

    command = PlaceOrder(
        customer_id=str(customer_id),
        lines=json.dumps([line.to_dict() for line in priced.lines]),
        address=json.dumps(resolved_address),
        payment_type=payment_type.value,
        gateway_order_id=payment.gateway_order_id,
        gateway_payment_id=payment.gateway_payment_id,
        amount_minor_units=payment.amount_minor_units,
        currency=payment.currency,
        payment_status=payment.status,
    )
    try:
        order_id = current_domain.process(command, asynchronous=False)
    except ValidationError as exc:
        if not _is_duplicate_payment(exc):
            raise
        # A concurrent callback for the same payment won the insert
        winner = repo.find_by_gateway_payment_id(callback.gateway_payment_id)
        if winner is None:
            raise
        return _replayed(customer_id, callback, winner)

    return repo.get(order_id), True
