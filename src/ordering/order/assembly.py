"""Order assembly: from a priced cart and a verified payment to an Order.

FullOnline orders must have been paid the grand total. CODAdvance orders
pay an advance of floor(subtotal × 17%) in whole currency units up front and
the rest (grand total − advance) on delivery. A verified payment more than
one cent away from the expected amount is rejected.
"""

from dataclasses import dataclass
from decimal import Decimal

import structlog

from ordering.cart.pricing import PricedCart
from ordering.errors import AddressRequiredError, PaymentMismatchError
from ordering.money import advance_for, round_cents, within_tolerance
from ordering.order.order import Order, PaymentType
from ordering.utils.logging import audit_logger

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Settlement:
    expected_payment: Decimal
    advance_paid: Decimal
    remaining_amount: Decimal


def compute_settlement(cart: PricedCart, payment_type: PaymentType) -> Settlement:
    """Split the grand total into what is paid now and what is collected on delivery."""
    if payment_type == PaymentType.COD_ADVANCE:
        advance = advance_for(cart.subtotal)
        return Settlement(
            expected_payment=advance,
            advance_paid=advance,
            remaining_amount=round_cents(cart.grand_total - advance),
        )
    return Settlement(
        expected_payment=cart.grand_total,
        advance_paid=Decimal("0.00"),
        remaining_amount=Decimal("0.00"),
    )


def assemble_order(customer_id, cart: PricedCart, address, payment_type: PaymentType, payment) -> Order:
    """Build an unsaved Order.

    ``payment`` is the gateway's VerifiedPayment (or None when nothing was
    captured). Raises AddressRequiredError or PaymentMismatchError.
    """
    if not address:
        raise AddressRequiredError()

    settlement = compute_settlement(cart, payment_type)
    received = payment.amount if payment is not None else Decimal("0.00")
    payment_id = payment.gateway_payment_id if payment is not None else ""

    if payment is None or not within_tolerance(received, settlement.expected_payment):
        error = PaymentMismatchError(settlement.expected_payment, received, gateway_payment_id=payment_id)
        audit_logger.critical(
            "Payment amount mismatch",
            reference=error.reference,
            customer_id=str(customer_id),
            payment_type=payment_type.value,
            expected=str(settlement.expected_payment),
            received=str(received),
            gateway_payment_id=payment_id,
        )
        raise error

    order = Order.place(
        customer_id=customer_id,
        lines=[
            {
                "product_id": line.product_id,
                "name": line.name,
                "quantity": line.quantity,
                "unit_price": float(line.unit_price),
            }
            for line in cart.lines
        ],
        address=address,
        payment_type=payment_type,
        amounts={
            "subtotal": float(cart.subtotal),
            "tax_amount": float(cart.tax_amount),
            "shipping_fee": float(cart.shipping_fee),
            "total_amount": float(cart.grand_total),
            "advance_paid": float(settlement.advance_paid),
            "remaining_amount": float(settlement.remaining_amount),
        },
        gateway_order_id=payment.gateway_order_id,
        gateway_payment_id=payment.gateway_payment_id,
    )
    logger.info(
        "Order assembled",
        order_id=str(order.id),
        payment_type=payment_type.value,
        total_amount=order.total_amount,
        advance_paid=order.advance_paid,
    )
    return order
