"""Order placement: command and handler.

Issued by the checkout service once the gateway callback has been verified.
Placement is idempotent on ``gateway_payment_id``: replaying the same
callback returns the order created the first time.
"""

import json

import structlog
from payments.gateway.port import VerifiedPayment
from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.cart.pricing import CartLine, PricedCart
from ordering.domain import ordering
from ordering.order.assembly import assemble_order
from ordering.order.order import Order, PaymentType

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of priced CartLine dicts
    address = Text(required=True)  # JSON: address dict
    payment_type = String(required=True, choices=PaymentType)
    gateway_order_id = String(required=True, max_length=255)
    gateway_payment_id = String(required=True, max_length=255)
    amount_minor_units = Integer(required=True, min_value=0)
    currency = String(max_length=3, default="INR")
    payment_status = String(max_length=50, default="captured")


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        repo = current_domain.repository_for(Order)

        existing = repo.find_by_gateway_payment_id(command.gateway_payment_id)
        if existing is not None:
            logger.info(
                "Payment already turned into an order",
                order_id=str(existing.id),
                gateway_payment_id=command.gateway_payment_id,
            )
            return str(existing.id)

        lines = json.loads(command.lines) if isinstance(command.lines, str) else command.lines
        address = json.loads(command.address) if isinstance(command.address, str) else command.address

        cart = PricedCart.from_lines(CartLine.from_dict(line) for line in lines)
        payment = VerifiedPayment(
            gateway_order_id=command.gateway_order_id,
            gateway_payment_id=command.gateway_payment_id,
            amount_minor_units=command.amount_minor_units,
            currency=command.currency or "INR",
            status=command.payment_status or "captured",
        )

        order = assemble_order(
            customer_id=command.customer_id,
            cart=cart,
            address=address,
            payment_type=PaymentType(command.payment_type),
            payment=payment,
        )
        repo.add(order)
        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=str(command.customer_id),
            gateway_payment_id=command.gateway_payment_id,
        )
        return str(order.id)
