"""Order fulfillment: commands and handler.

Drives the order state machine: explicit status updates from the admin
dashboard and carrier tracking, which also marks a Processing order as
Shipped.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    changed_by = String(max_length=255)
    note = String(max_length=500)


@ordering.command(part_of="Order")
class AddTracking:
    """Attach carrier tracking details to an order in Processing or Shipped."""

    order_id = Identifier(required=True)
    carrier = String(required=True, max_length=100)
    tracking_number = String(required=True, max_length=255)
    estimated_delivery = String(max_length=10)  # ISO date string
    changed_by = String(max_length=255)


@ordering.command_handler(part_of=Order)
class OrderFulfillmentHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        previous = order.transition_to(
            OrderStatus(command.status),
            changed_by=command.changed_by,
            note=command.note,
        )
        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            from_status=previous,
            to_status=order.status,
            changed_by=command.changed_by,
        )
        return str(order.id)

    @handle(AddTracking)
    def add_tracking(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        previous = order.add_tracking(
            carrier=command.carrier,
            tracking_number=command.tracking_number,
            estimated_delivery=command.estimated_delivery,
            changed_by=command.changed_by,
        )
        repo.add(order)

        logger.info(
            "Tracking attached",
            order_id=str(order.id),
            carrier=command.carrier,
            from_status=previous,
            to_status=order.status,
        )
        return str(order.id)
