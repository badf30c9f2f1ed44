"""Domain events for the Order aggregate.

All events are versioned, immutable facts representing state changes.
"""

from protean.fields import DateTime, Float, Identifier, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A verified payment was turned into a persisted order."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    payment_type = String(required=True)
    gateway_payment_id = String(required=True)
    total_amount = Float(required=True)
    advance_paid = Float()
    remaining_amount = Float()
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The order moved along the fulfillment state machine."""

    __version__ = 1

    order_id = Identifier(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    changed_by = String()
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class TrackingAttached:
    """Carrier tracking details were attached to (or corrected on) the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    carrier = String(required=True)
    tracking_number = String(required=True)
    estimated_delivery = String()
    attached_at = DateTime(required=True)
