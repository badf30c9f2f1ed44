"""Order aggregate (CQRS): the persisted result of a verified checkout.

An order is written once, as a single document holding its lines, the
delivery address snapshot and every payment field, and afterwards only moves
along the fulfillment state machine. Lines and amounts never change after
placement.

State Machine:
    Placed → Processing → Shipped → Delivered
    Cancelled (from Placed or Processing)

Forward skips (e.g. Placed → Delivered) are accepted. Delivered and Cancelled
are terminal.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from ordering.domain import ordering
from ordering.errors import InvalidTransitionError
from ordering.order.events import OrderPlaced, OrderStatusChanged, TrackingAttached


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PLACED = "Placed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentType(Enum):
    FULL_ONLINE = "FullOnline"
    COD_ADVANCE = "CODAdvance"


class SettlementStatus(Enum):
    PAID = "Paid"
    PARTIALLY_PAID = "PartiallyPaid"
    UNPAID = "Unpaid"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PLACED: {
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PROCESSING: {
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# States in which tracking details may be attached
_TRACKABLE_STATES = {OrderStatus.PROCESSING, OrderStatus.SHIPPED}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class AddressSnapshot:
    """The delivery address as it was at checkout.

    Copied into the order so that later edits to the customer's address book
    do not change where an order was shipped.
    """

    full_name = String(max_length=255)
    phone = String(max_length=20)
    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(max_length=100, default="India")


@ordering.value_object(part_of="Order")
class TrackingInfo:
    carrier = String(required=True, max_length=100)
    tracking_number = String(required=True, max_length=255)
    estimated_delivery = String(max_length=10)  # ISO date string


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    """A priced line, frozen at the catalogue offer price of checkout time."""

    product_id = Identifier(required=True)
    name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)


@ordering.entity(part_of="Order")
class StatusChange:
    from_status = String(max_length=20)
    to_status = String(required=True, max_length=20)
    changed_by = String(max_length=255)
    note = String(max_length=500)
    changed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    items = HasMany(OrderLine)
    address = ValueObject(AddressSnapshot)
    payment_type = String(required=True, choices=PaymentType)
    currency = String(max_length=3, default="INR")
    subtotal = Float(required=True, min_value=0.0)
    tax_amount = Float(default=0.0)
    shipping_fee = Float(default=0.0)
    total_amount = Float(required=True, min_value=0.0)
    advance_paid = Float(default=0.0)
    remaining_amount = Float(default=0.0)
    is_paid = Boolean(default=False)
    gateway_order_id = String(max_length=255)
    gateway_payment_id = String(required=True, max_length=255, unique=True)
    status = String(choices=OrderStatus, default=OrderStatus.PLACED.value)
    tracking = ValueObject(TrackingInfo)
    status_history = HasMany(StatusChange)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        lines,
        address,
        payment_type,
        amounts,
        gateway_order_id,
        gateway_payment_id,
    ):
        """Build a new, paid order in the Placed state.

        Args:
            customer_id: The customer placing the order.
            lines: List of dicts with product_id, name, quantity, unit_price.
            address: Dict matching AddressSnapshot.
            payment_type: PaymentType member.
            amounts: Dict with subtotal, tax_amount, shipping_fee,
                     total_amount, advance_paid, remaining_amount.
            gateway_order_id: The gateway intent the customer paid against.
            gateway_payment_id: The verified payment; the dedup key.
        """
        now = datetime.now(UTC)
        order = cls(
            customer_id=customer_id,
            address=AddressSnapshot(**address),
            payment_type=payment_type.value,
            subtotal=amounts["subtotal"],
            tax_amount=amounts["tax_amount"],
            shipping_fee=amounts["shipping_fee"],
            total_amount=amounts["total_amount"],
            advance_paid=amounts["advance_paid"],
            remaining_amount=amounts["remaining_amount"],
            is_paid=True,
            gateway_order_id=gateway_order_id,
            gateway_payment_id=gateway_payment_id,
            status=OrderStatus.PLACED.value,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_items(OrderLine(**line))
        order.add_status_history(
            StatusChange(
                from_status=None,
                to_status=OrderStatus.PLACED.value,
                changed_by=str(customer_id),
                note="Order placed",
                changed_at=now,
            )
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                payment_type=payment_type.value,
                gateway_payment_id=gateway_payment_id,
                total_amount=order.total_amount,
                advance_paid=order.advance_paid,
                remaining_amount=order.remaining_amount,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[OrderStatus(self.status)]

    @property
    def settlement_status(self) -> SettlementStatus:
        """Whether the customer still owes money on delivery."""
        if not self.is_paid:
            return SettlementStatus.UNPAID
        if PaymentType(self.payment_type) == PaymentType.COD_ADVANCE and (self.remaining_amount or 0.0) > 0:
            return SettlementStatus.PARTIALLY_PAID
        return SettlementStatus.PAID

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    def can_transition_to(self, target_status: OrderStatus) -> bool:
        return target_status in _VALID_TRANSITIONS[OrderStatus(self.status)]

    def _assert_can_transition(self, target_status: OrderStatus):
        current = OrderStatus(self.status)
        if not self.can_transition_to(target_status):
            raise InvalidTransitionError(current.value, target_status.value)

    def _record_transition(self, target_status: OrderStatus, changed_by, note, now):
        previous = self.status
        self.status = target_status.value
        self.updated_at = now
        self.add_status_history(
            StatusChange(
                from_status=previous,
                to_status=target_status.value,
                changed_by=changed_by,
                note=note,
                changed_at=now,
            )
        )
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                from_status=previous,
                to_status=target_status.value,
                changed_by=changed_by,
                changed_at=now,
            )
        )

    def transition_to(self, target_status: OrderStatus, changed_by=None, note=None):
        """Move the order to ``target_status``. Returns the prior status value."""
        self._assert_can_transition(target_status)
        previous = self.status
        self._record_transition(target_status, changed_by, note, datetime.now(UTC))
        return previous

    def add_tracking(self, carrier, tracking_number, estimated_delivery=None, changed_by=None):
        """Attach carrier tracking.

        A Processing order is advanced to Shipped in the same step; a Shipped
        order just has its tracking replaced. Returns the prior status value.
        """
        current = OrderStatus(self.status)
        if current not in _TRACKABLE_STATES:
            raise InvalidTransitionError(
                current.value,
                OrderStatus.SHIPPED.value,
                reason=f"Tracking cannot be added to an order that is {current.value}",
            )

        now = datetime.now(UTC)
        self.tracking = TrackingInfo(
            carrier=carrier,
            tracking_number=tracking_number,
            estimated_delivery=estimated_delivery,
        )
        self.updated_at = now
        self.raise_(
            TrackingAttached(
                order_id=str(self.id),
                carrier=carrier,
                tracking_number=tracking_number,
                estimated_delivery=estimated_delivery,
                attached_at=now,
            )
        )

        if current == OrderStatus.PROCESSING:
            self._record_transition(OrderStatus.SHIPPED, changed_by, "Tracking attached", now)
        return current.value
