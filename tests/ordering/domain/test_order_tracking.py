"""Tests for attaching carrier tracking to an order."""

import pytest
from ordering.errors import InvalidTransitionError
from ordering.order.events import OrderStatusChanged, TrackingAttached
from ordering.order.order import OrderStatus


class TestTrackingOnProcessingOrder:
    def test_attaches_tracking_and_ships(self, order_at_state):
        order = order_at_state(OrderStatus.PROCESSING)
        previous = order.add_tracking("BlueDart", "BD123456", "2026-11-02", changed_by="admin-1")

        assert previous == OrderStatus.PROCESSING.value
        assert order.status == OrderStatus.SHIPPED.value
        assert order.tracking.carrier == "BlueDart"
        assert order.tracking.tracking_number == "BD123456"
        assert order.tracking.estimated_delivery == "2026-11-02"

    def test_raises_tracking_and_status_events(self, order_at_state):
        order = order_at_state(OrderStatus.PROCESSING)
        order.add_tracking("BlueDart", "BD123456")
        assert [type(e) for e in order._events] == [TrackingAttached, OrderStatusChanged]

    def test_records_a_single_history_entry(self, order_at_state):
        order = order_at_state(OrderStatus.PROCESSING)
        before = len(order.status_history)
        order.add_tracking("BlueDart", "BD123456")
        assert len(order.status_history) == before + 1


class TestTrackingOnShippedOrder:
    def test_replaces_tracking_without_transition(self, order_at_state):
        order = order_at_state(OrderStatus.PROCESSING)
        order.add_tracking("BlueDart", "BD123456")
        history_length = len(order.status_history)
        order._events.clear()

        order.add_tracking("Delhivery", "DL999")

        assert order.status == OrderStatus.SHIPPED.value
        assert order.tracking.carrier == "Delhivery"
        assert len(order.status_history) == history_length
        assert [type(e) for e in order._events] == [TrackingAttached]


class TestTrackingRejected:
    @pytest.mark.parametrize("status", [OrderStatus.PLACED, OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_wrong_state_leaves_order_unchanged(self, order_at_state, status):
        order = order_at_state(status)
        history_length = len(order.status_history)

        with pytest.raises(InvalidTransitionError):
            order.add_tracking("BlueDart", "BD123456")

        assert order.status == status.value
        assert order.tracking is None
        assert len(order.status_history) == history_length
        assert order._events == []
