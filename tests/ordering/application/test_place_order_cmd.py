"""Application tests for the PlaceOrder command: persistence and dedup."""

import json

import pytest
from ordering.errors import PaymentMismatchError
from ordering.order.order import Order, OrderStatus, PaymentType
from ordering.order.placement import PlaceOrder
from protean import current_domain

LINES = [{"product_id": "prod-vase", "name": "Terracotta Vase", "quantity": 2, "unit_price": "500.00"}]
ADDRESS = {"line1": "12 Temple Street", "city": "Mysuru", "postal_code": "570001"}


def _place(payment_id="pay_001", payment_type=PaymentType.FULL_ONLINE, amount_minor_units=102000):
    return current_domain.process(
        PlaceOrder(
            customer_id="cust-001",
            lines=json.dumps(LINES),
            address=json.dumps(ADDRESS),
            payment_type=payment_type.value,
            gateway_order_id="order_001",
            gateway_payment_id=payment_id,
            amount_minor_units=amount_minor_units,
        ),
        asynchronous=False,
    )


class TestPlaceOrder:
    def test_order_persisted(self):
        order_id = _place()
        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == OrderStatus.PLACED.value
        assert order.customer_id == "cust-001"
        assert order.total_amount == 1020.0
        assert order.gateway_payment_id == "pay_001"
        assert len(order.items) == 1
        assert order.address.postal_code == "570001"

    def test_cod_order_persisted_with_split(self):
        order_id = _place(payment_type=PaymentType.COD_ADVANCE, amount_minor_units=17000)
        order = current_domain.repository_for(Order).get(order_id)
        assert order.advance_paid == 170.0
        assert order.remaining_amount == 850.0

    def test_history_persisted(self):
        order_id = _place()
        order = current_domain.repository_for(Order).get(order_id)
        assert [change.to_status for change in order.status_history] == [OrderStatus.PLACED.value]


class TestPlacementDedup:
    def test_same_payment_returns_same_order(self):
        first = _place()
        second = _place()
        assert first == second

    def test_only_one_order_stored(self):
        _place()
        _place()
        assert len(current_domain.repository_for(Order).find_by_customer("cust-001")) == 1

    def test_different_payments_make_different_orders(self):
        assert _place("pay_001") != _place("pay_002")


class TestPlacementRejected:
    def test_mismatched_amount_stores_nothing(self):
        with pytest.raises(PaymentMismatchError):
            _place(amount_minor_units=100000)
        assert current_domain.repository_for(Order).find_by_gateway_payment_id("pay_001") is None
