"""Tests for the reconciliation invariant checker."""

from types import SimpleNamespace

import pytest
from ordering.errors import ReconciliationError
from ordering.order.order import OrderStatus, PaymentType
from ordering.order.reconciliation import check_order, find_violations


def _snapshot(**overrides):
    """A stored-order lookalike, free to hold values the aggregate would refuse."""
    fields = {
        "id": "ord-001",
        "payment_type": PaymentType.COD_ADVANCE.value,
        "subtotal": 1000.0,
        "tax_amount": 20.0,
        "shipping_fee": 0.0,
        "total_amount": 1020.0,
        "advance_paid": 170.0,
        "remaining_amount": 850.0,
        "is_paid": True,
        "gateway_payment_id": "pay_001",
        "items": [SimpleNamespace(product_id="prod-001", quantity=2)],
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestConsistentOrders:
    def test_assembled_full_online_order_passes(self, build_order):
        check_order(build_order(PaymentType.FULL_ONLINE, unit_price="500.00", quantity=2))

    def test_assembled_cod_order_passes(self, build_order):
        check_order(build_order(PaymentType.COD_ADVANCE, unit_price="1250.50"))

    def test_order_passes_after_every_transition(self, order_at_state):
        for status in OrderStatus:
            assert find_violations(order_at_state(status)) == []

    def test_cod_snapshot_passes(self):
        assert find_violations(_snapshot()) == []


class TestViolations:
    def test_total_not_matching_parts(self):
        with pytest.raises(ReconciliationError) as exc:
            check_order(_snapshot(total_amount=1030.0, remaining_amount=860.0))
        assert exc.value.field == "total_amount"
        assert exc.value.order_id == "ord-001"

    def test_advance_split_not_adding_up(self):
        violations = find_violations(_snapshot(remaining_amount=800.0))
        assert [v.field for v in violations] == ["remaining_amount"]

    def test_advance_not_17_percent(self):
        violations = find_violations(_snapshot(advance_paid=200.0, remaining_amount=820.0))
        assert [v.field for v in violations] == ["advance_paid"]

    def test_full_online_with_advance(self):
        violations = find_violations(_snapshot(payment_type=PaymentType.FULL_ONLINE.value))
        assert [v.field for v in violations] == ["advance_paid"]

    def test_paid_without_payment_id(self):
        violations = find_violations(_snapshot(gateway_payment_id=None))
        assert [v.field for v in violations] == ["gateway_payment_id"]

    def test_unpaid_without_payment_id_is_fine(self):
        assert find_violations(_snapshot(is_paid=False, gateway_payment_id=None)) == []

    def test_non_positive_quantity(self):
        violations = find_violations(_snapshot(items=[SimpleNamespace(product_id="prod-001", quantity=0)]))
        assert [v.field for v in violations] == ["items"]

    def test_all_violations_reported(self):
        violations = find_violations(
            _snapshot(total_amount=5.0, gateway_payment_id="", items=[SimpleNamespace(product_id="p", quantity=-1)])
        )
        assert {v.field for v in violations} == {"total_amount", "remaining_amount", "gateway_payment_id", "items"}

    def test_first_violation_is_raised(self):
        with pytest.raises(ReconciliationError) as exc:
            check_order(_snapshot(total_amount=5.0, gateway_payment_id=""))
        assert exc.value.field == "total_amount"

    def test_sub_cent_drift_tolerated(self):
        assert find_violations(_snapshot(total_amount=1020.004)) == []
