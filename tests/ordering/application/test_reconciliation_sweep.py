"""Application tests for the reconciliation sweep and the write-time check."""

import ordering.order.repository as order_repository
import pytest
from ordering.errors import ReconciliationError
from ordering.order.order import Order, PaymentType
from ordering.order.reconciliation import RunReconciliationSweep
from protean import current_domain


def _sweep(page_size=100):
    return current_domain.process(RunReconciliationSweep(page_size=page_size), asynchronous=False)


class TestWriteTimeCheck:
    def test_inconsistent_order_is_not_stored(self, build_order):
        order = build_order(payment_id="pay_bad")
        order.total_amount = 5000.0

        with pytest.raises(ReconciliationError) as exc:
            current_domain.repository_for(Order).add(order)

        assert exc.value.field == "total_amount"
        assert current_domain.repository_for(Order).find_by_gateway_payment_id("pay_bad") is None


class TestSweep:
    def test_clean_store(self, build_order):
        repo = current_domain.repository_for(Order)
        repo.add(build_order(payment_id="pay_1"))
        repo.add(build_order(PaymentType.COD_ADVANCE, unit_price="1250.50", payment_id="pay_2"))

        result = _sweep()
        assert result == {"checked": 2, "violations": []}

    def test_reports_stored_inconsistency(self, build_order, monkeypatch):
        repo = current_domain.repository_for(Order)
        repo.add(build_order(payment_id="pay_good"))

        corrupt = build_order(PaymentType.COD_ADVANCE, payment_id="pay_corrupt")
        corrupt.remaining_amount = 1.0
        monkeypatch.setattr(order_repository, "check_order", lambda order: None)
        repo.add(corrupt)
        monkeypatch.undo()

        result = _sweep()
        assert result["checked"] == 2
        assert result["violations"] == [
            {
                "order_id": str(corrupt.id),
                "field": "remaining_amount",
                "detail": "advance 17.00 + remaining 1.00 != total 102.00",
            }
        ]

    def test_sweep_pages_through_every_order(self, build_order):
        repo = current_domain.repository_for(Order)
        for index in range(5):
            repo.add(build_order(payment_id=f"pay_{index}"))

        assert _sweep(page_size=2)["checked"] == 5

    def test_sweep_does_not_modify_orders(self, build_order):
        repo = current_domain.repository_for(Order)
        order = build_order(payment_id="pay_1")
        repo.add(order)
        before = repo.get(order.id).updated_at

        _sweep()
        assert repo.get(order.id).updated_at == before
