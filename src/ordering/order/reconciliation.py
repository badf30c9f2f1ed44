"""Reconciliation invariant checker: monetary consistency of orders.

``check_order`` runs before every order write (see OrderRepository.add);
``RunReconciliationSweep`` re-checks everything already stored and reports
violations to the audit log without touching the orders.

Checks:
- total_amount == subtotal + tax_amount + shipping_fee
- CODAdvance: advance_paid == floor(subtotal × 17%) and
  advance_paid + remaining_amount == total_amount
- FullOnline: advance_paid == remaining_amount == 0
- is_paid implies a gateway_payment_id
- every line has quantity > 0
"""

from dataclasses import asdict, dataclass

import structlog
from protean import handle
from protean.fields import Integer
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import ReconciliationError
from ordering.money import advance_for, round_cents, within_tolerance
from ordering.order.order import Order, PaymentType
from ordering.utils.logging import audit_logger

logger = structlog.get_logger(__name__)

SWEEP_PAGE_SIZE = 100


@dataclass(frozen=True)
class Violation:
    order_id: str | None
    field: str
    detail: str

    def to_error(self) -> ReconciliationError:
        return ReconciliationError(self.order_id, self.field, self.detail)


def find_violations(order) -> list[Violation]:
    """Return every invariant the order breaks (empty when consistent)."""
    order_id = str(order.id) if order.id is not None else None
    violations = []

    subtotal = round_cents(order.subtotal or 0.0)
    tax_amount = round_cents(order.tax_amount or 0.0)
    shipping_fee = round_cents(order.shipping_fee or 0.0)
    total_amount = round_cents(order.total_amount or 0.0)
    advance_paid = round_cents(order.advance_paid or 0.0)
    remaining_amount = round_cents(order.remaining_amount or 0.0)

    expected_total = subtotal + tax_amount + shipping_fee
    if not within_tolerance(total_amount, expected_total):
        violations.append(
            Violation(order_id, "total_amount", f"{total_amount} != subtotal + tax + shipping ({expected_total})")
        )

    if order.payment_type == PaymentType.COD_ADVANCE.value:
        expected_advance = advance_for(subtotal)
        if not within_tolerance(advance_paid, expected_advance):
            violations.append(
                Violation(order_id, "advance_paid", f"{advance_paid} != floor(subtotal x 17%) ({expected_advance})")
            )
        if not within_tolerance(advance_paid + remaining_amount, total_amount):
            violations.append(
                Violation(
                    order_id,
                    "remaining_amount",
                    f"advance {advance_paid} + remaining {remaining_amount} != total {total_amount}",
                )
            )
    elif advance_paid or remaining_amount:
        violations.append(
            Violation(
                order_id,
                "advance_paid",
                f"full online order carries advance {advance_paid} / remaining {remaining_amount}",
            )
        )

    if order.is_paid and not order.gateway_payment_id:
        violations.append(Violation(order_id, "gateway_payment_id", "paid order without a gateway payment id"))

    for line in order.items or []:
        if (line.quantity or 0) <= 0:
            violations.append(Violation(order_id, "items", f"line {line.product_id} has quantity {line.quantity}"))

    return violations


def check_order(order) -> None:
    """Raise ReconciliationError for the first violated invariant."""
    violations = find_violations(order)
    if violations:
        error = violations[0].to_error()
        audit_logger.error(
            "Order failed reconciliation",
            reference=error.reference,
            order_id=error.order_id,
            field=error.field,
            detail=error.detail,
            violation_count=len(violations),
        )
        raise error


@ordering.command(part_of="Order")
class RunReconciliationSweep:
    """Re-check every stored order and report inconsistencies."""

    page_size = Integer(default=SWEEP_PAGE_SIZE, min_value=1)


@ordering.command_handler(part_of=Order)
class ReconciliationSweepHandler:
    @handle(RunReconciliationSweep)
    def run_sweep(self, command):
        repo = current_domain.repository_for(Order)
        checked = 0
        violations = []

        for order in repo.iter_all(page_size=command.page_size or SWEEP_PAGE_SIZE):
            checked += 1
            for violation in find_violations(order):
                audit_logger.critical("Reconciliation violation", **asdict(violation))
                violations.append(asdict(violation))

        logger.info("Reconciliation sweep finished", checked=checked, violations=len(violations))
        return {"checked": checked, "violations": violations}
