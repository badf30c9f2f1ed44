"""Repository for the Order aggregate."""

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.reconciliation import check_order


@ordering.repository(part_of=Order)
class OrderRepository:
    """Order persistence with the reconciliation check on every write."""

    def add(self, order):
        check_order(order)
        return super().add(order)

    def find_by_gateway_payment_id(self, gateway_payment_id: str) -> Order | None:
        """Look up an order by its dedup key."""
        results = self._dao.query.filter(gateway_payment_id=gateway_payment_id).all().items
        return results[0] if results else None

    def find_by_customer(self, customer_id: str) -> list[Order]:
        """All of a customer's orders, newest first."""
        orders = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    def iter_all(self, page_size: int = 100):
        offset = 0
        while True:
            page = self._dao.query.order_by("created_at").offset(offset).limit(page_size).all().items
            yield from page
            if len(page) < page_size:
                return
            offset += page_size

    def find_all(self, status: str | None = None, page_size: int = 100) -> list[Order]:
        """Every customer's orders, newest first, optionally only those in ``status``."""
        orders = [order for order in self.iter_all(page_size) if status is None or order.status == status]
        return sorted(orders, key=lambda order: order.created_at, reverse=True)
