from decimal import Decimal

import pytest
from ordering.addresses import set_address_book
from ordering.addresses.fake_adapter import InMemoryAddressBook
from ordering.cart.pricing import CartLine, PricedCart
from ordering.catalog import set_catalog
from ordering.catalog.fake_adapter import InMemoryCatalog
from ordering.order.assembly import assemble_order, compute_settlement
from ordering.order.order import OrderStatus, PaymentType
from payments.gateway import set_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import VerifiedPayment, to_minor_units
from protean.integrations.pytest import DomainFixture

ADDRESS = {
    "full_name": "Asha Rao",
    "phone": "9800000000",
    "line1": "12 Temple Street",
    "city": "Mysuru",
    "state": "Karnataka",
    "postal_code": "570001",
    "country": "India",
}


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


@pytest.fixture()
def catalog():
    """Catalogue with one product priced so that a quantity of 2 gives a 1000.00 subtotal."""
    catalog = InMemoryCatalog()
    catalog.add_product("prod-vase", "Terracotta Vase", "500.00")
    catalog.add_product("prod-shawl", "Pashmina Shawl", "1250.50")
    catalog.add_product("prod-lamp", "Brass Lamp", "799.99", in_stock=False)
    set_catalog(catalog)
    return catalog


@pytest.fixture()
def gateway():
    gateway = FakeGateway(shared_secret="test-secret")
    set_gateway(gateway)
    return gateway


@pytest.fixture()
def address_book():
    book = InMemoryAddressBook()
    set_address_book(book)
    return book


@pytest.fixture()
def address():
    return dict(ADDRESS)


def _build_order(payment_type=None, unit_price="100.00", quantity=1, payment_id="pay_sm"):
    payment_type = payment_type or PaymentType.FULL_ONLINE
    cart = PricedCart.from_lines(
        [CartLine(product_id="prod-001", name="Vase", quantity=quantity, unit_price=Decimal(unit_price))]
    )
    payment = VerifiedPayment(
        gateway_order_id=f"order_for_{payment_id}",
        gateway_payment_id=payment_id,
        amount_minor_units=to_minor_units(compute_settlement(cart, payment_type).expected_payment),
        currency="INR",
        status="captured",
    )
    return assemble_order("cust-001", cart, dict(ADDRESS), payment_type, payment)


def _order_at_state(target_status, **kwargs):
    """Build an order and advance it to the desired state, with its events cleared."""
    order = _build_order(**kwargs)
    order._events.clear()

    path = {
        OrderStatus.PLACED: [],
        OrderStatus.PROCESSING: [OrderStatus.PROCESSING],
        OrderStatus.SHIPPED: [OrderStatus.PROCESSING, OrderStatus.SHIPPED],
        OrderStatus.DELIVERED: [OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED],
        OrderStatus.CANCELLED: [OrderStatus.CANCELLED],
    }[target_status]
    for status in path:
        order.transition_to(status)
    order._events.clear()
    return order


@pytest.fixture()
def build_order():
    return _build_order


@pytest.fixture()
def order_at_state():
    return _order_at_state
