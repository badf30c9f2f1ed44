import pytest
from payments.gateway import set_gateway
from payments.gateway.fake_adapter import FakeGateway


@pytest.fixture()
def fake_gateway():
    gateway = FakeGateway(shared_secret="test-secret")
    set_gateway(gateway)
    return gateway
