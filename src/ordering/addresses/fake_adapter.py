"""In-memory address book for development and testing."""

from uuid import uuid4

from ordering.addresses.port import AddressBook


class InMemoryAddressBook(AddressBook):
    def __init__(self) -> None:
        self.addresses: dict[tuple[str, str], dict] = {}

    def save_address(self, customer_id: str, address: dict, address_id: str | None = None) -> str:
        address_id = address_id or uuid4().hex
        self.addresses[(customer_id, address_id)] = dict(address)
        return address_id

    def get_address(self, customer_id: str, address_id: str) -> dict | None:
        address = self.addresses.get((customer_id, address_id))
        return dict(address) if address is not None else None
