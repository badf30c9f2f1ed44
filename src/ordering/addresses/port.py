"""Address book port.

Checkout either receives a full address inline or an id from the customer's
saved addresses; the latter is resolved here.
"""

from abc import ABC, abstractmethod


class AddressBook(ABC):
    @abstractmethod
    def get_address(self, customer_id: str, address_id: str) -> dict | None:
        """Return the saved address as a dict, or None if the customer has no such address."""
        ...
