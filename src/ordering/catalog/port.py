"""Product lookup port.

Checkout never trusts prices sent by the client; it asks the catalogue for
the current offer price of every product in the cart.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ProductSnapshot:
    product_id: str
    name: str
    offer_price: Decimal
    in_stock: bool = True


class ProductLookup(ABC):
    """Read-only view of the product catalogue."""

    @abstractmethod
    def lookup(self, product_id: str) -> ProductSnapshot | None:
        """Return the product, or None when it does not exist."""
        ...
