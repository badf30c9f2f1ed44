"""Cart pricing: turns a client-held cart into an immutable PricedCart.

The storefront keeps the cart on the client as ``{product_id: quantity}``.
At checkout that map is priced against the live catalogue: lines for
unknown or out-of-stock products and non-positive quantities are dropped,
tax is a flat 2% of the subtotal (rounded half-up to the cent) and shipping
is free.

Pricing is a pure function of the cart map and the catalogue, so pricing the
same cart twice against an unchanged catalogue yields equal values.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal

import structlog

from ordering.catalog.port import ProductLookup
from ordering.errors import InvalidCartError
from ordering.money import SHIPPING_FEE, round_cents, tax_for, to_decimal

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartLine:
    product_id: str
    name: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return round_cents(self.unit_price * self.quantity)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "CartLine":
        return cls(
            product_id=str(data["product_id"]),
            name=data.get("name") or "",
            quantity=int(data["quantity"]),
            unit_price=round_cents(data["unit_price"]),
        )


@dataclass(frozen=True)
class PricedCart:
    lines: tuple[CartLine, ...]
    subtotal: Decimal
    tax_amount: Decimal
    shipping_fee: Decimal
    grand_total: Decimal

    @classmethod
    def from_lines(cls, lines: Iterable[CartLine]) -> "PricedCart":
        """Compute totals for already-priced lines."""
        lines = tuple(lines)
        if not lines:
            raise InvalidCartError()

        subtotal = round_cents(sum((line.line_total for line in lines), Decimal("0")))
        tax_amount = tax_for(subtotal)
        shipping_fee = round_cents(SHIPPING_FEE)
        return cls(
            lines=lines,
            subtotal=subtotal,
            tax_amount=tax_amount,
            shipping_fee=shipping_fee,
            grand_total=subtotal + tax_amount + shipping_fee,
        )


def price_cart(cart: Mapping[str, int], catalog: ProductLookup) -> PricedCart:
    """Price a ``{product_id: quantity}`` map against the catalogue."""
    lines = []
    for product_id, quantity in cart.items():
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            logger.info("Dropping cart line with invalid quantity", product_id=product_id, quantity=quantity)
            continue
        if quantity <= 0:
            logger.info("Dropping cart line with non-positive quantity", product_id=product_id, quantity=quantity)
            continue

        product = catalog.lookup(str(product_id))
        if product is None:
            logger.info("Dropping cart line for unknown product", product_id=product_id)
            continue
        if not product.in_stock:
            logger.info("Dropping cart line for out-of-stock product", product_id=product_id)
            continue

        lines.append(
            CartLine(
                product_id=str(product_id),
                name=product.name,
                quantity=quantity,
                unit_price=round_cents(to_decimal(product.offer_price)),
            )
        )

    if not lines:
        raise InvalidCartError()

    return PricedCart.from_lines(lines)
