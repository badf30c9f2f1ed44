"""In-memory product catalogue for development and testing."""

from decimal import Decimal

from ordering.catalog.port import ProductLookup, ProductSnapshot


class InMemoryCatalog(ProductLookup):
    def __init__(self) -> None:
        self.products: dict[str, ProductSnapshot] = {}

    def add_product(self, product_id: str, name: str, offer_price, in_stock: bool = True) -> ProductSnapshot:
        product = ProductSnapshot(
            product_id=product_id,
            name=name,
            offer_price=Decimal(str(offer_price)),
            in_stock=in_stock,
        )
        self.products[product_id] = product
        return product

    def remove_product(self, product_id: str) -> None:
        self.products.pop(product_id, None)

    def lookup(self, product_id: str) -> ProductSnapshot | None:
        return self.products.get(product_id)
