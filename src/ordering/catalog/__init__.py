"""Product catalogue factory.

Provides get_catalog() / set_catalog() to swap the product lookup used at
checkout. Defaults to an empty InMemoryCatalog.
"""

from ordering.catalog.fake_adapter import InMemoryCatalog
from ordering.catalog.port import ProductLookup

_current_catalog: ProductLookup | None = None


def get_catalog() -> ProductLookup:
    global _current_catalog
    if _current_catalog is None:
        _current_catalog = InMemoryCatalog()
    return _current_catalog


def set_catalog(catalog: ProductLookup) -> None:
    """Override the active catalogue (useful for tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    global _current_catalog
    _current_catalog = None
