# wishcart/services/pricing.py
from typing import Callable, Dict, Optional

from wishcart.models.product import Product, TYPE_CONFIGURABLE, TYPE_GROUPED
from wishcart.models.wishlist import WishlistItem
from wishcart.services.catalog import CatalogRepository

PriceStrategy = Callable[[Product, WishlistItem, CatalogRepository], Optional[float]]


def default_price(product: Product, item: WishlistItem, catalog: CatalogRepository) -> Optional[float]:
    return float(product.price)


def configurable_price(product: Product, item: WishlistItem, catalog: CatalogRepository) -> Optional[float]:
    # the chosen variant carries the price when the shopper picked one
    child_id = item.buy_request.get("simple_product")
    child = catalog.get_product_by_id(str(child_id)) if child_id else None
    return float(child.price if child else product.price)


def grouped_price(product: Product, item: WishlistItem, catalog: CatalogRepository) -> Optional[float]:
    super_group = item.buy_request.get("super_group") or {}
    total = 0.0
    for child_id, qty in super_group.items():
        child = catalog.get_product_by_id(str(child_id))
        if child is None:
            continue
        try:
            total += float(child.price) * float(qty or 0)
        except (TypeError, ValueError):
            continue
    return total if super_group else float(product.price)


DEFAULT_STRATEGIES: Dict[str, PriceStrategy] = {
    TYPE_CONFIGURABLE: configurable_price,
    TYPE_GROUPED: grouped_price,
}


class PriceCalculator:
    """
    Configured price of a wishlist item, picked by product type from an
    explicit strategy map. Types without an entry use `fallback`.
    """

    def __init__(self, catalog: CatalogRepository, strategies: Optional[Dict[str, PriceStrategy]] = None,
                 tax_rates: Optional[Dict[str, float]] = None, fallback: PriceStrategy = default_price):
        self.catalog = catalog
        self.strategies = dict(DEFAULT_STRATEGIES if strategies is None else strategies)
        self.tax_rates = dict(tax_rates or {})
        self.fallback = fallback
        self._rate_cache: Dict[str, float] = {}

    def item_price(self, product: Product, item: WishlistItem) -> Optional[float]:
        strategy = self.strategies.get(product.type_id, self.fallback)
        return strategy(product, item, self.catalog)

    def price_without_tax(self, price: Optional[float], tax_class_id: Optional[str]) -> Optional[float]:
        if price is None:
            return None
        key = str(tax_class_id or "")
        if key not in self._rate_cache:
            self._rate_cache[key] = 1 - float(self.tax_rates.get(key, 0.0))
        return price * self._rate_cache[key]
