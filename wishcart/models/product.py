# wishcart/models/product.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


TYPE_SIMPLE = "simple"
TYPE_VIRTUAL = "virtual"
TYPE_CONFIGURABLE = "configurable"
TYPE_BUNDLE = "bundle"
TYPE_GROUPED = "grouped"
TYPE_DOWNLOADABLE = "downloadable"


def _truthy(raw: Any, default: bool) -> bool:
    if raw is None or raw == "":
        return default
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return bool(raw)
    return str(raw).strip().lower() in ("1", "true", "yes", "y", "t")


@dataclass
class Product:
    """
    Catalog product. CSV-backed store will usually store everything as strings,
    so these helpers convert to proper types.
    """
    id: Optional[str] = None
    sku: str = ""
    name: str = ""
    type_id: str = TYPE_SIMPLE
    price: float = 0.0
    stock: Optional[int] = None
    is_in_stock: bool = True
    visible: bool = True
    parent_sku: Optional[str] = None
    tax_class_id: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Product":
        if d is None:
            raise ValueError("Cannot construct Product from None")
        try:
            price = float(d.get("price") or 0.0)
        except (TypeError, ValueError):
            price = 0.0
        # a blank stock cell means the quantity is not managed
        stock_raw = d.get("stock")
        try:
            stock = int(float(stock_raw)) if stock_raw not in (None, "") else None
        except (TypeError, ValueError):
            stock = None
        return cls(
            id=d.get("id") or d.get("product_id") or None,
            sku=str(d.get("sku") or ""),
            name=str(d.get("name") or d.get("title") or ""),
            type_id=str(d.get("type_id") or TYPE_SIMPLE),
            price=price,
            stock=stock,
            is_in_stock=_truthy(d.get("is_in_stock"), True),
            visible=_truthy(d.get("visible"), True),
            parent_sku=d.get("parent_sku") or None,
            tax_class_id=d.get("tax_class_id") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["price"] = float(self.price)
        out["stock"] = "" if self.stock is None else int(self.stock)
        return out

    @property
    def in_stock(self) -> bool:
        if not self.is_in_stock:
            return False
        return self.stock is None or self.stock > 0


@dataclass
class StockStatus:
    product_id: str
    in_stock: bool
