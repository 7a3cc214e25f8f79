# wishcart/models/cart.py
from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import List, Dict, Any, Optional, Union
import json
import uuid

Quantity = Union[int, float]


def _as_quantity(raw: Any, default: Quantity) -> Quantity:
    """Numeric quantity from a CSV cell; whole numbers come back as int."""
    if raw is None or raw == "":
        return default
    try:
        qty = float(raw)
    except (TypeError, ValueError):
        return default
    return int(qty) if qty == int(qty) else qty


@dataclass
class CartLineItem:
    sku: str
    product_id: Optional[str] = None
    name: Optional[str] = None
    unit_price: float = 0.0
    quantity: Quantity = 1
    selected_options: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CartLineItem":
        if d is None:
            raise ValueError("Cannot construct CartLineItem from None")
        try:
            unit_price = float(d.get("unit_price") or d.get("price") or 0.0)
        except (TypeError, ValueError):
            unit_price = 0.0
        options = d.get("selected_options") or {}
        if isinstance(options, str):
            try:
                options = json.loads(options)
            except ValueError:
                options = {}
        item = cls(
            sku=str(d.get("sku") or ""),
            product_id=d.get("product_id") or None,
            name=d.get("name") or d.get("title") or None,
            unit_price=unit_price,
            quantity=max(_as_quantity(d.get("quantity", d.get("qty")), 1), 0),
            selected_options=options if isinstance(options, dict) else {},
        )
        if d.get("id"):
            item.id = str(d["id"])
        return item

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["unit_price"] = float(self.unit_price)
        out["quantity"] = _as_quantity(self.quantity, 0)
        return out

    def set_quantity(self, quantity: Quantity) -> None:
        quantity = _as_quantity(float(quantity), 0)
        if quantity < 0:
            raise ValueError(f"Cart line quantity cannot be negative (got {quantity})")
        self.quantity = quantity

    def add_quantity(self, quantity: Quantity) -> None:
        self.set_quantity(max(self.quantity + quantity, 0))

    def line_total(self) -> float:
        return float(self.unit_price) * float(self.quantity)


@dataclass
class Cart:
    """
    Cart saved to CSV/Excel as a single row with 'items' serialized as JSON
    (list of CartLineItem dicts). Guest carts carry a `guest_token` (masked id)
    and no customer.
    """
    id: Optional[str] = None
    customer_id: Optional[str] = None
    guest_token: Optional[str] = None
    items: List[CartLineItem] = field(default_factory=list)
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Cart":
        if d is None:
            raise ValueError("Cannot construct Cart from None")
        raw_items = d.get("items") or []
        if isinstance(raw_items, str):
            try:
                parsed = json.loads(raw_items)
            except ValueError:
                parsed = []
            raw_items = parsed if isinstance(parsed, list) else []
        items_list = []
        for it in raw_items:
            if isinstance(it, CartLineItem):
                items_list.append(it)
            elif isinstance(it, dict):
                items_list.append(CartLineItem.from_dict(it))
        return cls(
            id=d.get("id") or d.get("cart_id") or None,
            customer_id=d.get("customer_id") or None,
            guest_token=d.get("guest_token") or None,
            items=items_list,
            updated_at=d.get("updated_at") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id or "",
            "customer_id": self.customer_id or "",
            "guest_token": self.guest_token or "",
            "items": json.dumps([it.to_dict() for it in self.items], ensure_ascii=False),
            "updated_at": self.updated_at or "",
        }

    def total(self) -> float:
        return float(sum(it.line_total() for it in self.items))

    def count_items(self) -> Quantity:
        return _as_quantity(sum(it.quantity for it in self.items), 0)
