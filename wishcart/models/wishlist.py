# wishcart/models/wishlist.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime
import json
import secrets

# keys of a buy request whose option tokens still need decoding
RAW_OPTION_KEYS = ("selected_options", "entered_options")


def _parse_buy_request(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, dict):
        return dict(raw)
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def generate_sharing_code() -> str:
    return secrets.token_hex(16)


@dataclass
class WishlistItem:
    wishlist_id: str
    product_id: str
    sku: str
    quantity: float = 1
    description: str = ""
    buy_request: Dict[str, Any] = field(default_factory=dict)
    added_at: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WishlistItem":
        if d is None:
            raise ValueError("Cannot construct WishlistItem from None")
        try:
            quantity = float(d.get("quantity") or d.get("qty") or 1)
        except (TypeError, ValueError):
            quantity = 1
        if quantity == int(quantity):
            quantity = int(quantity)
        return cls(
            id=d.get("id") or None,
            wishlist_id=str(d.get("wishlist_id") or ""),
            product_id=str(d.get("product_id") or ""),
            sku=str(d.get("sku") or ""),
            quantity=quantity,
            description=str(d.get("description") or ""),
            buy_request=_parse_buy_request(d.get("buy_request")),
            added_at=d.get("added_at") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id or "",
            "wishlist_id": self.wishlist_id,
            "product_id": self.product_id,
            "sku": self.sku,
            "quantity": self.quantity,
            "description": self.description or "",
            "buy_request": json.dumps(self.buy_request, ensure_ascii=False),
            "added_at": self.added_at or "",
        }

    @property
    def needs_reconstruction(self) -> bool:
        """True when the stored buy request still carries raw option tokens."""
        return any(self.buy_request.get(k) for k in RAW_OPTION_KEYS)


@dataclass
class Wishlist:
    """
    A customer's wishlist. Items are stored in their own table keyed by
    `wishlist_id`; saving the wishlist rewrites that set in one go.
    """
    id: Optional[str] = None
    customer_id: Optional[str] = None
    sharing_code: Optional[str] = None
    shared: int = 0  # how many times the wishlist was shared by mail
    name: str = ""
    updated_at: Optional[str] = None
    items: List[WishlistItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any], items: Iterable[WishlistItem] = ()) -> "Wishlist":
        if d is None:
            raise ValueError("Cannot construct Wishlist from None")
        try:
            shared = int(float(d.get("shared") or 0))
        except (TypeError, ValueError):
            shared = 0
        return cls(
            id=d.get("id") or None,
            customer_id=d.get("customer_id") or None,
            sharing_code=d.get("sharing_code") or None,
            shared=shared,
            name=str(d.get("name") or ""),
            updated_at=d.get("updated_at") or None,
            items=list(items),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id or "",
            "customer_id": self.customer_id or "",
            "sharing_code": self.sharing_code or "",
            "shared": int(self.shared),
            "name": self.name or "",
            "updated_at": self.updated_at or "",
        }

    @property
    def is_shared(self) -> bool:
        return bool(self.sharing_code) and int(self.shared) > 0

    @property
    def items_count(self) -> int:
        return len(self.items)

    def get_item(self, item_id: str) -> Optional[WishlistItem]:
        for it in self.items:
            if str(it.id) == str(item_id):
                return it
        return None

    def add_item(self, item: WishlistItem) -> WishlistItem:
        item.wishlist_id = self.id or item.wishlist_id
        if not item.added_at:
            item.added_at = datetime.utcnow().isoformat(sep=" ")
        self.items.append(item)
        return item

    def remove_items(self, item_ids: Iterable[str]) -> int:
        """Drop the given items; returns how many were removed."""
        ids = {str(i) for i in item_ids}
        before = len(self.items)
        self.items = [it for it in self.items if str(it.id) not in ids]
        return before - len(self.items)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow().isoformat(sep=" ")
