# wishcart/services/cart_store.py
from datetime import datetime
from typing import Any, Dict, Optional, Union
import logging
import secrets
import uuid

from wishcart.core.errors import NotFoundError, StorageError
from wishcart.database import FileBackedDB, db as default_db
from wishcart.models.cart import Cart, CartLineItem
from wishcart.models.product import (
    Product,
    TYPE_BUNDLE,
    TYPE_CONFIGURABLE,
    TYPE_GROUPED,
)

logger = logging.getLogger(__name__)

# buy request keys that steer the add itself rather than describe the configuration
_NON_OPTION_KEYS = ("qty", "product", "selected_options", "entered_options")


class CartStore:
    """Carts of customers and guests, one row per cart with the lines as JSON."""

    def __init__(self, db: Optional[FileBackedDB] = None):
        self.db = db or default_db

    def get_or_create_cart_for_customer(self, customer_id: str) -> Cart:
        """
        Return the customer's cart. A missing cart is created in memory only;
        it is written by the next `save`.
        """
        row = self.db.get_record("carts", "customer_id", customer_id)
        if row:
            return Cart.from_dict(row)
        return Cart(id=uuid.uuid4().hex, customer_id=str(customer_id))

    def get_cart_by_guest_token(self, token: str) -> Cart:
        row = self.db.get_record("carts", "guest_token", token) if token else None
        if not row:
            raise NotFoundError(f"Could not find a cart with ID \"{token}\"")
        return Cart.from_dict(row)

    def create_guest_cart(self) -> Cart:
        cart = Cart(id=uuid.uuid4().hex, guest_token=secrets.token_urlsafe(24))
        self.save(cart)
        return cart

    def add_line_item(self, cart: Cart, product: Product, buy_request: Dict[str, Any]) -> Union[CartLineItem, str]:
        """
        Add `product` configured by `buy_request` to the cart. Business-level
        refusals come back as a message string, mirroring the platform's quote API.
        """
        if not product.visible:
            return "Product that you are trying to add is not available."
        try:
            qty = float(buy_request.get("qty", 1))
        except (TypeError, ValueError):
            qty = 0
        if qty <= 0:
            return "Please specify the quantity of product(s)."
        if product.type_id == TYPE_CONFIGURABLE and not buy_request.get("super_attribute"):
            return "You need to choose options for your item."
        if product.type_id == TYPE_BUNDLE and not buy_request.get("bundle_option"):
            return "Please specify product option(s)."
        if product.type_id == TYPE_GROUPED and not buy_request.get("super_group"):
            return "Please specify the quantity of product(s)."

        options = {k: v for k, v in buy_request.items() if k not in _NON_OPTION_KEYS}
        quantity = int(qty) if qty == int(qty) else qty
        for line in cart.items:
            if line.sku == product.sku and line.selected_options == options:
                line.add_quantity(quantity)
                return line

        line = CartLineItem(
            sku=product.sku,
            product_id=product.id,
            name=product.name,
            unit_price=float(product.price),
            quantity=quantity,
            selected_options=options,
        )
        cart.items.append(line)
        return line

    def save(self, cart: Cart) -> Cart:
        cart.updated_at = datetime.utcnow().isoformat(sep=" ")
        if not cart.id:
            cart.id = uuid.uuid4().hex
        try:
            self.db.upsert_record("carts", "id", cart.to_dict())
        except Exception as e:
            logger.error("Failed to save cart %s: %s", cart.id, e)
            raise StorageError("Failed to save cart") from e
        return cart
