# wishcart/services/wishlist.py
"""
Wishlist operations: view, add, update, remove, clear, share and move to cart.

Every public method takes the authenticated customer id (None for guests)
and raises the errors of `wishcart.core.errors`; the HTTP layer only
translates them.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
import html
import json
import logging
import re

from email_validator import EmailNotValidError, validate_email

from wishcart.config import settings
from wishcart.core.errors import AuthorizationError, InputError, NotFoundError, StorageError, WishlistError
from wishcart.models.product import (
    Product,
    TYPE_BUNDLE,
    TYPE_CONFIGURABLE,
    TYPE_DOWNLOADABLE,
    TYPE_GROUPED,
)
from wishcart.models.wishlist import Wishlist, WishlistItem
from wishcart.services.cart_store import CartStore
from wishcart.services.catalog import CatalogRepository, CustomerRepository
from wishcart.services.mailer import Mailer
from wishcart.services.merge import MergeEngine, MergeReport
from wishcart.services.option_codec import OptionCodec
from wishcart.services.pricing import PriceCalculator
from wishcart.services.wishlist_store import WishlistStore

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")


def _strip_tags(value: Any) -> str:
    return _TAG_RE.sub("", str(value))


def _options_map(options: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for opt in options or []:
        try:
            out[str(opt["option_id"])] = int(opt["option_value"])
        except (KeyError, TypeError, ValueError):
            raise InputError("Please specify valid product options")
    return out


def product_option_buy_request(type_id: str, product_option: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Translate the client's `product_option.extension_attributes` into buy request keys."""
    attrs = (product_option or {}).get("extension_attributes") or {}

    if type_id == TYPE_CONFIGURABLE:
        options = attrs.get("configurable_item_options")
        return {"super_attribute": _options_map(options)} if options else {}

    if type_id == TYPE_GROUPED:
        options = attrs.get("grouped_product_options")
        return {"super_group": _options_map(options)} if options else {}

    if type_id == TYPE_DOWNLOADABLE:
        links = {}
        for link in attrs.get("downloadable_product_links") or []:
            link_id = str(link.get("link_id"))
            links[link_id] = link_id
        return {"links": links}

    if type_id == TYPE_BUNDLE:
        data: Dict[str, Any] = {}
        for option in attrs.get("bundle_options") or []:
            option_id = str(option.get("id"))
            data.setdefault("bundle_option", {}).setdefault(option_id, []).append(option.get("value"))
            data.setdefault("bundle_option_qty", {})[option_id] = option.get("quantity")
        return data

    return {}


def describe_options(buy_request: Dict[str, Any]) -> List[Dict[str, str]]:
    """Flat label/value pairs of a buy request for display."""
    out = []
    for attr_id, value in (buy_request.get("super_attribute") or {}).items():
        out.append({"label": str(attr_id), "value": _strip_tags(value)})
    for option_id, values in (buy_request.get("bundle_option") or {}).items():
        values = values if isinstance(values, list) else [values]
        out.append({"label": str(option_id), "value": _strip_tags(", ".join(str(v) for v in values))})
    for option_id, value in (buy_request.get("options") or {}).items():
        values = value if isinstance(value, list) else [value]
        shown = [v.get("title", "") if isinstance(v, dict) else str(v) for v in values]
        out.append({"label": str(option_id), "value": _strip_tags(", ".join(shown))})
    for link_id in (buy_request.get("links") or {}):
        out.append({"label": "link", "value": str(link_id)})
    return out


class WishlistService:
    def __init__(
        self,
        catalog: CatalogRepository,
        customers: CustomerRepository,
        cart_store: CartStore,
        wishlist_store: WishlistStore,
        codec: Optional[OptionCodec] = None,
        mailer: Optional[Mailer] = None,
        pricing: Optional[PriceCalculator] = None,
        base_url: Optional[str] = None,
    ):
        self.catalog = catalog
        self.customers = customers
        self.cart_store = cart_store
        self.wishlist_store = wishlist_store
        self.codec = codec or OptionCodec()
        self.mailer = mailer or Mailer()
        self.pricing = pricing or PriceCalculator(catalog, tax_rates=settings.TAX_RATES)
        self.base_url = base_url if base_url is not None else settings.BASE_URL
        self.merge_engine = MergeEngine(catalog, cart_store, wishlist_store, self.codec)

    # --- helpers ---

    @staticmethod
    def _require_customer(customer_id: Optional[str], message: str = "Authorization unsuccessful") -> str:
        if not customer_id:
            raise AuthorizationError(message)
        return str(customer_id)

    def _owned_item(self, customer_id: str, item_id: Optional[str]):
        if not item_id:
            raise InputError("Please specify a valid wishlist item")
        stored = self.wishlist_store.get_item(item_id)
        if stored is None:
            raise InputError("Please specify a valid wishlist item")
        wishlist = self.wishlist_store.load_by_customer_id(customer_id)
        if wishlist is None or str(wishlist.id) != str(stored.wishlist_id):
            raise NotFoundError("Invalid wishlist")
        return wishlist, wishlist.get_item(item_id)

    def _save(self, wishlist: Wishlist, message: str) -> Wishlist:
        try:
            return self.wishlist_store.save(wishlist)
        except StorageError as e:
            raise StorageError(message) from e

    def share_link(self, sharing_code: str) -> str:
        return f"{self.base_url}wishlist/shared/{sharing_code}"

    # --- views ---

    def item_view(self, item: WishlistItem) -> Dict[str, Any]:
        product = self.catalog.get_product_by_id(item.product_id) or self.catalog.get_product_by_sku(item.sku)
        sku = item.sku or (product.sku if product else "")
        shown: Optional[Product] = product
        if product is not None:
            if product.type_id == TYPE_CONFIGURABLE and item.buy_request.get("simple_product"):
                variant = self.catalog.get_product_by_id(str(item.buy_request["simple_product"]))
                if variant is not None:
                    sku = variant.sku
            elif product.parent_sku:
                # variants are listed under their parent, keeping their own sku
                shown = self.catalog.get_product_by_sku(product.parent_sku) or product

        price = self.pricing.item_price(product, item) if product else None
        return {
            "id": item.id,
            "qty": item.quantity,
            "sku": sku,
            "description": item.description,
            "added_at": item.added_at,
            "buy_request": json.dumps(item.buy_request, ensure_ascii=False),
            "price": price,
            "price_without_tax": self.pricing.price_without_tax(price, product.tax_class_id if product else None),
            "product": shown.to_dict() if shown else None,
            "options": describe_options(item.buy_request),
        }

    def view(self, wishlist: Wishlist) -> Dict[str, Any]:
        creator = self.customers.get_by_id(wishlist.customer_id) if wishlist.customer_id else None
        return {
            "id": wishlist.id,
            "sharing_code": wishlist.sharing_code,
            "updated_at": wishlist.updated_at,
            "items_count": wishlist.items_count,
            "name": wishlist.name,
            "creator": creator.full_name if creator else None,
            "items": [self.item_view(it) for it in wishlist.items],
        }

    def get_wishlist(self, customer_id: Optional[str]) -> Dict[str, Any]:
        customer_id = self._require_customer(customer_id)
        wishlist = self.wishlist_store.load_by_customer_id(customer_id)
        if wishlist is None:
            return self.view(Wishlist(customer_id=customer_id))
        return self.view(wishlist)

    def get_shared_wishlist(self, sharing_code: str) -> Dict[str, Any]:
        wishlist = self.wishlist_store.load_by_sharing_code(sharing_code)
        if wishlist is None or not wishlist.is_shared:
            raise NotFoundError("Shared wishlist with provided sharing code does not exist")
        return self.view(wishlist)

    # --- mutations ---

    def add_item(self, customer_id: Optional[str], payload: Dict[str, Any]) -> Dict[str, Any]:
        customer_id = self._require_customer(customer_id)
        sku = payload.get("sku")
        if not sku:
            raise InputError("Please specify valid product")
        product = self.catalog.get_product_by_sku(sku)
        if product is None:
            raise NotFoundError(f"The product with SKU \"{sku}\" does not exist")
        if not product.visible:
            raise InputError("Please specify valid product")

        quantity = payload.get("quantity")
        quantity = 1 if quantity is None else quantity
        if quantity <= 0:
            raise InputError("Please specify a quantity greater than zero")

        buy_request = product_option_buy_request(product.type_id, payload.get("product_option"))
        buy_request.update(self.codec.build_buy_request(
            payload.get("selected_options"), payload.get("entered_options"), product.id,
        ))

        wishlist = self.wishlist_store.load_by_customer_id(customer_id, create=True)
        item = wishlist.add_item(WishlistItem(
            wishlist_id=wishlist.id,
            product_id=str(product.id),
            sku=product.sku,
            quantity=quantity,
            description=payload.get("description") or "",
            buy_request=buy_request,
        ))
        self._save(wishlist, "There was an error when trying to save wishlist")
        return self.item_view(item)

    def update_item(self, customer_id: Optional[str], item_id: Optional[str], payload: Dict[str, Any]) -> Dict[str, Any]:
        """`payload` holds only the fields the client sent."""
        customer_id = self._require_customer(customer_id)
        if "quantity" not in payload and "description" not in payload:
            raise InputError("Please specify either quantity or description to update")
        wishlist, item = self._owned_item(customer_id, item_id)

        if "quantity" in payload:
            quantity = payload["quantity"]
            if quantity is None or quantity <= 0:
                raise InputError("Please specify a quantity greater than zero")
            item.quantity = quantity
        if "description" in payload:
            item.description = payload["description"] or ""

        self._save(wishlist, "There was an error when trying to update wishlist item")
        return self.item_view(item)

    def save_item(self, customer_id: Optional[str], payload: Dict[str, Any]) -> Dict[str, Any]:
        customer_id = self._require_customer(customer_id)
        if payload.get("sku"):
            return self.add_item(customer_id, payload)
        if payload.get("item_id"):
            fields = {k: v for k, v in payload.items() if k in ("quantity", "description")}
            return self.update_item(customer_id, payload["item_id"], fields)
        raise InputError("Please specify either sku or item_id")

    def remove_item(self, customer_id: Optional[str], item_id: Optional[str]) -> bool:
        customer_id = self._require_customer(customer_id, "There was an issue with authorization")
        wishlist, item = self._owned_item(customer_id, item_id)
        self.wishlist_store.delete_item(wishlist, item)
        self._save(wishlist, "There was an error when trying to delete item")
        return True

    def clear(self, customer_id: Optional[str]) -> bool:
        customer_id = self._require_customer(customer_id)
        wishlist = self.wishlist_store.load_by_customer_id(customer_id)
        if wishlist is None or wishlist.items_count <= 0:
            return True
        for item in list(wishlist.items):
            self.wishlist_store.delete_item(wishlist, item)
        self._save(wishlist, "There was an error when clearing wishlist")
        return True

    def share(self, customer_id: Optional[str], emails: Optional[List[str]], message: str = "") -> bool:
        customer_id = self._require_customer(customer_id)
        if not emails:
            raise InputError("Please specify at least one email address")

        wishlist = self.wishlist_store.load_by_customer_id(customer_id, create=True)
        customer = self.customers.get_by_id(customer_id)
        customer_name = customer.full_name if customer else ""
        message = html.escape(message or "").replace("\n", "<br>\n")
        link = self.share_link(wishlist.sharing_code)
        body = self._share_body(wishlist, customer_name, message, link)
        subject = f"Take a look at {customer_name.strip()}'s wishlist" if customer_name.strip() else "Take a look at my wishlist"

        sent = 0
        sent_emails: List[str] = []
        try:
            for email in emails:
                email = (email or "").strip()
                if email in sent_emails:
                    continue
                try:
                    validate_email(email, check_deliverability=False)
                except EmailNotValidError:
                    raise InputError("Provided emails are not valid")
                self.mailer.send(
                    email,
                    subject,
                    body,
                    reply_to=customer.email if customer else None,
                    html=True,
                )
                sent += 1
                sent_emails.append(email)
        except WishlistError:
            # mails that went out still count
            wishlist.shared += sent
            self._save(wishlist, "There was an error when trying to share wishlist")
            raise

        wishlist.shared += sent
        self._save(wishlist, "There was an error when trying to share wishlist")
        return True

    def _share_body(self, wishlist: Wishlist, customer_name: str, message: str, link: str) -> str:
        lines = [f"<p>{html.escape(customer_name)} wants to share this wishlist with you.</p>"]
        if message:
            lines.append(f"<p>{message}</p>")
        lines.append("<ul>")
        for item in wishlist.items:
            product = self.catalog.get_product_by_id(item.product_id)
            name = product.name if product else item.sku
            lines.append(f"<li>{html.escape(name)} x {item.quantity}</li>")
        lines.append("</ul>")
        lines.append(f'<p><a href="{html.escape(link)}">View all wishlist items</a></p>')
        return "\n".join(lines)

    def move_to_cart(self, customer_id: Optional[str], sharing_code: Optional[str] = None,
                     guest_cart_id: Optional[str] = None) -> MergeReport:
        if not guest_cart_id:
            customer_id = self._require_customer(customer_id, "User not found")
            cart = self.cart_store.get_or_create_cart_for_customer(customer_id)
        else:
            cart = self.cart_store.get_cart_by_guest_token(guest_cart_id)

        if sharing_code:
            wishlist = self.wishlist_store.load_by_sharing_code(sharing_code)
            if wishlist is None or not wishlist.is_shared:
                raise NotFoundError("Shared wishlist with provided sharing code does not exist")
        else:
            customer_id = self._require_customer(customer_id, "User not found")
            wishlist = self.wishlist_store.load_by_customer_id(customer_id)

        if wishlist is None or wishlist.items_count <= 0:
            return MergeReport()
        return self.merge_engine.move(cart, wishlist, drain=bool(sharing_code))
