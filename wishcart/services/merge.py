# wishcart/services/merge.py
"""
Wishlist -> cart reconciliation.

Every wishlist item ends in exactly one state:

    pending -> matched          same SKU already in the cart, quantities added
    pending -> inserted         new cart line created
    pending -> out_of_stock     product not salable, item stays in the wishlist
    pending -> transfer_failed  the cart refused the product, item stays

The batch is best effort: item failures are collected and reported together
once everything was attempted and the cart and wishlist were saved.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import logging

from wishcart.core.errors import InputError, StorageError, WishlistError
from wishcart.models.cart import Cart
from wishcart.models.wishlist import Wishlist, WishlistItem
from wishcart.services.cart_store import CartStore
from wishcart.services.catalog import CatalogRepository
from wishcart.services.option_codec import OptionCodec
from wishcart.services.wishlist_store import WishlistStore

logger = logging.getLogger(__name__)

OUT_OF_STOCK_REASON = "One or more items are out of stock"
MISSING_PRODUCT_REASON = "The product that was requested doesn't exist"
ERROR_SEPARATOR = "; "


class MergeState(str, Enum):
    MATCHED = "matched"
    INSERTED = "inserted"
    OUT_OF_STOCK = "out_of_stock"
    TRANSFER_FAILED = "transfer_failed"


TRANSFERRED = (MergeState.MATCHED, MergeState.INSERTED)


@dataclass
class ItemOutcome:
    item_id: Optional[str]
    sku: str
    state: MergeState
    message: Optional[str] = None


@dataclass
class MergeReport:
    outcomes: List[ItemOutcome] = field(default_factory=list)
    deleted_count: int = 0

    def count(self, state: MergeState) -> int:
        return sum(1 for o in self.outcomes if o.state == state)

    @property
    def transferred(self) -> int:
        return sum(1 for o in self.outcomes if o.state in TRANSFERRED)

    @property
    def errors(self) -> List[str]:
        return [o.message for o in self.outcomes if o.state not in TRANSFERRED and o.message]


def _item_message(reason: str, product_name: str) -> str:
    return f'{reason.strip(".")} for "{product_name}"'


class MergeEngine:
    def __init__(self, catalog: CatalogRepository, cart_store: CartStore,
                 wishlist_store: WishlistStore, codec: Optional[OptionCodec] = None):
        self.catalog = catalog
        self.cart_store = cart_store
        self.wishlist_store = wishlist_store
        self.codec = codec or OptionCodec()

    def _item_sku(self, item: WishlistItem) -> str:
        if item.sku:
            return item.sku
        product = self.catalog.get_product_by_id(item.product_id)
        return product.sku if product else ""

    def resolve_buy_request(self, item: WishlistItem) -> Dict[str, Any]:
        """
        Structured buy requests are reused; raw ones carrying option tokens are
        rebuilt through the option codec.
        """
        buy_request = dict(item.buy_request)
        if not item.needs_reconstruction:
            return buy_request
        decoded = self.codec.build_buy_request(
            buy_request.pop("selected_options", None),
            buy_request.pop("entered_options", None),
            item.product_id or None,
        )
        buy_request.update(decoded)
        return buy_request

    def _insert(self, cart: Cart, sku: str, item: WishlistItem, buy_request: Dict[str, Any]) -> ItemOutcome:
        product = self.catalog.get_product_by_sku(sku) or self.catalog.get_product_by_id(item.product_id)
        if product is None:
            return ItemOutcome(item.id, sku, MergeState.TRANSFER_FAILED, _item_message(MISSING_PRODUCT_REASON, sku))
        try:
            if not self.catalog.get_stock_status(product.id).in_stock:
                return ItemOutcome(item.id, sku, MergeState.OUT_OF_STOCK,
                                   _item_message(OUT_OF_STOCK_REASON, product.name))
            line = self.cart_store.add_line_item(cart, product, {**buy_request, "qty": item.quantity})
        except (WishlistError, ValueError) as e:
            return ItemOutcome(item.id, sku, MergeState.TRANSFER_FAILED, _item_message(str(e), product.name))
        if isinstance(line, str):
            return ItemOutcome(item.id, sku, MergeState.TRANSFER_FAILED, _item_message(line, product.name))
        return ItemOutcome(item.id, sku, MergeState.INSERTED)

    def merge(self, cart: Cart, wishlist: Wishlist, drain: bool = False) -> MergeReport:
        """
        Reconcile `wishlist` into `cart` in memory. With `drain` every wishlist
        item is removed whatever its outcome (shared wishlists are single use);
        otherwise only transferred items are.
        """
        cart_index = {line.sku: line for line in list(cart.items)}
        wishlist_index: Dict[str, WishlistItem] = {}
        for item in list(wishlist.items):
            # duplicate SKUs: the last item wins
            wishlist_index[self._item_sku(item)] = item

        matched = [(sku, item) for sku, item in wishlist_index.items() if sku in cart_index]
        pending = [(sku, item) for sku, item in wishlist_index.items() if sku not in cart_index]

        # decode every option before touching anything: a malformed one aborts the move
        prepared: List[Tuple[str, WishlistItem, Dict[str, Any]]] = [
            (sku, item, self.resolve_buy_request(item)) for sku, item in pending
        ]

        report = MergeReport()
        for sku, item in matched:
            cart_index[sku].add_quantity(item.quantity)
            report.outcomes.append(ItemOutcome(item.id, sku, MergeState.MATCHED))

        for sku, item, buy_request in prepared:
            outcome = self._insert(cart, sku, item, buy_request)
            logger.debug("Wishlist item %s (%s): %s", item.id, sku, outcome.state.value)
            report.outcomes.append(outcome)

        if drain:
            to_delete = [it.id for it in wishlist.items]
        else:
            to_delete = [o.item_id for o in report.outcomes if o.state in TRANSFERRED]
        report.deleted_count = wishlist.remove_items(to_delete)
        return report

    def move(self, cart: Cart, wishlist: Wishlist, drain: bool = False) -> MergeReport:
        """
        Merge, persist cart and wishlist once each, then surface item failures.

        A StorageError leaves the in-memory merge applied and possibly one of
        the two saves done; callers should re-read both entities.
        """
        had_items = wishlist.items_count > 0
        report = self.merge(cart, wishlist, drain=drain)

        try:
            self.cart_store.save(cart)
            self.wishlist_store.save(wishlist)
        except StorageError as e:
            raise StorageError("There was an error when trying to save wishlist items to cart") from e

        logger.info(
            "Moved wishlist %s to cart %s: matched=%d inserted=%d out_of_stock=%d failed=%d deleted=%d",
            wishlist.id, cart.id,
            report.count(MergeState.MATCHED), report.count(MergeState.INSERTED),
            report.count(MergeState.OUT_OF_STOCK), report.count(MergeState.TRANSFER_FAILED),
            report.deleted_count,
        )

        errors = report.errors
        if errors:
            raise InputError(ERROR_SEPARATOR.join(errors), errors=errors)
        # every failure built by _insert carries a message, so this only fires
        # for outcomes without one
        if had_items and report.transferred == 0:
            raise InputError("Could not save any wishlist items")
        return report
