# wishcart/services/wishlist_store.py
from typing import List, Optional
import logging
import uuid

from wishcart.core.errors import StorageError
from wishcart.database import FileBackedDB, db as default_db
from wishcart.models.wishlist import Wishlist, WishlistItem, generate_sharing_code

logger = logging.getLogger(__name__)


class WishlistStore:
    """
    Wishlists live in the `wishlists` table, their items in `wishlist_items`.
    Item changes are made on the in-memory Wishlist and written by `save`.
    """

    def __init__(self, db: Optional[FileBackedDB] = None):
        self.db = db or default_db

    def _items_for(self, wishlist_id: str) -> List[WishlistItem]:
        rows = self.db.find_records("wishlist_items", "wishlist_id", wishlist_id)
        return [WishlistItem.from_dict(r) for r in rows]

    def _hydrate(self, row) -> Wishlist:
        wishlist = Wishlist.from_dict(row)
        wishlist.items = self._items_for(wishlist.id)
        return wishlist

    def load_by_customer_id(self, customer_id: str, create: bool = False) -> Optional[Wishlist]:
        row = self.db.get_record("wishlists", "customer_id", customer_id) if customer_id else None
        if row:
            return self._hydrate(row)
        if not create:
            return None
        # not persisted until the first save
        return Wishlist(id=uuid.uuid4().hex, customer_id=str(customer_id), sharing_code=generate_sharing_code())

    def load_by_sharing_code(self, sharing_code: str) -> Optional[Wishlist]:
        row = self.db.get_record("wishlists", "sharing_code", sharing_code) if sharing_code else None
        return self._hydrate(row) if row else None

    def get_item(self, item_id: str) -> Optional[WishlistItem]:
        row = self.db.get_record("wishlist_items", "id", item_id) if item_id else None
        return WishlistItem.from_dict(row) if row else None

    def delete_item(self, wishlist: Wishlist, item: WishlistItem) -> None:
        wishlist.remove_items([item.id])

    def save(self, wishlist: Wishlist) -> Wishlist:
        if not wishlist.id:
            wishlist.id = uuid.uuid4().hex
        if not wishlist.sharing_code:
            wishlist.sharing_code = generate_sharing_code()
        wishlist.touch()
        for item in wishlist.items:
            item.wishlist_id = wishlist.id
            if not item.id:
                item.id = uuid.uuid4().hex
        try:
            self.db.upsert_record("wishlists", "id", wishlist.to_dict())
            self.db.replace_records(
                "wishlist_items", "wishlist_id", wishlist.id, [it.to_dict() for it in wishlist.items]
            )
        except Exception as e:
            logger.error("Failed to save wishlist %s: %s", wishlist.id, e)
            raise StorageError("Failed to save wishlist") from e
        return wishlist
