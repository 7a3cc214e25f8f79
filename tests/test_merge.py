import pytest

from wishcart.core.errors import InputError, MalformedOptionError, StorageError
from wishcart.database import db as file_db
from wishcart.models.wishlist import WishlistItem
from wishcart.services.cart_store import CartStore
from wishcart.services.catalog import CatalogRepository
from wishcart.services.merge import ItemOutcome, MergeEngine, MergeState
from wishcart.services.option_codec import OptionCodec, encode_token
from wishcart.services.wishlist_store import WishlistStore


@pytest.fixture
def engine():
    return MergeEngine(CatalogRepository(file_db), CartStore(file_db), WishlistStore(file_db), OptionCodec())


def _cart_with(engine, customer_id, *lines):
    cart = engine.cart_store.get_or_create_cart_for_customer(customer_id)
    for product, qty in lines:
        engine.cart_store.add_line_item(cart, engine.catalog.get_product_by_sku(product["sku"]), {"qty": qty})
    return engine.cart_store.save(cart)


def _wishlist_with(engine, customer_id, *entries):
    wishlist = engine.wishlist_store.load_by_customer_id(customer_id, create=True)
    for product, qty, buy_request in entries:
        wishlist.add_item(WishlistItem(
            wishlist_id=wishlist.id, product_id=product["id"], sku=product["sku"],
            quantity=qty, buy_request=buy_request or {},
        ))
    return engine.wishlist_store.save(wishlist)


def _quantities(cart):
    return {line.sku: line.quantity for line in cart.items}


def test_move_combines_matching_lines_and_inserts_new_ones(engine, make_product):
    a = make_product(name="Lamp A")
    b = make_product(name="Vase B")
    cart = _cart_with(engine, "c1", (a, 3))
    wishlist = _wishlist_with(engine, "c1", (a, 2, None), (b, 1, None))

    report = engine.move(cart, wishlist)

    assert report.count(MergeState.MATCHED) == 1
    assert report.count(MergeState.INSERTED) == 1
    assert report.deleted_count == 2
    stored_cart = engine.cart_store.get_or_create_cart_for_customer("c1")
    assert _quantities(stored_cart) == {a["sku"]: 5, b["sku"]: 1}
    assert engine.wishlist_store.load_by_customer_id("c1").items == []


def test_out_of_stock_item_stays_and_is_reported(engine, make_product):
    a = make_product(name="Lamp A")
    b = make_product(name="Sold Out Chair", stock="0")
    cart = _cart_with(engine, "c2")
    wishlist = _wishlist_with(engine, "c2", (a, 1, None), (b, 2, None))

    with pytest.raises(InputError) as exc:
        engine.move(cart, wishlist)

    assert exc.value.message == 'One or more items are out of stock for "Sold Out Chair"'
    # the successful part was saved before the error surfaced
    assert _quantities(engine.cart_store.get_or_create_cart_for_customer("c2")) == {a["sku"]: 1}
    remaining = engine.wishlist_store.load_by_customer_id("c2").items
    assert [it.sku for it in remaining] == [b["sku"]]
    assert remaining[0].quantity == 2


def test_item_failures_are_collected_not_short_circuited(engine, make_product):
    shirt = make_product(name="Shirt", type_id="configurable")
    chair = make_product(name="Chair", is_in_stock="0")
    lamp = make_product(name="Lamp")
    cart = _cart_with(engine, "c3")
    wishlist = _wishlist_with(engine, "c3", (shirt, 1, None), (chair, 1, None), (lamp, 1, None))

    with pytest.raises(InputError) as exc:
        engine.move(cart, wishlist)

    assert exc.value.errors == [
        'You need to choose options for your item for "Shirt"',
        'One or more items are out of stock for "Chair"',
    ]
    assert exc.value.message == "; ".join(exc.value.errors)
    assert lamp["sku"] in _quantities(engine.cart_store.get_or_create_cart_for_customer("c3"))


def test_drain_removes_every_item_whatever_the_outcome(engine, make_product):
    a = make_product(name="Lamp")
    b = make_product(name="Chair", stock="0")
    cart = _cart_with(engine, "c4")
    wishlist = _wishlist_with(engine, "c4", (a, 1, None), (b, 1, None))

    report = engine.merge(cart, wishlist, drain=True)

    assert report.deleted_count == 2
    assert wishlist.items == []
    assert report.count(MergeState.OUT_OF_STOCK) == 1


def test_duplicate_skus_last_item_wins(engine, make_product):
    a = make_product()
    cart = _cart_with(engine, "c5")
    wishlist = _wishlist_with(engine, "c5", (a, 1, None), (a, 4, None))

    engine.merge(cart, wishlist)

    assert _quantities(cart) == {a["sku"]: 4}


def test_raw_option_tokens_are_reconstructed(engine, make_product):
    bundle = make_product(name="Gift Box", type_id="bundle")
    cart = _cart_with(engine, "c6")
    raw = {"selected_options": [encode_token("bundle", "5", "12", "2")]}
    wishlist = _wishlist_with(engine, "c6", (bundle, 1, raw))

    engine.move(cart, wishlist)

    line = engine.cart_store.get_or_create_cart_for_customer("c6").items[0]
    assert line.selected_options["bundle_option"] == {"5": ["12"]}
    assert line.selected_options["bundle_option_qty"] == {"5": [2]}


def test_malformed_option_aborts_before_any_change(engine, make_product):
    a = make_product()
    b = make_product(type_id="bundle")
    cart = _cart_with(engine, "c7", (a, 1))
    wishlist = _wishlist_with(engine, "c7", (a, 1, None), (b, 1, {"selected_options": ["%%%"]}))

    with pytest.raises(MalformedOptionError):
        engine.move(cart, wishlist)

    assert _quantities(cart) == {a["sku"]: 1}
    assert wishlist.items_count == 2


def test_nothing_transferred_without_item_errors_raises(engine, make_product, monkeypatch):
    a = make_product()
    cart = _cart_with(engine, "c8")
    wishlist = _wishlist_with(engine, "c8", (a, 1, None))

    def silent_failure(_cart, sku, item, _buy_request):
        return ItemOutcome(item.id, sku, MergeState.TRANSFER_FAILED)

    monkeypatch.setattr(engine, "_insert", silent_failure)

    with pytest.raises(InputError) as exc:
        engine.move(cart, wishlist)
    assert exc.value.message == "Could not save any wishlist items"
    assert wishlist.items_count == 1


def test_storage_failure_is_reported_distinctly(engine, make_product, monkeypatch):
    a = make_product()
    cart = _cart_with(engine, "c9")
    wishlist = _wishlist_with(engine, "c9", (a, 1, None))

    def broken_save(_wishlist):
        raise StorageError("Failed to save wishlist")

    monkeypatch.setattr(engine.wishlist_store, "save", broken_save)

    with pytest.raises(StorageError) as exc:
        engine.move(cart, wishlist)
    assert exc.value.message == "There was an error when trying to save wishlist items to cart"
    # the cart was already written
    assert a["sku"] in _quantities(engine.cart_store.get_or_create_cart_for_customer("c9"))


def test_fractional_quantities_are_kept(engine, make_product):
    a = make_product(name="Fabric")
    b = make_product(name="Ribbon")
    cart = _cart_with(engine, "c10", (a, 3))
    wishlist = _wishlist_with(engine, "c10", (a, 2.5, None), (b, 0.5, None))

    engine.move(cart, wishlist)

    stored = engine.cart_store.get_or_create_cart_for_customer("c10")
    assert _quantities(stored) == {a["sku"]: 5.5, b["sku"]: 0.5}
