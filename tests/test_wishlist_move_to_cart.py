import pytest

from wishcart.database import db as file_db
from wishcart.services.mailer import Mailer


@pytest.fixture
def add_item(client, auth_header):
    def _fn(customer_id, sku, quantity=1):
        resp = client.post("/api/wishlist/items", json={"sku": sku, "quantity": quantity},
                           headers=auth_header(customer_id))
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _fn


def _my_cart(client, hdr):
    resp = client.get("/api/cart/mine", headers=hdr)
    assert resp.status_code == 200, resp.text
    return {line["sku"]: line["quantity"] for line in resp.json()["items"]}


def test_move_wishlist_to_customer_cart(customer, make_product, client, auth_header, add_item):
    hdr = auth_header(customer["id"])
    a = make_product(name="Lamp")
    b = make_product(name="Vase")
    add_item(customer["id"], a["sku"], 2)
    add_item(customer["id"], b["sku"], 1)

    resp = client.post("/api/wishlist/move-to-cart", json={}, headers=hdr)

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True
    assert body["deleted_count"] == 2
    assert {o["state"] for o in body["outcomes"]} == {"inserted"}
    assert _my_cart(client, hdr) == {a["sku"]: 2, b["sku"]: 1}
    assert client.get("/api/wishlist", headers=hdr).json()["items_count"] == 0


def test_move_adds_to_existing_cart_lines(customer, make_product, client, auth_header, add_item):
    hdr = auth_header(customer["id"])
    a = make_product()
    add_item(customer["id"], a["sku"], 3)
    client.post("/api/wishlist/move-to-cart", headers=hdr)
    add_item(customer["id"], a["sku"], 2)

    resp = client.post("/api/wishlist/move-to-cart", headers=hdr)

    assert resp.status_code == 200, resp.text
    assert resp.json()["outcomes"][0]["state"] == "matched"
    assert _my_cart(client, hdr) == {a["sku"]: 5}


def test_move_reports_out_of_stock_items(customer, make_product, client, auth_header, add_item):
    hdr = auth_header(customer["id"])
    a = make_product(name="Lamp")
    b = make_product(name="Chair", stock="0")
    add_item(customer["id"], a["sku"])
    add_item(customer["id"], b["sku"])

    resp = client.post("/api/wishlist/move-to-cart", headers=hdr)

    assert resp.status_code == 400
    assert resp.json()["detail"] == 'One or more items are out of stock for "Chair"'
    assert resp.json()["errors"] == ['One or more items are out of stock for "Chair"']
    assert _my_cart(client, hdr) == {a["sku"]: 1}
    items = client.get("/api/wishlist", headers=hdr).json()["items"]
    assert [it["sku"] for it in items] == [b["sku"]]


def test_move_empty_wishlist_is_a_no_op(customer, client, auth_header):
    resp = client.post("/api/wishlist/move-to-cart", headers=auth_header(customer["id"]))
    assert resp.status_code == 200, resp.text
    assert resp.json()["deleted_count"] == 0


def test_move_without_customer_or_guest_cart(client):
    resp = client.post("/api/wishlist/move-to-cart", json={})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "User not found"


def test_shared_wishlist_is_drained_into_guest_cart(customer, make_product, client, auth_header,
                                                   add_item, monkeypatch):
    monkeypatch.setattr(Mailer, "send", lambda self, *args, **kwargs: None)
    hdr = auth_header(customer["id"])
    a = make_product(name="Lamp")
    b = make_product(name="Chair", stock="0")
    add_item(customer["id"], a["sku"])
    add_item(customer["id"], b["sku"])
    client.post("/api/wishlist/share", json={"emails": ["friend@example.com"]}, headers=hdr)
    code = client.get("/api/wishlist", headers=hdr).json()["sharing_code"]
    guest = client.post("/api/cart/guest").json()

    resp = client.post("/api/wishlist/move-to-cart",
                       json={"sharing_code": code, "guest_cart_id": guest["guest_token"]})

    # the out-of-stock item is reported but still removed from the shared list
    assert resp.status_code == 400
    cart = client.get(f"/api/cart/guest/{guest['guest_token']}").json()
    assert [line["sku"] for line in cart["items"]] == [a["sku"]]
    assert client.get("/api/wishlist", headers=hdr).json()["items_count"] == 0


def test_move_unknown_sharing_code(customer, client, auth_header):
    resp = client.post("/api/wishlist/move-to-cart", json={"sharing_code": "nope"},
                       headers=auth_header(customer["id"]))
    assert resp.status_code == 404


def test_move_into_unknown_guest_cart(client):
    resp = client.post("/api/wishlist/move-to-cart", json={"guest_cart_id": "missing"})
    assert resp.status_code == 404
    assert file_db.list_records("carts") == []


def test_fractional_quantity_reaches_the_cart(customer, make_product, client, auth_header, add_item):
    hdr = auth_header(customer["id"])
    a = make_product(name="Fabric by the metre")
    add_item(customer["id"], a["sku"], 0.5)

    resp = client.post("/api/wishlist/move-to-cart", headers=hdr)

    assert resp.status_code == 200, resp.text
    assert _my_cart(client, hdr) == {a["sku"]: 0.5}
