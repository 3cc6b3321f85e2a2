"""Cart, address book and shipping-setting endpoints."""
from fastapi.testclient import TestClient

from aesthco.models import UserRole


# ---------- Sepet ----------
def test_add_to_cart_and_merge_same_line(client: TestClient, factory):
    user = factory.user()
    headers = factory.headers(user)
    product = factory.product()
    color = factory.color("Black")
    r = client.post("/cart", json={"product_id": product.id, "color_id": color.id, "quantity": 1}, headers=headers)
    assert r.status_code == 201
    item_id = r.json()["id"]

    r = client.post("/cart", json={"product_id": product.id, "color_id": color.id, "quantity": 2}, headers=headers)
    assert r.status_code == 200
    assert r.json() == {"id": item_id, "product_id": product.id, "color_id": color.id, "size_id": None, "quantity": 3}

    # farklı renk ayrı satır
    r = client.post("/cart", json={"product_id": product.id}, headers=headers)
    assert r.status_code == 201
    assert len(client.get("/cart", headers=headers).json()) == 2


def test_add_rejects_missing_or_inactive_product(client: TestClient, factory):
    headers = factory.headers(factory.user())
    r = client.post("/cart", json={"product_id": 999}, headers=headers)
    assert r.status_code == 404
    assert r.json()["code"] == "product_not_found"
    hidden = factory.product(is_active=False)
    r = client.post("/cart", json={"product_id": hidden.id}, headers=headers)
    assert r.status_code == 409
    assert r.json()["code"] == "product_inactive"
    r = client.post("/cart", json={"product_id": hidden.id, "quantity": 0}, headers=headers)
    assert r.status_code == 422


def test_update_and_remove_cart_items(client: TestClient, factory):
    user = factory.user()
    headers = factory.headers(user)
    product = factory.product()
    item = factory.cart_item(user, product)
    r = client.put(f"/cart/{item.id}", json={"quantity": 5}, headers=headers)
    assert r.status_code == 200
    assert r.json()["quantity"] == 5
    assert client.delete(f"/cart/{item.id}", headers=headers).status_code == 204
    assert client.get("/cart", headers=headers).json() == []


def test_cart_items_are_private(client: TestClient, factory):
    owner = factory.user()
    item = factory.cart_item(owner, factory.product())
    stranger = factory.headers(factory.user())
    r = client.put(f"/cart/{item.id}", json={"quantity": 2}, headers=stranger)
    assert r.status_code == 404
    assert r.json()["code"] == "cart_item_not_found"
    assert client.delete(f"/cart/{item.id}", headers=stranger).status_code == 404
    assert len(client.get("/cart", headers=factory.headers(owner)).json()) == 1


def test_clear_cart(client: TestClient, factory):
    user = factory.user()
    headers = factory.headers(user)
    factory.cart_item(user, factory.product())
    factory.cart_item(user, factory.product())
    assert client.delete("/cart", headers=headers).status_code == 204
    assert client.get("/cart", headers=headers).json() == []


# ---------- Adresler ----------
def test_first_address_becomes_default_and_inherits_profile(client: TestClient, factory):
    user = factory.user(full_name="Asha Rao", phone="+919800000001")
    headers = factory.headers(user)
    body = {"address_line1": " 12 MG Road ", "city": "Bengaluru", "state": "KA"}
    r = client.post("/addresses", json=body, headers=headers)
    assert r.status_code == 201
    a = r.json()
    assert a["is_default"] is True
    assert a["name"] == "Asha Rao"
    assert a["phone_number"] == "+919800000001"
    assert a["address_line1"] == "12 MG Road"
    assert a["address_type"] == "home"


def test_new_default_address_replaces_old(client: TestClient, factory):
    user = factory.user()
    headers = factory.headers(user)
    base = {"address_line1": "1 Main St", "city": "Pune", "state": "MH"}
    first = client.post("/addresses", json=base, headers=headers).json()
    second = client.post("/addresses", json={**base, "is_default": True, "address_type": "Work"}, headers=headers).json()
    assert second["address_type"] == "work"
    listed = client.get("/addresses", headers=headers).json()
    assert [(a["id"], a["is_default"]) for a in listed] == [(second["id"], True), (first["id"], False)]


def test_address_validation(client: TestClient, factory):
    headers = factory.headers(factory.user())
    r = client.post("/addresses", json={"address_line1": "  ", "city": "Pune", "state": "MH"}, headers=headers)
    assert r.status_code == 422
    r = client.post(
        "/addresses",
        json={"address_line1": "x", "city": "Pune", "state": "MH", "address_type": "castle"},
        headers=headers,
    )
    assert r.status_code == 422


def test_addresses_are_private(client: TestClient, factory):
    factory.address(factory.user())
    assert client.get("/addresses", headers=factory.headers(factory.user())).json() == []


def test_update_address_partial_and_promote(client: TestClient, factory):
    user = factory.user(full_name="Asha Rao")
    headers = factory.headers(user)
    first = factory.address(user, is_default=True)
    second = factory.address(user, city="Pune")
    r = client.put(
        f"/addresses/{second.id}",
        json={"address_line1": " 7 FC Road ", "name": " ", "postal_code": "", "is_default": True},
        headers=headers,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["address_line1"] == "7 FC Road"
    assert body["city"] == "Pune"
    assert body["name"] == "Asha Rao"
    assert body["postal_code"] is None
    assert body["is_default"] is True
    listed = client.get("/addresses", headers=headers).json()
    assert [(a["id"], a["is_default"]) for a in listed] == [(second.id, True), (first.id, False)]


def test_update_address_rejects_blank_required_and_unknown_fields(client: TestClient, factory):
    user = factory.user()
    headers = factory.headers(user)
    addr = factory.address(user)
    assert client.put(f"/addresses/{addr.id}", json={"city": "  "}, headers=headers).status_code == 422
    assert client.put(f"/addresses/{addr.id}", json={"city": None}, headers=headers).status_code == 422
    assert client.put(f"/addresses/{addr.id}", json={"user_id": 99}, headers=headers).status_code == 422


def test_set_default_address(client: TestClient, factory):
    user = factory.user()
    headers = factory.headers(user)
    first = factory.address(user, is_default=True)
    second = factory.address(user)
    r = client.post(f"/addresses/{second.id}/default", headers=headers)
    assert r.status_code == 200
    assert r.json()["is_default"] is True
    listed = client.get("/addresses", headers=headers).json()
    assert [(a["id"], a["is_default"]) for a in listed] == [(second.id, True), (first.id, False)]


def test_delete_default_address_promotes_oldest_remaining(client: TestClient, factory):
    user = factory.user()
    headers = factory.headers(user)
    first = factory.address(user)
    second = factory.address(user)
    third = factory.address(user, is_default=True)
    assert client.delete(f"/addresses/{third.id}", headers=headers).status_code == 204
    listed = client.get("/addresses", headers=headers).json()
    assert [(a["id"], a["is_default"]) for a in listed] == [(first.id, True), (second.id, False)]
    assert client.delete(f"/addresses/{second.id}", headers=headers).status_code == 204
    assert client.delete(f"/addresses/{first.id}", headers=headers).status_code == 204
    assert client.get("/addresses", headers=headers).json() == []


def test_address_changes_are_owner_only(client: TestClient, factory):
    addr = factory.address(factory.user(), is_default=True)
    other = factory.headers(factory.user())
    r = client.put(f"/addresses/{addr.id}", json={"city": "Pune"}, headers=other)
    assert r.status_code == 404
    assert r.json()["code"] == "address_not_found"
    assert client.post(f"/addresses/{addr.id}/default", headers=other).status_code == 404
    assert client.delete(f"/addresses/{addr.id}", headers=other).status_code == 404


# ---------- Kargo ayarı ----------
def test_shipping_settings_default_then_saved(client: TestClient, factory):
    customer = factory.headers(factory.user())
    admin = factory.headers(factory.user(role=UserRole.SUPER_ADMIN))

    r = client.get("/orders/shipping-settings", headers=customer)
    assert r.json() == {"id": None, "free_shipping_threshold": 199900, "shipping_fee": 0}

    r = client.post(
        "/orders/admin/shipping-settings",
        json={"free_shipping_threshold": 149900, "shipping_fee": 4900},
        headers=admin,
    )
    assert r.status_code == 201
    first_id = r.json()["id"]
    r = client.post(
        "/orders/admin/shipping-settings",
        json={"free_shipping_threshold": 99900, "shipping_fee": 5900},
        headers=admin,
    )
    assert r.json()["id"] != first_id

    r = client.get("/orders/admin/shipping-settings", headers=admin)
    assert r.json()["free_shipping_threshold"] == 99900
    assert r.json()["shipping_fee"] == 5900
    assert client.get("/orders/shipping-settings", headers=customer).json()["shipping_fee"] == 5900


def test_shipping_settings_validation_and_roles(client: TestClient, factory):
    admin = factory.headers(factory.user(role=UserRole.SUPER_ADMIN))
    customer = factory.headers(factory.user())
    r = client.post(
        "/orders/admin/shipping-settings", json={"free_shipping_threshold": -1, "shipping_fee": 0}, headers=admin
    )
    assert r.status_code == 422
    r = client.post(
        "/orders/admin/shipping-settings", json={"free_shipping_threshold": 1, "shipping_fee": 0}, headers=customer
    )
    assert r.status_code == 403
