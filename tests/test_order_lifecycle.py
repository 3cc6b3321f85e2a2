"""Order state machine: transition table, customer cancel, partner assignment and status updates."""
import pytest
from fastapi.testclient import TestClient

from aesthco.core.errors import IllegalTransition
from aesthco.models import UserRole
from aesthco.models.order import OrderStatus as S
from aesthco.services import order_lifecycle as lifecycle


# ---------- Saf kurallar ----------
@pytest.mark.parametrize(
    "current,target",
    [
        (S.PLACED, S.CONFIRMED),
        (S.PLACED, S.DELIVERED),
        (S.CONFIRMED, S.PACKED),
        (S.PACKED, S.OUT_FOR_DELIVERY),
        (S.PACKED, S.CANCELLED),
        (S.OUT_FOR_DELIVERY, S.DELIVERED),
        (S.DELIVERED, S.RETURN_REQUESTED),
        (S.RETURN_REQUESTED, S.RETURNED),
    ],
)
def test_allowed_transitions(current, target):
    assert lifecycle.can_transition(current, target)
    lifecycle.check_transition(current.value, target.value)


@pytest.mark.parametrize(
    "current,target",
    [
        (S.CONFIRMED, S.PLACED),
        (S.OUT_FOR_DELIVERY, S.PACKED),
        (S.OUT_FOR_DELIVERY, S.CANCELLED),
        (S.DELIVERED, S.CANCELLED),
        (S.CANCELLED, S.PLACED),
        (S.RETURNED, S.DELIVERED),
        (S.PLACED, S.RETURN_REQUESTED),
    ],
)
def test_rejected_transitions(current, target):
    assert not lifecycle.can_transition(current, target)
    with pytest.raises(IllegalTransition):
        lifecycle.check_transition(current, target)


def test_same_status_only_when_allowed():
    with pytest.raises(IllegalTransition):
        lifecycle.check_transition(S.PACKED, S.PACKED)
    lifecycle.check_transition(S.PACKED, S.PACKED, allow_same=True)


def test_terminal_states():
    assert {s for s in S if lifecycle.is_terminal(s)} == {S.CANCELLED, S.RETURNED}


@pytest.mark.parametrize("status", list(S))
def test_customer_cancel_window(status):
    assert lifecycle.customer_can_cancel(status) == (status in (S.PLACED, S.CONFIRMED))


@pytest.mark.parametrize(
    "target,expected",
    [(S.DELIVERED, "paid"), (S.CANCELLED, "cancelled"), (S.PACKED, "pending"), (S.RETURNED, "pending")],
)
def test_payment_status_follows_cod(target, expected):
    assert lifecycle.payment_status_after(target, "pending") == expected


def test_delivery_code_is_six_digits():
    codes = {lifecycle.generate_delivery_code() for _ in range(50)}
    assert all(len(c) == 6 and c.isdigit() for c in codes)
    assert len(codes) > 1


# ---------- HTTP ----------
@pytest.fixture
def placed(client: TestClient, factory):
    """Bir müşteri siparişi: (customer, order_id)."""
    customer = factory.user(email="buyer@example.com")
    address = factory.address(customer)
    factory.purchasable(customer)
    r = client.post("/orders", json={"address_id": address.id}, headers=factory.headers(customer))
    assert r.status_code == 201
    return customer, r.json()["id"]


@pytest.fixture
def partner(factory):
    return factory.user(role=UserRole.PARTNER, email="rider@example.com")


def _set_status(client, factory, partner, order_id, status):
    return client.patch(
        f"/orders/partner/{order_id}/status", json={"status": status}, headers=factory.headers(partner)
    )


def test_customer_cancels_placed_order(client: TestClient, factory, placed, notifier):
    customer, order_id = placed
    r = client.patch(f"/orders/{order_id}/cancel", headers=factory.headers(customer))
    assert r.status_code == 200
    assert r.json()["status"] == "CANCELLED"
    assert r.json()["payment_status"] == "cancelled"
    assert ("status", order_id, "CANCELLED", "buyer@example.com") in notifier.calls


def test_customer_cannot_cancel_after_packing(client: TestClient, factory, placed, partner):
    customer, order_id = placed
    assert _set_status(client, factory, partner, order_id, "PACKED").status_code == 200
    r = client.patch(f"/orders/{order_id}/cancel", headers=factory.headers(customer))
    assert r.status_code == 409
    assert r.json()["code"] == "order_not_cancellable"


def test_cancel_notifies_assigned_partner(client: TestClient, factory, placed, partner, notifier):
    customer, order_id = placed
    client.patch(f"/orders/partner/{order_id}/accept", headers=factory.headers(partner))
    client.patch(f"/orders/{order_id}/cancel", headers=factory.headers(customer))
    assert ("cancelled", order_id, "rider@example.com") in notifier.calls


def test_customer_cannot_see_or_cancel_foreign_order(client: TestClient, factory, placed):
    _, order_id = placed
    stranger = factory.user()
    assert client.get(f"/orders/{order_id}", headers=factory.headers(stranger)).status_code == 404
    r = client.patch(f"/orders/{order_id}/cancel", headers=factory.headers(stranger))
    assert r.status_code == 404
    assert r.json()["code"] == "order_not_found"


def test_customer_lists_own_orders(client: TestClient, factory, placed):
    customer, order_id = placed
    r = client.get("/orders", headers=factory.headers(customer))
    assert [o["id"] for o in r.json()] == [order_id]
    assert client.get("/orders", headers=factory.headers(factory.user())).json() == []


def test_partner_accept_assigns_and_blocks_others(client: TestClient, factory, placed, partner):
    _, order_id = placed
    r = client.patch(f"/orders/partner/{order_id}/accept", headers=factory.headers(partner))
    assert r.status_code == 200
    assert r.json()["assigned_partner_id"] == partner.id
    # tekrar kabul: değişiklik yok
    assert client.patch(f"/orders/partner/{order_id}/accept", headers=factory.headers(partner)).status_code == 200

    rival = factory.user(role=UserRole.PARTNER)
    r = client.patch(f"/orders/partner/{order_id}/accept", headers=factory.headers(rival))
    assert r.status_code == 403
    assert r.json()["code"] == "order_assigned_elsewhere"
    r = _set_status(client, factory, rival, order_id, "PACKED")
    assert r.status_code == 403


def test_first_status_update_assigns_partner(client: TestClient, factory, placed, partner):
    _, order_id = placed
    r = _set_status(client, factory, partner, order_id, "CONFIRMED")
    assert r.status_code == 200
    assert r.json()["assigned_partner_id"] == partner.id


def test_delivery_marks_paid_and_sends_code(client: TestClient, factory, placed, partner, notifier):
    _, order_id = placed
    for status in ("CONFIRMED", "PACKED", "OUT_FOR_DELIVERY", "DELIVERED"):
        r = _set_status(client, factory, partner, order_id, status)
        assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "DELIVERED"
    assert body["payment_status"] == "paid"
    assert "delivery_code" not in body

    codes = [c for c in notifier.calls if c[0] == "delivery_code"]
    assert len(codes) == 1
    _, oid, to, code = codes[0]
    assert (oid, to) == (order_id, "rider@example.com")
    assert len(code) == 6 and code.isdigit()
    statuses = [c[2] for c in notifier.calls if c[0] == "status"]
    assert statuses == ["PLACED", "CONFIRMED", "PACKED", "OUT_FOR_DELIVERY", "DELIVERED"]


def test_partner_cancel_marks_payment_cancelled(client: TestClient, factory, placed, partner):
    _, order_id = placed
    r = _set_status(client, factory, partner, order_id, "CANCELLED")
    assert r.json()["payment_status"] == "cancelled"
    r = _set_status(client, factory, partner, order_id, "CONFIRMED")
    assert r.status_code == 409
    assert r.json()["code"] == "illegal_transition"


def test_backward_move_is_rejected(client: TestClient, factory, placed, partner):
    _, order_id = placed
    _set_status(client, factory, partner, order_id, "OUT_FOR_DELIVERY")
    r = _set_status(client, factory, partner, order_id, "PACKED")
    assert r.status_code == 409


def test_same_status_is_accepted_and_renotifies(client: TestClient, factory, placed, partner, notifier):
    _, order_id = placed
    _set_status(client, factory, partner, order_id, "PACKED")
    r = _set_status(client, factory, partner, order_id, "PACKED")
    assert r.status_code == 200
    assert [c[2] for c in notifier.calls if c[0] == "status"].count("PACKED") == 2


def test_patch_on_order_path_uses_same_rules(client: TestClient, factory, placed, partner):
    _, order_id = placed
    r = client.patch(f"/orders/{order_id}", json={"status": "CONFIRMED"}, headers=factory.headers(partner))
    assert r.status_code == 200
    assert r.json()["status"] == "CONFIRMED"
    r = client.patch(f"/orders/{order_id}", json={"status": "PLACED"}, headers=factory.headers(partner))
    assert r.status_code == 409


def test_unknown_status_is_validation_error(client: TestClient, factory, placed, partner):
    _, order_id = placed
    r = _set_status(client, factory, partner, order_id, "SHIPPED")
    assert r.status_code == 422
    assert r.json()["code"] == "validation_error"


def test_customer_cannot_use_partner_endpoints(client: TestClient, factory, placed):
    customer, order_id = placed
    r = _set_status(client, factory, customer, order_id, "CONFIRMED")
    assert r.status_code == 403


def test_partner_and_admin_listings(client: TestClient, factory, placed, partner):
    _, order_id = placed
    admin = factory.user(role=UserRole.SUPER_ADMIN)
    r = client.get("/orders/partner/list", headers=factory.headers(partner))
    assert [o["id"] for o in r.json()] == [order_id]
    assert client.get("/orders/partner/list?status=PACKED", headers=factory.headers(partner)).json() == []
    r = client.get(f"/orders/partner/{order_id}", headers=factory.headers(partner))
    assert r.json()["items"][0]["quantity"] == 2

    r = client.get("/orders/admin/list?status=PLACED", headers=factory.headers(admin))
    assert [o["id"] for o in r.json()] == [order_id]
    assert client.get(f"/orders/admin/{order_id}", headers=factory.headers(admin)).status_code == 200
    assert client.get("/orders/admin/OD1", headers=factory.headers(admin)).status_code == 404
    assert client.get("/orders/admin/list", headers=factory.headers(partner)).status_code == 403
