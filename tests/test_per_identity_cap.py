"""Per-identity coupon cap: any of user id, email or phone ties a redemption to a person."""
from fastapi.testclient import TestClient
from sqlmodel import Session

from aesthco.core import database
from aesthco.models import CouponRedemption
from aesthco.services.coupon import Identity, count_identity_redemptions


def _checkout(client, factory, user, code="WELCOME"):
    address = factory.address(user)
    factory.purchasable(user)
    return client.post(
        "/orders", json={"address_id": address.id, "coupon_code": code}, headers=factory.headers(user)
    )


def test_same_user_cannot_reuse_single_use_coupon(client: TestClient, factory):
    factory.coupon(code="WELCOME", per_user_limit=1)
    user = factory.user()
    assert _checkout(client, factory, user).status_code == 201

    r = _checkout(client, factory, user)
    assert r.status_code == 409
    assert r.json()["code"] == "invalid_coupon"
    assert r.json()["reason"] == "user_limit_reached"


def test_second_account_with_same_phone_is_blocked(client: TestClient, factory):
    factory.coupon(code="WELCOME")
    first = factory.user(phone="+919822222222")
    second = factory.user(phone="+919822222222")
    assert _checkout(client, factory, first).status_code == 201

    r = _checkout(client, factory, second)
    assert r.status_code == 409
    assert r.json()["reason"] == "user_limit_reached"


def test_unrelated_account_is_not_blocked(client: TestClient, factory):
    factory.coupon(code="WELCOME")
    assert _checkout(client, factory, factory.user(phone="+919833333333")).status_code == 201
    assert _checkout(client, factory, factory.user(phone="+919844444444")).status_code == 201


def test_per_user_limit_above_one(client: TestClient, factory):
    factory.coupon(code="WELCOME", per_user_limit=2)
    user = factory.user()
    assert _checkout(client, factory, user).status_code == 201
    assert _checkout(client, factory, user).status_code == 201
    assert _checkout(client, factory, user).json()["reason"] == "user_limit_reached"


def test_email_match_is_case_insensitive(factory):
    coupon = factory.coupon(code="WELCOME")
    user = factory.user()
    with Session(database.engine) as s:
        s.add(CouponRedemption(coupon_id=coupon.id, email="Guest@Example.com", discount_amount=100))
        s.commit()
    with Session(database.engine) as s:
        guest = Identity.of(None, "guest@example.COM", None)
        assert count_identity_redemptions(s, coupon.id, guest) == 1
        stranger = Identity.of(user.id, "other@example.com", "+919855555555")
        assert count_identity_redemptions(s, coupon.id, stranger) == 0


def test_preview_reports_limit_without_consuming(client: TestClient, factory):
    factory.coupon(code="WELCOME")
    user = factory.user()
    headers = factory.headers(user)
    for _ in range(2):
        r = client.post("/coupons/validate", json={"code": "welcome", "order_amount": 100000}, headers=headers)
        assert r.status_code == 200
    assert _checkout(client, factory, user).status_code == 201

    r = client.post("/coupons/validate", json={"code": "WELCOME", "order_amount": 100000}, headers=headers)
    assert r.status_code == 409
    assert r.json()["code"] == "limit_reached"
    assert r.json()["reason"] == "user_limit_reached"
