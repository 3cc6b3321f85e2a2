"""Global coupon cap under concurrent checkouts (file-backed SQLite, real threads)."""
import threading

from sqlalchemy import func
from sqlmodel import Session, select

from aesthco.core.errors import InvalidCoupon
from aesthco.models import CouponRedemption, Order
from aesthco.services.checkout import create_order_from_cart


def _run_concurrently(engine, jobs):
    """Her iş kendi oturumunda, aynı anda başlar; (sonuç, hata) listesi döner."""
    barrier = threading.Barrier(len(jobs))
    results: list = [None] * len(jobs)

    def worker(i, user, address_id, code):
        barrier.wait()
        with Session(engine) as s:
            try:
                results[i] = (create_order_from_cart(s, user, address_id, code).order.id, None)
            except InvalidCoupon as e:
                results[i] = (None, e)

    threads = [threading.Thread(target=worker, args=(i, *job)) for i, job in enumerate(jobs)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return results


def test_global_cap_holds_under_concurrent_checkout(file_engine, file_factory):
    f = file_factory
    f.coupon(code="FLASH", global_max_redemptions=2)
    jobs = []
    for _ in range(3):
        user = f.user()
        address = f.address(user)
        f.purchasable(user)
        jobs.append((user, address.id, "FLASH"))

    results = _run_concurrently(file_engine, jobs)

    placed = [oid for oid, err in results if oid]
    failed = [err for oid, err in results if err]
    assert len(placed) == 2
    assert len(set(placed)) == 2
    assert len(failed) == 1
    assert failed[0].status_code == 409
    assert failed[0].reason == "global_limit_reached"

    with Session(file_engine) as s:
        assert s.exec(select(func.count()).select_from(CouponRedemption)).one() == 2
        assert s.exec(select(func.count()).select_from(Order)).one() == 2


def test_concurrent_checkouts_get_distinct_sequential_ids(file_engine, file_factory):
    f = file_factory
    jobs = []
    for _ in range(4):
        user = f.user()
        address = f.address(user)
        f.purchasable(user)
        jobs.append((user, address.id, None))

    results = _run_concurrently(file_engine, jobs)

    ids = sorted(oid for oid, _ in results)
    assert ids == ["OD20251", "OD20252", "OD20253", "OD20254"]


def test_same_identity_cannot_double_spend_concurrently(file_engine, file_factory):
    f = file_factory
    f.coupon(code="ONCE", per_user_limit=1)
    jobs = []
    for _ in range(2):
        # farklı hesaplar, aynı telefon
        user = f.user(phone="+919811111111")
        address = f.address(user)
        f.purchasable(user)
        jobs.append((user, address.id, "ONCE"))

    results = _run_concurrently(file_engine, jobs)

    assert sum(1 for oid, _ in results if oid) == 1
    errors = [err for _, err in results if err]
    assert [e.reason for e in errors] == ["user_limit_reached"]
