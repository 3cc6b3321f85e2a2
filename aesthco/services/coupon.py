"""Kupon uygunluk motoru: indirim hesabı ve kural kontrolleri.

validate_coupon iki modda çalışır:
- önizleme (lock=False): /coupons/validate ve /coupons/available, hiçbir şey yazmaz
- checkout (lock=True): sipariş transaction'ı içinde, kupon satırı kilitlenerek
  sayım + CouponRedemption kaydı aynı kilit altında kalır
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, or_
from sqlmodel import Session, select

from aesthco.core.errors import CouponNotFound, CouponRejected, InvalidInput, LimitReached
from aesthco.models import Coupon, CouponRedemption, DiscountType

log = logging.getLogger("aesthco.coupon")


@dataclass(frozen=True)
class Identity:
    """Kişi başı limit için kimlik; alanlardan herhangi biri eşleşen kullanım sayılır."""

    user_id: int | None = None
    email: str | None = None
    phone: str | None = None

    @classmethod
    def of(cls, user_id: int | None, email: str | None, phone: str | None) -> "Identity":
        email = (email or "").strip().lower() or None
        phone = (phone or "").strip() or None
        return cls(user_id=user_id, email=email, phone=phone)

    def is_empty(self) -> bool:
        return self.user_id is None and not self.email and not self.phone


@dataclass(frozen=True)
class CouponCheck:
    coupon: Coupon
    discount_amount: int


def normalize_code(code: str | None) -> str:
    code = (code or "").strip().upper()
    if not code:
        raise InvalidInput("Coupon code is required", code="coupon_code_required")
    return code


def compute_discount(coupon: Coupon, order_amount: int) -> int:
    """PERCENT: tutar * oran / 100 (aşağı yuvarlanır), FIXED: değer. Sonra tavan ve [0, tutar]."""
    if coupon.discount_type == DiscountType.PERCENT:
        discount = order_amount * coupon.discount_value // 100
    else:
        discount = coupon.discount_value
    if coupon.max_discount_amount is not None:
        discount = min(discount, coupon.max_discount_amount)
    return max(0, min(discount, order_amount))


def check_coupon_rules(coupon: Coupon, order_amount: int, now: datetime | None = None) -> None:
    """Sayım gerektirmeyen kurallar; ilk ihlalde CouponRejected."""
    now = now or datetime.utcnow()
    if not coupon.is_active:
        raise CouponRejected("Coupon is not active", "coupon_inactive")
    if coupon.start_at and now < coupon.start_at:
        raise CouponRejected("Coupon is not valid yet", "coupon_not_started")
    if coupon.end_at and now > coupon.end_at:
        raise CouponRejected("Coupon has expired", "coupon_expired")
    if order_amount <= 0:
        raise CouponRejected("Order amount must be greater than zero", "invalid_order_amount")
    if coupon.min_order_amount is not None and order_amount < coupon.min_order_amount:
        raise CouponRejected(
            f"Minimum order amount for this coupon is {coupon.min_order_amount}",
            "min_order_not_met",
        )


def get_coupon_by_code(db: Session, code: str, lock: bool = False) -> Coupon | None:
    stmt = select(Coupon).where(Coupon.code == code)
    if lock:
        # Postgres: satır kilidi. SQLite: FOR UPDATE yok sayılır, BEGIN IMMEDIATE zaten yazanları sıraya koyar.
        stmt = stmt.with_for_update()
    return db.exec(stmt).first()


def count_redemptions(db: Session, coupon_id: int) -> int:
    stmt = select(func.count()).select_from(CouponRedemption).where(CouponRedemption.coupon_id == coupon_id)
    return db.exec(stmt).one()


def _identity_filters(identity: Identity) -> list:
    filters = []
    if identity.user_id is not None:
        filters.append(CouponRedemption.user_id == identity.user_id)
    if identity.email:
        filters.append(func.lower(CouponRedemption.email) == identity.email)
    if identity.phone:
        filters.append(CouponRedemption.phone == identity.phone)
    return filters


def count_identity_redemptions(db: Session, coupon_id: int, identity: Identity) -> int:
    filters = _identity_filters(identity)
    if not filters:
        return 0
    stmt = (
        select(func.count())
        .select_from(CouponRedemption)
        .where(CouponRedemption.coupon_id == coupon_id, or_(*filters))
    )
    return db.exec(stmt).one()


def remaining_global(db: Session, coupon: Coupon) -> int | None:
    if coupon.global_max_redemptions is None:
        return None
    return max(0, coupon.global_max_redemptions - count_redemptions(db, coupon.id))


def validate_coupon(
    db: Session,
    code: str | None,
    identity: Identity,
    order_amount: int,
    lock: bool = False,
    now: datetime | None = None,
) -> CouponCheck:
    """
    Kuponu doğrular ve indirim tutarını döner.
    Hatalar: InvalidInput (boş kod / kimlik yok), CouponNotFound, CouponRejected, LimitReached.
    """
    code = normalize_code(code)
    if identity.is_empty():
        raise InvalidInput("A user id, email or phone is required to apply a coupon")

    coupon = get_coupon_by_code(db, code, lock=lock)
    if not coupon:
        raise CouponNotFound()

    check_coupon_rules(coupon, order_amount, now)

    if coupon.global_max_redemptions is not None:
        if count_redemptions(db, coupon.id) >= coupon.global_max_redemptions:
            raise LimitReached("Coupon usage limit has been reached", "global_limit_reached")

    if count_identity_redemptions(db, coupon.id, identity) >= coupon.per_user_limit:
        raise LimitReached("You have already used this coupon", "user_limit_reached")

    discount = compute_discount(coupon, order_amount)
    log.debug("coupon=%s amount=%s discount=%s lock=%s", coupon.code, order_amount, discount, lock)
    return CouponCheck(coupon=coupon, discount_amount=discount)


def list_available(db: Session, identity: Identity, now: datetime | None = None) -> list[Coupon]:
    """Aktif, tarih aralığında, global ve kişi başı limiti dolmamış kuponlar."""
    now = now or datetime.utcnow()
    stmt = (
        select(Coupon)
        .where(Coupon.is_active == True)  # noqa: E712
        .where(or_(Coupon.start_at == None, Coupon.start_at <= now))  # noqa: E711
        .where(or_(Coupon.end_at == None, Coupon.end_at >= now))  # noqa: E711
        .order_by(Coupon.created_at.desc())
    )
    out: list[Coupon] = []
    for coupon in db.exec(stmt).all():
        left = remaining_global(db, coupon)
        if left is not None and left <= 0:
            continue
        if count_identity_redemptions(db, coupon.id, identity) >= coupon.per_user_limit:
            continue
        out.append(coupon)
    return out
