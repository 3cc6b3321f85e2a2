"""Kargo politikası: en yeni aktif ShippingSetting, yoksa config'teki varsayılan."""
from dataclasses import dataclass

from sqlmodel import Session, select

from aesthco.core.config import settings
from aesthco.models import ShippingSetting


@dataclass(frozen=True)
class ShippingPolicy:
    threshold: int
    fee: int
    setting_id: int | None = None  # None = varsayılan


def default_policy() -> ShippingPolicy:
    return ShippingPolicy(
        threshold=settings.default_free_shipping_threshold,
        fee=settings.default_shipping_fee,
    )


def get_active_shipping_policy(db: Session) -> ShippingPolicy:
    row = db.exec(
        select(ShippingSetting)
        .where(ShippingSetting.is_active == True)  # noqa: E712
        .order_by(ShippingSetting.created_at.desc(), ShippingSetting.id.desc())
    ).first()
    if not row:
        return default_policy()
    return ShippingPolicy(threshold=row.free_shipping_threshold, fee=row.shipping_fee, setting_id=row.id)


def shipping_fee_for(subtotal: int, policy: ShippingPolicy) -> int:
    """Eşik ve üzeri ücretsiz."""
    return 0 if subtotal >= policy.threshold else policy.fee


def save_shipping_policy(db: Session, threshold: int, fee: int) -> ShippingSetting:
    """Yeni aktif kayıt ekler; öncekiler pasife çekilir (geçmiş korunur)."""
    for old in db.exec(select(ShippingSetting).where(ShippingSetting.is_active == True)).all():  # noqa: E712
        old.is_active = False
        db.add(old)
    row = ShippingSetting(free_shipping_threshold=threshold, shipping_fee=fee, is_active=True)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
