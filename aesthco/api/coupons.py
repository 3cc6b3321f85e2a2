"""Kupon uçları: yönetim (super-admin) ve müşteri önizlemesi (kilit yok, yazma yok)."""
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from aesthco.api.deps import require_customer, require_super_admin
from aesthco.core.database import get_db
from aesthco.core.errors import InvalidInput, NotFound, StateConflict
from aesthco.models import Coupon, CouponRedemption, User
from aesthco.schemas import (
    CouponCreate,
    CouponResponse,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidateResponse,
)
from aesthco.schemas.coupon import check_coupon_values
from aesthco.services.coupon import Identity, list_available, remaining_global, validate_coupon

router = APIRouter(prefix="/coupons", tags=["coupons"])


def _coupon_response(c: Coupon, redemption_count: int | None = None) -> CouponResponse:
    resp = CouponResponse.model_validate(c)
    resp.redemption_count = redemption_count
    return resp


def _identity(user: User) -> Identity:
    return Identity.of(user.id, user.email, user.phone_number)


def _code_taken(db: Session, code: str, exclude_id: int | None = None) -> bool:
    stmt = select(Coupon).where(Coupon.code == code)
    if exclude_id is not None:
        stmt = stmt.where(Coupon.id != exclude_id)
    return db.exec(stmt).first() is not None


def _commit_unique(db: Session) -> None:
    """Ön kontrolü geçip unique kısıtına takılan eşzamanlı aynı kod 409 olur."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise StateConflict("A coupon with this code already exists", code="duplicate_coupon")


# ---------- Yönetim ----------
@router.post("/admin", response_model=CouponResponse, status_code=201)
def create_coupon(
    body: CouponCreate,
    _: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    if _code_taken(db, body.code):
        raise StateConflict("A coupon with this code already exists", code="duplicate_coupon")
    coupon = Coupon(**body.model_dump())
    db.add(coupon)
    _commit_unique(db)
    db.refresh(coupon)
    return _coupon_response(coupon, 0)


@router.get("/admin", response_model=list[CouponResponse])
def list_coupons(_: User = Depends(require_super_admin), db: Session = Depends(get_db)):
    counts = dict(
        db.exec(
            select(CouponRedemption.coupon_id, func.count()).group_by(CouponRedemption.coupon_id)
        ).all()
    )
    rows = db.exec(select(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc())).all()
    return [_coupon_response(c, counts.get(c.id, 0)) for c in rows]


@router.patch("/admin/{coupon_id}", response_model=CouponResponse)
def update_coupon(
    coupon_id: int,
    body: CouponUpdate,
    _: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    coupon = db.get(Coupon, coupon_id)
    if not coupon:
        raise NotFound("Coupon not found", code="coupon_not_found")
    changes = body.model_dump(exclude_unset=True)
    if "code" in changes and _code_taken(db, changes["code"], exclude_id=coupon_id):
        raise StateConflict("A coupon with this code already exists", code="duplicate_coupon")
    merged = {**coupon.model_dump(), **changes}
    try:
        check_coupon_values(
            merged["discount_type"], merged["discount_value"], merged["start_at"], merged["end_at"]
        )
    except ValueError as e:
        raise InvalidInput(str(e))
    for key, value in changes.items():
        setattr(coupon, key, value)
    coupon.updated_at = datetime.utcnow()
    db.add(coupon)
    _commit_unique(db)
    db.refresh(coupon)
    return _coupon_response(coupon)


# ---------- Müşteri ----------
@router.post("/validate", response_model=CouponValidateResponse)
def preview_coupon(
    body: CouponValidateRequest,
    user: User = Depends(require_customer),
    db: Session = Depends(get_db),
):
    check = validate_coupon(db, body.code, _identity(user), body.order_amount)
    return CouponValidateResponse(
        coupon=_coupon_response(check.coupon),
        discount_amount=check.discount_amount,
        remaining_global=remaining_global(db, check.coupon),
    )


@router.get("/available", response_model=list[CouponResponse])
def available_coupons(user: User = Depends(require_customer), db: Session = Depends(get_db)):
    return [_coupon_response(c) for c in list_available(db, _identity(user))]
