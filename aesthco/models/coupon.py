"""İndirim kuponu ve kullanım defteri (CouponRedemption)."""
from datetime import datetime

from sqlmodel import Field, SQLModel


class CouponType:
    WELCOME = "WELCOME"
    SEASONAL = "SEASONAL"
    OTHER = "OTHER"

    ALL = (WELCOME, SEASONAL, OTHER)


class DiscountType:
    PERCENT = "PERCENT"
    FIXED = "FIXED"

    ALL = (PERCENT, FIXED)


class Coupon(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    code: str = Field(unique=True, index=True, max_length=50)  # trim + upper
    type: str = Field(default=CouponType.OTHER, max_length=16)
    discount_type: str = Field(max_length=16)  # "PERCENT" | "FIXED"
    discount_value: int  # PERCENT: 1-100, FIXED: paise
    start_at: datetime | None = None
    end_at: datetime | None = None
    global_max_redemptions: int | None = None  # null = sınırsız
    per_user_limit: int = 1
    is_active: bool = True
    min_order_amount: int | None = None
    max_discount_amount: int | None = None
    created_at: datetime | None = Field(default_factory=datetime.utcnow)
    updated_at: datetime | None = Field(default_factory=datetime.utcnow)


class CouponRedemption(SQLModel, table=True):
    """Tüketilen her kullanım; sipariş ile aynı transaction'da yazılır, asla güncellenmez/silinmez."""

    id: int | None = Field(default=None, primary_key=True)
    coupon_id: int = Field(foreign_key="coupon.id", index=True)
    # Kimlik: üçünden herhangi biri eşleşirse kişi başı limite sayılır
    user_id: int | None = Field(default=None, index=True)
    email: str | None = Field(default=None, index=True)
    phone: str | None = Field(default=None, index=True)
    order_id: str | None = Field(default=None, foreign_key="orders.id", index=True)
    discount_amount: int
    redeemed_at: datetime = Field(default_factory=datetime.utcnow)
