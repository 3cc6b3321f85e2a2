"""Kupon istek/yanıt modelleri. Yönetim formları alan alan doğrulanır; serbest dict kabul edilmez."""
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from aesthco.models.coupon import CouponType, DiscountType


def check_coupon_values(
    discount_type: str,
    discount_value: int,
    start_at: datetime | None,
    end_at: datetime | None,
) -> None:
    """Birleşik (create veya mevcut + güncelleme) değerler için ortak kurallar."""
    if discount_value <= 0:
        raise ValueError("discount_value must be greater than 0.")
    if discount_type == DiscountType.PERCENT and discount_value > 100:
        raise ValueError("Percent discount cannot exceed 100.")
    if start_at and end_at and start_at > end_at:
        raise ValueError("start_at must be before end_at.")


def _naive_utc(v: datetime | None) -> datetime | None:
    # Saatler DB'de naive UTC tutulur; offset'li girdi UTC'ye çevrilip tz atılır
    if v is not None and v.tzinfo is not None:
        return v.astimezone(timezone.utc).replace(tzinfo=None)
    return v


def _clean_code(v: str) -> str:
    v = (v or "").strip().upper()
    if not v:
        raise ValueError("Coupon code is required.")
    return v


def _upper_choice(v: str, allowed: tuple[str, ...], field: str) -> str:
    v = (v or "").strip().upper()
    if v not in allowed:
        raise ValueError(f"{field} must be one of: {', '.join(allowed)}.")
    return v


class CouponCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str = Field(max_length=50)
    type: str = CouponType.OTHER
    discount_type: str
    discount_value: int
    start_at: datetime | None = None
    end_at: datetime | None = None
    global_max_redemptions: int | None = Field(default=None, ge=1)
    per_user_limit: int = Field(default=1, ge=1)
    is_active: bool = True
    min_order_amount: int | None = Field(default=None, ge=0)
    max_discount_amount: int | None = Field(default=None, gt=0)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return _clean_code(v)

    @field_validator("type")
    @classmethod
    def known_type(cls, v: str) -> str:
        return _upper_choice(v, CouponType.ALL, "type")

    @field_validator("discount_type")
    @classmethod
    def known_discount_type(cls, v: str) -> str:
        return _upper_choice(v, DiscountType.ALL, "discount_type")

    @field_validator("start_at", "end_at")
    @classmethod
    def to_naive_utc(cls, v: datetime | None) -> datetime | None:
        return _naive_utc(v)

    @model_validator(mode="after")
    def check_values(self):
        check_coupon_values(self.discount_type, self.discount_value, self.start_at, self.end_at)
        return self


class CouponUpdate(BaseModel):
    """Kısmi güncelleme: sadece gönderilen alanlar değişir (exclude_unset)."""

    model_config = ConfigDict(extra="forbid")

    code: str | None = Field(default=None, max_length=50)
    type: str | None = None
    discount_type: str | None = None
    discount_value: int | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    global_max_redemptions: int | None = Field(default=None, ge=1)
    per_user_limit: int | None = Field(default=None, ge=1)
    is_active: bool | None = None
    min_order_amount: int | None = Field(default=None, ge=0)
    max_discount_amount: int | None = Field(default=None, gt=0)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str | None) -> str | None:
        return None if v is None else _clean_code(v)

    @field_validator("type")
    @classmethod
    def known_type(cls, v: str | None) -> str | None:
        return None if v is None else _upper_choice(v, CouponType.ALL, "type")

    @field_validator("discount_type")
    @classmethod
    def known_discount_type(cls, v: str | None) -> str | None:
        return None if v is None else _upper_choice(v, DiscountType.ALL, "discount_type")

    @field_validator("start_at", "end_at")
    @classmethod
    def to_naive_utc(cls, v: datetime | None) -> datetime | None:
        return _naive_utc(v)

    @field_validator("code", "type", "discount_type", "discount_value", "per_user_limit", "is_active", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null.")
        return v


class CouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    type: str
    discount_type: str
    discount_value: int
    start_at: datetime | None = None
    end_at: datetime | None = None
    global_max_redemptions: int | None = None
    per_user_limit: int
    is_active: bool
    min_order_amount: int | None = None
    max_discount_amount: int | None = None
    redemption_count: int | None = None


class CouponValidateRequest(BaseModel):
    code: str
    order_amount: int


class CouponValidateResponse(BaseModel):
    coupon: CouponResponse
    discount_amount: int
    remaining_global: int | None = None  # None = sınırsız
