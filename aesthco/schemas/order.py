from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from aesthco.models.order import OrderStatus


class CreateOrderRequest(BaseModel):
    address_id: int = Field(validation_alias=AliasChoices("address_id", "addressId"))
    coupon_code: str | None = Field(
        default=None, validation_alias=AliasChoices("coupon_code", "couponCode")
    )

    @field_validator("coupon_code")
    @classmethod
    def blank_is_none(cls, v: str | None) -> str | None:
        return (v or "").strip() or None


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    product_name: str
    product_slug: str | None = None
    variant_id: int | None = None
    color_id: int | None = None
    size_id: int | None = None
    color_name: str | None = None
    size_name: str | None = None
    sku: str | None = None
    quantity: int
    unit_price: int
    total_price: int
    image_url: str | None = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: int
    assigned_partner_id: int | None = None
    status: str
    payment_method: str
    payment_status: str
    subtotal: int
    shipping_fee: int
    discount_amount: int
    coupon_code: str | None = None
    total: int
    address_name: str
    address_phone: str | None = None
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    postal_code: str | None = None
    shipping_label: dict | None = None
    created_at: datetime
    items: list[OrderItemResponse] = []


class PartnerStatusUpdate(BaseModel):
    status: OrderStatus


class ShippingSettingRequest(BaseModel):
    free_shipping_threshold: int = Field(ge=0)
    shipping_fee: int = Field(ge=0)


class ShippingSettingResponse(BaseModel):
    id: int | None = None  # None = ayar yok, varsayılan kullanılıyor
    free_shipping_threshold: int
    shipping_fee: int
