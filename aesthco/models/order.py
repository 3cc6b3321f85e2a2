"""Sipariş: sepetten bir kez oluşturulur; sonradan sadece status, payment_status,
assigned_partner_id ve shipping_label değişir. Kalemler (OrderItem) donmuş kopyadır."""
from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class OrderStatus(str, Enum):
    PLACED = "PLACED"
    CONFIRMED = "CONFIRMED"
    PACKED = "PACKED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    RETURN_REQUESTED = "RETURN_REQUESTED"
    RETURNED = "RETURNED"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


PAYMENT_METHOD_COD = "COD"


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(primary_key=True, max_length=32)  # OD20251
    user_id: int = Field(foreign_key="user.id", index=True)
    assigned_partner_id: int | None = Field(default=None, foreign_key="user.id", index=True)
    status: str = Field(default=OrderStatus.PLACED.value, index=True)
    payment_method: str = PAYMENT_METHOD_COD  # sadece kapıda ödeme
    payment_status: str = PaymentStatus.PENDING.value
    # Tutarlar paise cinsinden; total = max(0, subtotal + shipping_fee - discount_amount)
    subtotal: int
    shipping_fee: int = 0
    discount_amount: int = 0
    coupon_id: int | None = Field(default=None, foreign_key="coupon.id")
    coupon_code: str | None = None
    total: int
    shipping_label: dict | None = Field(default=None, sa_column=Column(JSON))
    # Adres kopyası (sipariş anındaki hali)
    address_name: str
    address_phone: str | None = None
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    postal_code: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime | None = Field(default_factory=datetime.utcnow)


class OrderItem(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    order_id: str = Field(foreign_key="orders.id", index=True)
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
    unit_price: int  # satın alma anındaki fiyat
    total_price: int
    image_url: str | None = None


class OrderSequence(SQLModel, table=True):
    """Sipariş numarası sayacı: tek satır, atomik UPDATE ile artırılır."""

    name: str = Field(primary_key=True, max_length=32)
    last_value: int
