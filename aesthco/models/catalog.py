"""Katalog: ürün, renk/beden varyantları ve görseller. Fiyatlar paise (en küçük birim) cinsinden."""
from datetime import datetime

from sqlmodel import Field, SQLModel


class Color(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True)
    code: str | None = None  # hex, örn. #000000


class Size(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    code: str = Field(unique=True)  # S, M, L, XL
    label: str | None = None
    sort_order: int = 0


class Product(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str
    slug: str = Field(unique=True, index=True)
    is_active: bool = True  # False = soft delete
    created_at: datetime | None = Field(default_factory=datetime.utcnow)


class ProductVariant(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="product.id", index=True)
    color_id: int | None = Field(default=None, foreign_key="color.id")
    size_id: int | None = Field(default=None, foreign_key="size.id")
    sku: str = Field(unique=True)
    stock_quantity: int = 0
    base_price: int
    sale_price: int | None = None  # >0 ise base_price yerine kullanılır
    is_available: bool = True


class ProductImage(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="product.id", index=True)
    color_id: int | None = Field(default=None, foreign_key="color.id")
    image_url: str
    is_primary: bool = False
    sort_order: int | None = None
