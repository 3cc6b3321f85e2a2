"""Katalog okuma: sepet satırlarını ürün, varyant (renk/beden) ve görsellerle birlikte yükler.

Dönen yapılar dondurulmuş dataclass'lardır; snapshot oluşturucu veritabanına dokunmaz.
"""
from dataclasses import dataclass

from sqlalchemy import func
from sqlmodel import Session, select

from aesthco.models import CartItem, Color, Product, ProductImage, ProductVariant, Size


@dataclass(frozen=True)
class VariantInfo:
    id: int
    color_id: int | None
    size_id: int | None
    sku: str
    stock_quantity: int
    base_price: int
    sale_price: int | None
    is_available: bool
    color_name: str | None = None
    size_code: str | None = None
    size_label: str | None = None


@dataclass(frozen=True)
class ImageInfo:
    image_url: str
    color_id: int | None = None


@dataclass(frozen=True)
class ProductInfo:
    id: int
    name: str
    slug: str
    is_active: bool
    variants: tuple[VariantInfo, ...] = ()
    images: tuple[ImageInfo, ...] = ()  # sıralı: birincil önce, sonra sort_order


@dataclass(frozen=True)
class CartLine:
    id: int
    product_id: int
    color_id: int | None
    size_id: int | None
    quantity: int
    product: ProductInfo | None = None  # None = ürün silinmiş
    color_name: str | None = None
    size_label: str | None = None


def _load_products(db: Session, product_ids: set[int]) -> dict[int, ProductInfo]:
    if not product_ids:
        return {}
    products = db.exec(select(Product).where(Product.id.in_(product_ids))).all()

    variant_rows = db.exec(
        select(ProductVariant, Color, Size)
        .join(Color, ProductVariant.color_id == Color.id, isouter=True)
        .join(Size, ProductVariant.size_id == Size.id, isouter=True)
        .where(ProductVariant.product_id.in_(product_ids))
        .order_by(ProductVariant.id)
    ).all()
    variants: dict[int, list[VariantInfo]] = {}
    for v, color, size in variant_rows:
        variants.setdefault(v.product_id, []).append(
            VariantInfo(
                id=v.id,
                color_id=v.color_id,
                size_id=v.size_id,
                sku=v.sku,
                stock_quantity=v.stock_quantity or 0,
                base_price=v.base_price,
                sale_price=v.sale_price,
                is_available=bool(v.is_available),
                color_name=color.name if color else None,
                size_code=size.code if size else None,
                size_label=size.label if size else None,
            )
        )

    image_rows = db.exec(
        select(ProductImage)
        .where(ProductImage.product_id.in_(product_ids))
        .order_by(
            ProductImage.is_primary.desc(),
            func.coalesce(ProductImage.sort_order, 0),
            ProductImage.id,
        )
    ).all()
    images: dict[int, list[ImageInfo]] = {}
    for img in image_rows:
        images.setdefault(img.product_id, []).append(ImageInfo(image_url=img.image_url, color_id=img.color_id))

    return {
        p.id: ProductInfo(
            id=p.id,
            name=p.name,
            slug=p.slug,
            is_active=bool(p.is_active),
            variants=tuple(variants.get(p.id, ())),
            images=tuple(images.get(p.id, ())),
        )
        for p in products
    }


def get_cart_lines_with_catalog(db: Session, user_id: int) -> list[CartLine]:
    items = db.exec(select(CartItem).where(CartItem.user_id == user_id).order_by(CartItem.id)).all()
    if not items:
        return []
    products = _load_products(db, {i.product_id for i in items})

    color_ids = {i.color_id for i in items if i.color_id is not None}
    size_ids = {i.size_id for i in items if i.size_id is not None}
    colors = {c.id: c.name for c in db.exec(select(Color).where(Color.id.in_(color_ids))).all()} if color_ids else {}
    sizes = {s.id: s.label or s.code for s in db.exec(select(Size).where(Size.id.in_(size_ids))).all()} if size_ids else {}

    return [
        CartLine(
            id=i.id,
            product_id=i.product_id,
            color_id=i.color_id,
            size_id=i.size_id,
            quantity=i.quantity,
            product=products.get(i.product_id),
            color_name=colors.get(i.color_id),
            size_label=sizes.get(i.size_id),
        )
        for i in items
    ]
